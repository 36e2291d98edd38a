from rest_framework import serializers


class StoreFormSerializer(serializers.Serializer):
    name = serializers.CharField(error_messages={'blank': 'Store name and code are required'})
    code = serializers.CharField(max_length=50, error_messages={'blank': 'Store name and code are required'})
    address = serializers.CharField(required=False, allow_blank=True, default='')
    phone = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_code(self, value):
        """Store codes are always upper case"""
        return value.strip().upper()

    def to_payload(self):
        return dict(self.validated_data)
