from rest_framework import serializers


class PartyFormSerializer(serializers.Serializer):
    name = serializers.CharField()
    phone = serializers.CharField(required=False, allow_blank=True, default='')
    email = serializers.EmailField(required=False, allow_blank=True, default='')
    address = serializers.CharField(required=False, allow_blank=True, default='')
    active = serializers.BooleanField(default=True)

    def to_payload(self, store_id=None):
        data = {k: (v.strip() or None) if isinstance(v, str) else v for k, v in self.validated_data.items()}
        if store_id is not None:
            data['store_id'] = store_id
        return data


class VendorFormSerializer(PartyFormSerializer):
    name = serializers.CharField(error_messages={'blank': 'Vendor name is required'})


class CustomerFormSerializer(PartyFormSerializer):
    name = serializers.CharField(error_messages={'blank': 'Customer name is required'})
    phone = serializers.CharField(error_messages={'blank': 'Customer phone is required'})
