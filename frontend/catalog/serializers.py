from decimal import Decimal, InvalidOperation

from rest_framework import serializers

from frontend.core.money import ZERO, format_money, is_blank


class NonNegativeDecimalField(serializers.Field):
    """Blank means zero; anything else must be a number >= 0"""
    default_error_messages = {
        'invalid': 'Enter a valid number',
        'negative': 'Must be zero or more',
    }

    def __init__(self, **kwargs):
        kwargs.setdefault('required', False)
        kwargs.setdefault('default', ZERO)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        if is_blank(data):
            return ZERO
        try:
            number = Decimal(str(data).strip())
        except (ValueError, InvalidOperation):
            self.fail('invalid')
        if not number.is_finite():
            self.fail('invalid')
        if number < ZERO:
            self.fail('negative')
        return number

    def to_representation(self, value):
        return format_money(value)


class ProductFormSerializer(serializers.Serializer):
    name = serializers.CharField(error_messages={'blank': 'Product name is required'})
    description = serializers.CharField(required=False, allow_blank=True, default='')
    sku = serializers.CharField(required=False, allow_blank=True, default='')
    barcode = serializers.CharField(required=False, allow_blank=True, default='')
    purchase_price = NonNegativeDecimalField()
    selling_price = NonNegativeDecimalField()
    current_stock = NonNegativeDecimalField()
    vendor_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    active = serializers.BooleanField(default=True)

    def validate_current_stock(self, value):
        if value != value.to_integral_value():
            raise serializers.ValidationError('Stock must be a whole number')
        return value

    def to_payload(self):
        data = dict(self.validated_data)
        data['purchase_price'] = format_money(data['purchase_price'])
        data['selling_price'] = format_money(data['selling_price'])
        data['current_stock'] = int(data['current_stock'])
        for key in ('description', 'sku', 'barcode'):
            data[key] = data[key].strip() or None
        return data
