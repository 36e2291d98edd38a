from rest_framework import serializers

from frontend.core.money import ZERO, format_money, to_decimal
from frontend.pos.serializers import LineItemSerializer
from frontend.pos.totals import valid_lines
from .utils import compute_purchase_totals


class PaymentSerializer(serializers.Serializer):
    amount = serializers.CharField()
    payment_method = serializers.CharField(required=False, allow_blank=True, default='')
    note = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_amount(self, value):
        if to_decimal(value) <= ZERO:
            raise serializers.ValidationError('Payment amount must be greater than zero')
        return value

    def to_payload(self):
        data = self.validated_data
        payload = {'amount': format_money(data['amount'])}
        if data.get('payment_method'):
            payload['payment_method'] = data['payment_method']
        if data.get('note', '').strip():
            payload['note'] = data['note'].strip()
        return payload


class PurchaseFormSerializer(serializers.Serializer):
    vendor_id = serializers.IntegerField(error_messages={'null': 'Select a vendor', 'required': 'Select a vendor'})
    note = serializers.CharField(required=False, allow_blank=True, default='')
    items = LineItemSerializer(many=True)
    paid_amount = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='')
    payment_method = serializers.CharField(required=False, allow_blank=True, default='cash')
    payment_note = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if not valid_lines(attrs['items']):
            raise serializers.ValidationError({'items': 'Add at least one product'})
        return attrs

    @property
    def totals(self):
        data = self.validated_data
        return compute_purchase_totals(data['items'], data.get('paid_amount'))

    def to_payload(self, store_id=None):
        data = self.validated_data
        payload = {
            'vendor_id': data['vendor_id'],
            'purchase_items_attributes': [
                {
                    'product_id': line.product_id,
                    'quantity': int(line.quantity),
                    'unit_price': line.unit_price or '0',
                    'tax_percent': '0',
                }
                for _, line in valid_lines(data['items'])
            ],
        }
        if data.get('note', '').strip():
            payload['note'] = data['note'].strip()

        paid = self.totals.paid
        if paid > ZERO:
            payment = {'amount': format_money(paid)}
            if data.get('payment_method'):
                payment['payment_method'] = data['payment_method']
            if data.get('payment_note', '').strip():
                payment['note'] = data['payment_note'].strip()
            payload['payment'] = payment

        if store_id is not None:
            payload['store_id'] = store_id
        return payload
