from datetime import datetime, time, timezone

from rest_framework import serializers

from frontend.core.money import is_blank, to_decimal
from .totals import (
    DISCOUNT_PERCENT, DISCOUNT_TYPE_ALIASES, DISCOUNT_TYPE_CHOICES, DiscountSpec, RoundoffSpec,
    compute_totals, valid_lines,
)


class LineItemSerializer(serializers.Serializer):
    """A form row. Rows without a product are accepted and skipped when totalling."""
    product_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    quantity = serializers.IntegerField(required=False, min_value=0, default=1)
    unit_price = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='0')
    tax_percent = serializers.CharField(required=False, allow_blank=True, default='0')

    def to_internal_value(self, data):
        # An untouched row has an empty product picker and possibly an empty quantity box.
        # A quantity that is not a positive number becomes 0 and the row is skipped.
        if isinstance(data, dict):
            data = dict(data)
            if is_blank(data.get('product_id')):
                data['product_id'] = None
            if 'quantity' in data:
                data['quantity'] = max(int(to_decimal(data['quantity'])), 0)
        return super().to_internal_value(data)


class InvoiceFormSerializer(serializers.Serializer):
    """
    New/edit invoice form.

    context:
        products: optional {product_id: product} used for the stock check
        existing_customer: optional customer found by phone
    """
    customer_name = serializers.CharField(required=False, allow_blank=True, default='')
    customer_phone = serializers.CharField(required=False, allow_blank=True, default='')
    items = LineItemSerializer(many=True)
    discount_type = serializers.ChoiceField(choices=DISCOUNT_TYPE_CHOICES, default=DISCOUNT_PERCENT)
    discount_value = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='')
    roundoff = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='')
    payment_method = serializers.CharField(required=False, allow_blank=True, default='cash')
    billed_at = serializers.DateField(required=False, allow_null=True, default=None)

    def to_internal_value(self, data):
        # 'fixed' and '%' are accepted spellings of the two discount types
        if isinstance(data, dict):
            alias = DISCOUNT_TYPE_ALIASES.get(str(data.get('discount_type') or '').strip().lower())
            if alias:
                data = dict(data)
                data['discount_type'] = alias
        return super().to_internal_value(data)

    def validate(self, attrs):
        lines = valid_lines(attrs['items'])
        if not lines:
            raise serializers.ValidationError({'items': 'Add at least one product'})
        if not attrs['customer_name'].strip() or not attrs['customer_phone'].strip():
            raise serializers.ValidationError({'customer': 'Customer name and phone are required'})

        products = self.context.get('products') or {}
        for idx, line in lines:
            product = products.get(line.product_id) or products.get(str(line.product_id))
            if not product:
                continue
            available = to_decimal(product.get('current_stock'))
            if to_decimal(line.quantity) > available:
                raise serializers.ValidationError({'items': {
                    idx: f'Insufficient stock for "{product.get("name")}". '
                         f'Available: {product.get("current_stock")}, Required: {line.quantity}'
                }})
        return attrs

    @property
    def totals(self):
        data = self.validated_data
        return compute_totals(
            data['items'],
            DiscountSpec(data['discount_type'], data.get('discount_value')),
            RoundoffSpec(data.get('roundoff')),
        )

    def to_payload(self, store_id=None):
        data = self.validated_data
        payload = {
            'customer_name': data['customer_name'].strip() or None,
            'customer_phone': data['customer_phone'].strip() or None,
            'payment_method': data.get('payment_method') or 'cash',
            'invoice_items_attributes': [
                {
                    'product_id': line.product_id,
                    'quantity': int(line.quantity),
                    'unit_price': line.unit_price or '0',
                    'tax_percent': '0',
                }
                for _, line in valid_lines(data['items'])
            ],
        }
        payload.update(self.totals.as_payload())

        existing = self.context.get('existing_customer')
        if existing and existing.get('name') != payload['customer_name']:
            payload['update_customer_name'] = True

        if data.get('billed_at'):
            payload['billed_at'] = datetime.combine(data['billed_at'], time.min, tzinfo=timezone.utc).isoformat()
        if store_id is not None:
            payload['store_id'] = store_id
        return {k: v for k, v in payload.items() if v is not None}
