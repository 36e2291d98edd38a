"""
Billing total engine for invoices.

    subtotal      = sum(quantity * unit_price) over lines with a product
    discount      = subtotal * value / 100  (percent)  |  value  (amount)
    base          = max(0, subtotal - discount)
    grand_total   = base + roundoff

The zero floor applies to the discounted amount only. Roundoff is added
after the floor and may be negative, so it can still take the total below
zero. Nothing here raises: blank or malformed numbers count as zero, a
negative discount is ignored, and nothing is rounded until a value is
formatted.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from frontend.core.money import ZERO, format_money, is_blank, quantize_money, to_decimal

DISCOUNT_PERCENT = 'percent'
DISCOUNT_AMOUNT = 'amount'

DISCOUNT_TYPE_CHOICES = [
    (DISCOUNT_PERCENT, 'Percent'),
    (DISCOUNT_AMOUNT, 'Amount'),
]

# 'fixed' is what some callers call an amount discount
DISCOUNT_TYPE_ALIASES = {
    'percent': DISCOUNT_PERCENT,
    '%': DISCOUNT_PERCENT,
    'amount': DISCOUNT_AMOUNT,
    'fixed': DISCOUNT_AMOUNT,
}

HUNDRED = Decimal('100')
PERCENT_MATCH_TOLERANCE = Decimal('0.01')


@dataclass
class LineItem:
    """One row of an invoice or purchase form. Lives only in form state."""
    product_id: Any = None
    quantity: Any = 1
    unit_price: Any = '0'

    @classmethod
    def from_data(cls, data):
        if isinstance(data, LineItem):
            return data
        return cls(
            product_id=data.get('product_id'),
            quantity=data.get('quantity'),
            unit_price=data.get('unit_price'),
        )

    @property
    def is_complete(self):
        return not is_blank(self.product_id)

    @property
    def line_total(self):
        return to_decimal(self.quantity) * to_decimal(self.unit_price)


@dataclass
class DiscountSpec:
    type: str = DISCOUNT_PERCENT
    value: Any = ''

    def __post_init__(self):
        self.type = normalize_discount_type(self.type)

    @property
    def is_percent(self):
        return self.type == DISCOUNT_PERCENT


@dataclass
class RoundoffSpec:
    amount: Any = ''


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    discount_amount: Decimal
    roundoff: Decimal
    grand_total: Decimal

    @property
    def base_total(self):
        return max(ZERO, self.subtotal - self.discount_amount)

    def display(self):
        return {
            'subtotal': format_money(self.subtotal),
            'discount_amount': format_money(self.discount_amount),
            'roundoff': format_money(self.roundoff),
            'grand_total': format_money(self.grand_total),
        }

    def as_payload(self):
        """Fields sent with an invoice: only a positive discount and a non-zero roundoff"""
        payload = {}
        if quantize_money(self.discount_amount) > ZERO:
            payload['discount_total'] = format_money(self.discount_amount)
        if quantize_money(self.roundoff) != ZERO:
            payload['roundoff'] = format_money(self.roundoff)
        return payload


def normalize_discount_type(value):
    return DISCOUNT_TYPE_ALIASES.get(str(value or '').strip().lower(), DISCOUNT_AMOUNT)


def valid_lines(lines):
    """(index, line) pairs that can be submitted: product chosen and quantity above zero"""
    result = []
    for idx, data in enumerate(lines or []):
        line = LineItem.from_data(data)
        if line.is_complete and to_decimal(line.quantity) > ZERO:
            result.append((idx, line))
    return result


def compute_subtotal(lines):
    """Sum of quantity * unit_price, skipping lines with no product"""
    subtotal = ZERO
    for data in lines or []:
        line = LineItem.from_data(data)
        if not line.is_complete:
            continue
        subtotal += line.line_total
    return subtotal


def compute_discount_amount(subtotal, discount: Optional[DiscountSpec]):
    if discount is None or is_blank(discount.value):
        return ZERO
    value = to_decimal(discount.value)
    if value <= ZERO:
        return ZERO
    if discount.is_percent:
        return to_decimal(subtotal) * value / HUNDRED
    return value


def compute_roundoff(roundoff: Optional[RoundoffSpec]):
    if roundoff is None or is_blank(roundoff.amount):
        return ZERO
    return to_decimal(roundoff.amount)


def compute_grand_total(subtotal, discount: Optional[DiscountSpec] = None,
                        roundoff: Optional[RoundoffSpec] = None) -> Totals:
    subtotal = to_decimal(subtotal)
    discount_amount = compute_discount_amount(subtotal, discount)
    roundoff_amount = compute_roundoff(roundoff)
    base = max(ZERO, subtotal - discount_amount)
    return Totals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        roundoff=roundoff_amount,
        grand_total=base + roundoff_amount,
    )


def compute_totals(lines, discount=None, roundoff=None) -> Totals:
    return compute_grand_total(compute_subtotal(lines), discount, roundoff)


def infer_discount_spec(subtotal, discount_total):
    """
    Rebuild the discount field when editing a saved invoice.

    The server stores only the discount amount. If it is a whole percentage
    of the subtotal it is shown as a percent, otherwise as an amount.
    """
    subtotal = to_decimal(subtotal)
    discount_total = to_decimal(discount_total)
    if discount_total <= ZERO or subtotal <= ZERO:
        return None

    percent = discount_total / subtotal * HUNDRED
    if abs(percent - percent.to_integral_value()) < PERCENT_MATCH_TOLERANCE:
        return DiscountSpec(DISCOUNT_PERCENT, format_money(percent))
    return DiscountSpec(DISCOUNT_AMOUNT, format_money(discount_total))
