"""
Money helpers shared by invoice and purchase totals.

Numeric form fields are permissive: blank or malformed input counts as zero
instead of raising, so a half-typed price never blocks the billing screen.
Rounding to two places happens only when a value is formatted.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

ZERO = Decimal('0')
TWO_PLACES = Decimal('0.01')


def to_decimal(value):
    """
    Coerce a form value to Decimal.

    Accepts Decimal, int, float, str or None. Anything that does not parse
    to a finite number becomes Decimal('0').
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, float):
        # str() keeps 0.1 as 0.1 instead of its binary expansion
        value = str(value)
    try:
        result = Decimal(str(value).strip())
    except (ValueError, TypeError, InvalidOperation):
        return ZERO
    if not result.is_finite():
        return ZERO
    return result


def quantize_money(value):
    """Round to 2 decimal places, half up"""
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def format_money(value):
    """Format for display or submission, e.g. '89.60'"""
    return f"{quantize_money(value):.2f}"


def is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())
