"""
Management command to work out invoice totals offline.

    python manage.py invoice_totals --line 12:2:499.50 --line 7:1:120 --discount 10 --roundoff -0.40
"""
from django.core.management.base import BaseCommand, CommandError

from frontend.pos.totals import DISCOUNT_AMOUNT, DISCOUNT_PERCENT, DiscountSpec, LineItem, RoundoffSpec, compute_totals


def parse_line(value):
    parts = value.split(':')
    if len(parts) != 3:
        raise CommandError(f"Bad --line {value!r}, expected product:quantity:unit_price")
    product_id, quantity, unit_price = parts
    return LineItem(product_id=product_id.strip() or None, quantity=quantity, unit_price=unit_price)


class Command(BaseCommand):
    help = 'Compute subtotal, discount and grand total for a set of invoice lines'

    def add_arguments(self, parser):
        parser.add_argument('--line', action='append', default=[], help='product:quantity:unit_price (repeatable)')
        parser.add_argument('--discount-type', choices=[DISCOUNT_PERCENT, DISCOUNT_AMOUNT, 'fixed'], default=DISCOUNT_PERCENT)
        parser.add_argument('--discount', default='', help='Discount value (percent or amount)')
        parser.add_argument('--roundoff', default='', help='Signed roundoff, e.g. -0.40')

    def handle(self, *args, **options):
        lines = [parse_line(value) for value in options['line']]
        totals = compute_totals(
            lines,
            DiscountSpec(options['discount_type'], options['discount']),
            RoundoffSpec(options['roundoff']),
        )
        display = totals.display()
        self.stdout.write(f"Subtotal:    {display['subtotal']}")
        self.stdout.write(f"Discount:    {display['discount_amount']}")
        self.stdout.write(f"Roundoff:    {display['roundoff']}")
        self.stdout.write(self.style.SUCCESS(f"Grand total: {display['grand_total']}"))
