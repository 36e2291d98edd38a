"""Purchase totals. Purchases carry no discount or roundoff: grand total is the subtotal."""
from dataclasses import dataclass
from decimal import Decimal

from frontend.core.money import format_money, to_decimal
from frontend.pos.totals import compute_subtotal


@dataclass(frozen=True)
class PurchaseTotals:
    subtotal: Decimal
    grand_total: Decimal
    paid: Decimal
    balance_due: Decimal

    def display(self):
        return {
            'subtotal': format_money(self.subtotal),
            'grand_total': format_money(self.grand_total),
            'paid': format_money(self.paid),
            'balance_due': format_money(self.balance_due),
        }


def compute_purchase_totals(lines, paid=None):
    """Balance due may go negative when more than the bill was paid"""
    subtotal = compute_subtotal(lines)
    paid = to_decimal(paid)
    return PurchaseTotals(
        subtotal=subtotal,
        grand_total=subtotal,
        paid=paid,
        balance_due=subtotal - paid,
    )
