from decimal import Decimal

from django.test import SimpleTestCase

from frontend.purchasing.serializers import PaymentSerializer, PurchaseFormSerializer
from frontend.purchasing.utils import compute_purchase_totals


class PurchaseTotalsTests(SimpleTestCase):

    def test_balance_due(self):
        totals = compute_purchase_totals(
            [{'product_id': 1, 'quantity': 10, 'unit_price': '45.50'}],
            paid='200',
        )
        self.assertEqual(totals.grand_total, Decimal('455.00'))
        self.assertEqual(totals.balance_due, Decimal('255.00'))
        self.assertEqual(totals.display()['balance_due'], '255.00')

    def test_blank_paid_is_zero(self):
        totals = compute_purchase_totals([{'product_id': 1, 'quantity': 1, 'unit_price': '10'}], paid='')
        self.assertEqual(totals.paid, Decimal('0'))
        self.assertEqual(totals.balance_due, Decimal('10'))


class PurchaseFormTests(SimpleTestCase):

    def test_payload_with_payment(self):
        form = PurchaseFormSerializer(data={
            'vendor_id': 3,
            'note': ' March restock ',
            'items': [
                {'product_id': 1, 'quantity': 10, 'unit_price': '45.50'},
                {'product_id': '', 'quantity': 1, 'unit_price': ''},
            ],
            'paid_amount': '200',
            'payment_method': 'bank_transfer',
        })
        self.assertTrue(form.is_valid(), form.errors)
        payload = form.to_payload(store_id=2)
        self.assertEqual(payload['purchase_items_attributes'], [
            {'product_id': 1, 'quantity': 10, 'unit_price': '45.50', 'tax_percent': '0'},
        ])
        self.assertEqual(payload['note'], 'March restock')
        self.assertEqual(payload['payment'], {'amount': '200.00', 'payment_method': 'bank_transfer'})
        self.assertEqual(payload['store_id'], 2)

    def test_no_payment_block_when_unpaid(self):
        form = PurchaseFormSerializer(data={
            'vendor_id': 3,
            'items': [{'product_id': 1, 'quantity': 1, 'unit_price': '10'}],
        })
        self.assertTrue(form.is_valid(), form.errors)
        self.assertNotIn('payment', form.to_payload())

    def test_malformed_quantity_skips_row(self):
        form = PurchaseFormSerializer(data={
            'vendor_id': 3,
            'items': [
                {'product_id': 1, 'quantity': 'ten', 'unit_price': '45.50'},
                {'product_id': 2, 'quantity': '4', 'unit_price': '10'},
            ],
        })
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.to_payload()['purchase_items_attributes'], [
            {'product_id': 2, 'quantity': 4, 'unit_price': '10', 'tax_percent': '0'},
        ])
        self.assertEqual(form.totals.grand_total, Decimal('40'))

    def test_vendor_required(self):
        form = PurchaseFormSerializer(data={'items': [{'product_id': 1, 'quantity': 1, 'unit_price': '10'}]})
        self.assertFalse(form.is_valid())
        self.assertEqual(str(form.errors['vendor_id'][0]), 'Select a vendor')

    def test_requires_a_product(self):
        form = PurchaseFormSerializer(data={'vendor_id': 3, 'items': []})
        self.assertFalse(form.is_valid())
        self.assertIn('items', form.errors)


class PaymentFormTests(SimpleTestCase):

    def test_amount_must_be_positive(self):
        for amount in ('0', '-5', 'abc'):
            form = PaymentSerializer(data={'amount': amount})
            self.assertFalse(form.is_valid(), amount)

    def test_payload(self):
        form = PaymentSerializer(data={'amount': '99.5', 'payment_method': 'cash', 'note': ''})
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.to_payload(), {'amount': '99.50', 'payment_method': 'cash'})
