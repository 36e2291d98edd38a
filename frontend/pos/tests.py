"""
Test suite for invoice totals and the invoice form
"""
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase

from frontend.core.money import format_money, to_decimal
from frontend.core.test_utils import TestDataFactory
from frontend.pos.serializers import InvoiceFormSerializer
from frontend.pos.totals import (
    DISCOUNT_AMOUNT, DISCOUNT_PERCENT, DiscountSpec, LineItem, RoundoffSpec,
    compute_discount_amount, compute_grand_total, compute_subtotal, compute_totals,
    infer_discount_spec, normalize_discount_type, valid_lines,
)


class SubtotalTests(SimpleTestCase):

    def test_empty(self):
        self.assertEqual(compute_subtotal([]), Decimal('0'))
        self.assertEqual(compute_subtotal(None), Decimal('0'))

    def test_sums_quantity_times_price(self):
        lines = [
            LineItem(product_id=1, quantity=2, unit_price='499.50'),
            LineItem(product_id=2, quantity=1, unit_price='120'),
        ]
        self.assertEqual(compute_subtotal(lines), Decimal('1119.00'))

    def test_ignores_lines_without_product(self):
        lines = [
            {'product_id': 1, 'quantity': 1, 'unit_price': '10'},
            {'product_id': None, 'quantity': 5, 'unit_price': '1000'},
            {'product_id': '', 'quantity': 5, 'unit_price': '1000'},
        ]
        self.assertEqual(compute_subtotal(lines), Decimal('10'))

    def test_order_does_not_matter(self):
        lines = [
            LineItem(1, 3, '0.10'),
            LineItem(2, 7, '19.99'),
            LineItem(3, 1, '0.05'),
            LineItem(4, 12, '3.333'),
        ]
        expected = compute_subtotal(lines)
        self.assertEqual(compute_subtotal(list(reversed(lines))), expected)
        self.assertEqual(compute_subtotal(lines[2:] + lines[:2]), expected)

    def test_malformed_numbers_count_as_zero(self):
        lines = [
            LineItem(1, 'two', '10'),
            LineItem(2, 1, 'abc'),
            LineItem(3, 2, '5'),
        ]
        self.assertEqual(compute_subtotal(lines), Decimal('10'))

    def test_no_intermediate_rounding(self):
        lines = [LineItem(1, 3, '0.335')]
        self.assertEqual(compute_subtotal(lines), Decimal('1.005'))
        self.assertEqual(format_money(compute_subtotal(lines)), '1.01')


class DiscountTests(SimpleTestCase):

    def test_percent(self):
        self.assertEqual(compute_discount_amount(Decimal('100'), DiscountSpec(DISCOUNT_PERCENT, '10')),
                         Decimal('10'))

    def test_amount(self):
        self.assertEqual(compute_discount_amount(Decimal('100'), DiscountSpec(DISCOUNT_AMOUNT, '25.50')),
                         Decimal('25.50'))

    def test_fixed_discount_beyond_subtotal_floors_base(self):
        totals = compute_grand_total(Decimal('100'), DiscountSpec('fixed', '150'))
        self.assertEqual(totals.discount_amount, Decimal('150'))
        self.assertEqual(totals.base_total, Decimal('0'))
        self.assertEqual(totals.grand_total, Decimal('0'))

    def test_unparsable_discount_same_as_none(self):
        omitted = compute_grand_total(Decimal('100'))
        for value in ('', 'abc', None, '   '):
            totals = compute_grand_total(Decimal('100'), DiscountSpec(DISCOUNT_PERCENT, value))
            self.assertEqual(totals, omitted, value)
            self.assertEqual(totals.discount_amount, Decimal('0'))

    def test_negative_discount_ignored(self):
        self.assertEqual(compute_discount_amount(Decimal('100'), DiscountSpec(DISCOUNT_AMOUNT, '-5')),
                         Decimal('0'))

    def test_type_aliases(self):
        self.assertEqual(normalize_discount_type('fixed'), DISCOUNT_AMOUNT)
        self.assertEqual(normalize_discount_type('%'), DISCOUNT_PERCENT)
        self.assertEqual(normalize_discount_type(' Percent '), DISCOUNT_PERCENT)
        self.assertEqual(normalize_discount_type('bogus'), DISCOUNT_AMOUNT)


class GrandTotalTests(SimpleTestCase):

    def test_percent_discount_with_roundoff(self):
        totals = compute_grand_total(Decimal('100'), DiscountSpec(DISCOUNT_PERCENT, '10'), RoundoffSpec('-0.40'))
        self.assertEqual(totals.discount_amount, Decimal('10'))
        self.assertEqual(format_money(totals.grand_total), '89.60')

    def test_roundoff_applied_after_floor(self):
        totals = compute_grand_total(Decimal('100'), DiscountSpec(DISCOUNT_AMOUNT, '150'), RoundoffSpec('-0.50'))
        self.assertEqual(totals.grand_total, Decimal('-0.50'))

    def test_bad_roundoff_is_zero(self):
        totals = compute_grand_total(Decimal('100'), roundoff=RoundoffSpec('x'))
        self.assertEqual(totals.roundoff, Decimal('0'))
        self.assertEqual(totals.grand_total, Decimal('100'))

    def test_formatted_round_trip(self):
        lines = [LineItem(1, 3, '33.333'), LineItem(2, 7, '0.145')]
        totals = compute_totals(lines, DiscountSpec(DISCOUNT_PERCENT, '12.5'), RoundoffSpec('0.3'))
        for value in (totals.subtotal, totals.discount_amount, totals.grand_total):
            self.assertLessEqual(abs(to_decimal(format_money(value)) - value), Decimal('0.01'))

    def test_display_and_payload(self):
        totals = compute_totals([LineItem(1, 1, '100')], DiscountSpec(DISCOUNT_PERCENT, '10'), RoundoffSpec('-0.4'))
        self.assertEqual(totals.display(), {
            'subtotal': '100.00',
            'discount_amount': '10.00',
            'roundoff': '-0.40',
            'grand_total': '89.60',
        })
        self.assertEqual(totals.as_payload(), {'discount_total': '10.00', 'roundoff': '-0.40'})

    def test_payload_omits_zero_adjustments(self):
        totals = compute_totals([LineItem(1, 1, '100')])
        self.assertEqual(totals.as_payload(), {})


class InferDiscountTests(SimpleTestCase):

    def test_whole_percent(self):
        spec = infer_discount_spec('200.00', '30.00')
        self.assertTrue(spec.is_percent)
        self.assertEqual(spec.value, '15.00')

    def test_odd_amount(self):
        spec = infer_discount_spec('200.00', '33.33')
        self.assertEqual(spec.type, DISCOUNT_AMOUNT)
        self.assertEqual(spec.value, '33.33')

    def test_no_discount(self):
        self.assertIsNone(infer_discount_spec('200.00', '0'))
        self.assertIsNone(infer_discount_spec('0', '10'))


class ValidLinesTests(SimpleTestCase):

    def test_skips_blank_and_zero_quantity(self):
        lines = [
            {'product_id': 1, 'quantity': 1, 'unit_price': '5'},
            {'product_id': None, 'quantity': 1, 'unit_price': '5'},
            {'product_id': 2, 'quantity': 0, 'unit_price': '5'},
            {'product_id': 3, 'quantity': 2, 'unit_price': '5'},
        ]
        self.assertEqual([idx for idx, _ in valid_lines(lines)], [0, 3])


class InvoiceFormTests(SimpleTestCase):

    def form_data(self, **overrides):
        data = {
            'customer_name': 'Ravi Kumar',
            'customer_phone': '9876543210',
            'items': [
                {'product_id': 1, 'quantity': 2, 'unit_price': '50.00'},
                {'product_id': '', 'quantity': '', 'unit_price': ''},
            ],
            'discount_type': 'percent',
            'discount_value': '10',
            'roundoff': '-0.40',
            'payment_method': 'upi',
        }
        data.update(overrides)
        return data

    def test_payload(self):
        form = InvoiceFormSerializer(data=self.form_data(billed_at='2026-01-15'))
        self.assertTrue(form.is_valid(), form.errors)
        payload = form.to_payload(store_id=4)
        self.assertEqual(payload['invoice_items_attributes'], [
            {'product_id': 1, 'quantity': 2, 'unit_price': '50.00', 'tax_percent': '0'},
        ])
        self.assertEqual(payload['discount_total'], '10.00')
        self.assertEqual(payload['roundoff'], '-0.40')
        self.assertEqual(payload['payment_method'], 'upi')
        self.assertEqual(payload['billed_at'], '2026-01-15T00:00:00+00:00')
        self.assertEqual(payload['store_id'], 4)
        self.assertNotIn('update_customer_name', payload)
        self.assertEqual(format_money(form.totals.grand_total), '89.60')

    def test_requires_a_product(self):
        form = InvoiceFormSerializer(data=self.form_data(items=[{'product_id': '', 'quantity': 1}]))
        self.assertFalse(form.is_valid())
        self.assertEqual(str(form.errors['items'][0]), 'Add at least one product')

    def test_requires_customer(self):
        form = InvoiceFormSerializer(data=self.form_data(customer_phone=' '))
        self.assertFalse(form.is_valid())
        self.assertIn('customer', form.errors)

    def test_stock_check(self):
        products = {1: TestDataFactory.product(id=1, name='Basmati Rice', current_stock=1)}
        form = InvoiceFormSerializer(data=self.form_data(), context={'products': products})
        self.assertFalse(form.is_valid())
        self.assertEqual(
            str(form.errors['items'][0]),
            'Insufficient stock for "Basmati Rice". Available: 1, Required: 2',
        )

    def test_renamed_existing_customer(self):
        form = InvoiceFormSerializer(
            data=self.form_data(),
            context={'existing_customer': {'id': 9, 'name': 'Ravi', 'phone': '9876543210'}},
        )
        self.assertTrue(form.is_valid(), form.errors)
        self.assertTrue(form.to_payload()['update_customer_name'])

    def test_malformed_quantity_skips_row(self):
        form = InvoiceFormSerializer(data=self.form_data(items=[
            {'product_id': 1, 'quantity': 'abc', 'unit_price': '500'},
            {'product_id': 2, 'quantity': 1, 'unit_price': '100'},
            {'product_id': 3, 'quantity': '-2', 'unit_price': '500'},
        ]))
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(
            [item['product_id'] for item in form.to_payload()['invoice_items_attributes']],
            [2],
        )
        self.assertEqual(form.totals.subtotal, Decimal('100'))

    def test_fractional_quantity_truncated(self):
        form = InvoiceFormSerializer(data=self.form_data(items=[
            {'product_id': 1, 'quantity': '1.5', 'unit_price': '100'},
        ]))
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.to_payload()['invoice_items_attributes'][0]['quantity'], 1)

    def test_only_malformed_quantities_means_no_product(self):
        form = InvoiceFormSerializer(data=self.form_data(items=[{'product_id': 1, 'quantity': 'abc'}]))
        self.assertFalse(form.is_valid())
        self.assertEqual(str(form.errors['items'][0]), 'Add at least one product')

    def test_fixed_discount_type_accepted(self):
        form = InvoiceFormSerializer(data=self.form_data(discount_type='fixed', discount_value='150', roundoff=''))
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.validated_data['discount_type'], DISCOUNT_AMOUNT)
        self.assertEqual(form.totals.discount_amount, Decimal('150'))
        self.assertEqual(form.totals.grand_total, Decimal('0'))
        self.assertEqual(form.to_payload()['discount_total'], '150.00')

    def test_percent_sign_discount_type_accepted(self):
        form = InvoiceFormSerializer(data=self.form_data(discount_type='%'))
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.validated_data['discount_type'], DISCOUNT_PERCENT)

    def test_unknown_discount_type_rejected(self):
        form = InvoiceFormSerializer(data=self.form_data(discount_type='bogus'))
        self.assertFalse(form.is_valid())
        self.assertIn('discount_type', form.errors)

    def test_blank_discount_not_sent(self):
        form = InvoiceFormSerializer(data=self.form_data(discount_value='', roundoff=''))
        self.assertTrue(form.is_valid(), form.errors)
        payload = form.to_payload()
        self.assertNotIn('discount_total', payload)
        self.assertNotIn('roundoff', payload)
        self.assertNotIn('store_id', payload)


class InvoiceTotalsCommandTests(SimpleTestCase):

    def test_prints_totals(self):
        out = StringIO()
        call_command('invoice_totals', line=['1:1:100'], discount='10', roundoff='-0.40', stdout=out)
        self.assertIn('Subtotal:    100.00', out.getvalue())
        self.assertIn('Grand total: 89.60', out.getvalue())

    def test_bad_line(self):
        with self.assertRaises(CommandError):
            call_command('invoice_totals', line=['1:100'], stdout=StringIO())
