from django.test import SimpleTestCase

from frontend.catalog.filters import filter_by_name, filter_products, product_index
from frontend.catalog.serializers import ProductFormSerializer
from frontend.core.test_utils import TestDataFactory


class ProductFilterTests(SimpleTestCase):

    def setUp(self):
        self.products = [
            TestDataFactory.product(id=1, name='Basmati Rice', sku='RICE-5KG', barcode='8901234567890'),
            TestDataFactory.product(id=2, name='Sunflower Oil', sku='OIL-1L'),
            TestDataFactory.product(id=3, name='Old Soap', active=False),
        ]

    def test_matches_name_sku_or_barcode(self):
        self.assertEqual([p['id'] for p in filter_products(self.products, 'rice')], [1])
        self.assertEqual([p['id'] for p in filter_products(self.products, 'oil-1')], [2])
        self.assertEqual([p['id'] for p in filter_products(self.products, '4567')], [1])

    def test_blank_query_returns_all(self):
        self.assertEqual(len(filter_products(self.products, '  ')), 3)

    def test_active_only(self):
        self.assertEqual([p['id'] for p in filter_products(self.products, '', active_only=True)], [1, 2])
        self.assertEqual(filter_products(self.products, 'soap', active_only=True), [])

    def test_filter_by_name(self):
        vendors = [{'name': 'Agarwal Wholesale'}, {'name': 'City Distributors', 'active': False}]
        self.assertEqual(filter_by_name(vendors, 'city'), [vendors[1]])
        self.assertEqual(filter_by_name(vendors, 'city', active_only=True), [])

    def test_product_index(self):
        self.assertEqual(set(product_index(self.products)), {1, 2, 3})


class ProductFormTests(SimpleTestCase):

    def test_payload(self):
        form = ProductFormSerializer(data={
            'name': 'Basmati Rice',
            'sku': ' RICE-5KG ',
            'barcode': '',
            'purchase_price': '450',
            'selling_price': '499.5',
            'current_stock': '12',
        })
        self.assertTrue(form.is_valid(), form.errors)
        payload = form.to_payload()
        self.assertEqual(payload['purchase_price'], '450.00')
        self.assertEqual(payload['selling_price'], '499.50')
        self.assertEqual(payload['current_stock'], 12)
        self.assertEqual(payload['sku'], 'RICE-5KG')
        self.assertIsNone(payload['barcode'])
        self.assertTrue(payload['active'])

    def test_blank_prices_are_zero(self):
        form = ProductFormSerializer(data={'name': 'Soap', 'purchase_price': '', 'selling_price': ''})
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.to_payload()['selling_price'], '0.00')

    def test_rejects_negative_and_garbage(self):
        form = ProductFormSerializer(data={'name': 'Soap', 'purchase_price': '-1', 'selling_price': 'abc'})
        self.assertFalse(form.is_valid())
        self.assertEqual(str(form.errors['purchase_price'][0]), 'Must be zero or more')
        self.assertEqual(str(form.errors['selling_price'][0]), 'Enter a valid number')

    def test_fractional_stock(self):
        form = ProductFormSerializer(data={'name': 'Soap', 'current_stock': '1.5'})
        self.assertFalse(form.is_valid())
        self.assertIn('current_stock', form.errors)

    def test_name_required(self):
        form = ProductFormSerializer(data={'name': ''})
        self.assertFalse(form.is_valid())
        self.assertEqual(str(form.errors['name'][0]), 'Product name is required')
