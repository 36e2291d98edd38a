from django.test import SimpleTestCase

from frontend.locations.serializers import StoreFormSerializer


class StoreFormTests(SimpleTestCase):

    def test_code_upper_cased(self):
        form = StoreFormSerializer(data={'name': 'Main Branch', 'code': ' mb-01 '})
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.to_payload()['code'], 'MB-01')

    def test_name_and_code_required(self):
        form = StoreFormSerializer(data={'name': '', 'code': ''})
        self.assertFalse(form.is_valid())
        self.assertEqual(str(form.errors['name'][0]), 'Store name and code are required')
        self.assertEqual(str(form.errors['code'][0]), 'Store name and code are required')

    def test_code_length(self):
        form = StoreFormSerializer(data={'name': 'Main', 'code': 'X' * 51})
        self.assertFalse(form.is_valid())
        self.assertIn('code', form.errors)
