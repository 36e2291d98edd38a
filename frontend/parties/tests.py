from django.test import SimpleTestCase

from frontend.parties.serializers import CustomerFormSerializer, VendorFormSerializer


class VendorFormTests(SimpleTestCase):

    def test_payload(self):
        form = VendorFormSerializer(data={'name': ' Agarwal Wholesale ', 'phone': '', 'email': 'sales@agarwal.in'})
        self.assertTrue(form.is_valid(), form.errors)
        payload = form.to_payload(store_id=2)
        self.assertEqual(payload['name'], 'Agarwal Wholesale')
        self.assertIsNone(payload['phone'])
        self.assertEqual(payload['store_id'], 2)
        self.assertTrue(payload['active'])

    def test_name_required(self):
        form = VendorFormSerializer(data={'name': ''})
        self.assertFalse(form.is_valid())
        self.assertEqual(str(form.errors['name'][0]), 'Vendor name is required')

    def test_bad_email(self):
        form = VendorFormSerializer(data={'name': 'Agarwal', 'email': 'not-an-email'})
        self.assertFalse(form.is_valid())
        self.assertIn('email', form.errors)


class CustomerFormTests(SimpleTestCase):

    def test_phone_required(self):
        form = CustomerFormSerializer(data={'name': 'Ravi', 'phone': ''})
        self.assertFalse(form.is_valid())
        self.assertEqual(str(form.errors['phone'][0]), 'Customer phone is required')

    def test_payload_without_store(self):
        form = CustomerFormSerializer(data={'name': 'Ravi', 'phone': '9876543210'})
        self.assertTrue(form.is_valid(), form.errors)
        self.assertNotIn('store_id', form.to_payload())
