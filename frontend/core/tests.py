"""
Test suite for the core client
Tests: money coercion, API client, local storage, session/store context,
store-scoped lists, delete confirmation, auth and user forms, commands
"""
from decimal import Decimal
from io import StringIO

import requests
from django.core.management import call_command
from django.apps import apps
from django.test import SimpleTestCase
from rest_framework.exceptions import ValidationError

from frontend.config.settings import DEFAULT_API_BASE_URL, _api_base_url
from frontend.core.api import APIClient
from frontend.core.exceptions import APIError, NotAuthenticated, SessionError, TransportError, user_message
from frontend.core.money import format_money, quantize_money, to_decimal
from frontend.core.serializers import OnboardingSerializer, UserFormSerializer
from frontend.core.session import ANONYMOUS, AUTHENTICATED, SessionContext
from frontend.core.signals import store_changed
from frontend.core.storage import STORE_KEY, TOKEN_KEY, USER_KEY, LocalStorage
from frontend.core.test_utils import FakeHTTP, TestDataFactory, build_session
from frontend.core.utils import DeleteConfirmation
from frontend.core.views import StoreScopedList


class MoneyTests(SimpleTestCase):
    """Test numeric coercion of form input"""

    def test_parses_strings_and_numbers(self):
        self.assertEqual(to_decimal('12.50'), Decimal('12.50'))
        self.assertEqual(to_decimal(' 7 '), Decimal('7'))
        self.assertEqual(to_decimal(3), Decimal('3'))
        self.assertEqual(to_decimal(0.1), Decimal('0.1'))

    def test_malformed_input_is_zero(self):
        for value in (None, '', '   ', 'abc', '1,000', 'NaN', 'Infinity', [], True):
            self.assertEqual(to_decimal(value), Decimal('0'), value)

    def test_rounding_only_when_formatting(self):
        self.assertEqual(quantize_money('2.345'), Decimal('2.35'))
        self.assertEqual(format_money(Decimal('89.6')), '89.60')
        self.assertEqual(format_money('abc'), '0.00')

    def test_format_round_trip_within_a_cent(self):
        for value in (Decimal('1049.895'), Decimal('0.005'), Decimal('-0.4'), Decimal('33.333333')):
            self.assertLessEqual(abs(to_decimal(format_money(value)) - value), Decimal('0.01'))


class APIClientTests(SimpleTestCase):
    """Test request building and error mapping"""

    def setUp(self):
        LocalStorage().clear()
        self.session, self.http = build_session()

    def login(self, store=None):
        user = TestDataFactory.user(role='store_manager', store=store)
        self.http.add('POST', '/auth/login', body=TestDataFactory.login_response(user))
        self.http.add('GET', '/stores/available', body=[store] if store else [])
        self.session.login('user1@example.com', 'secret123')

    def test_anonymous_request_has_no_bearer(self):
        self.http.add('GET', '/auth/check_onboarding', body={'needs_onboarding': True})
        self.assertEqual(self.session.check_onboarding(), {'needs_onboarding': True})
        self.assertNotIn('Authorization', self.http.calls[-1].headers)

    def test_bearer_token_attached(self):
        self.login()
        self.http.add('GET', '/vendors', body=[])
        self.session.api.vendors.list()
        self.assertEqual(self.http.calls[-1].headers['Authorization'], 'Bearer token-abc')

    def test_create_wraps_payload_and_adds_store(self):
        store = TestDataFactory.store(id=4)
        self.login(store=store)
        self.http.add('POST', '/customers', status_code=201, body={'id': 9, 'name': 'Ravi'})
        result = self.session.api.customers.create({'name': 'Ravi', 'phone': '9876543210'})
        self.assertEqual(result['id'], 9)
        self.assertEqual(
            self.http.calls[-1].json,
            {'customer': {'name': 'Ravi', 'phone': '9876543210', 'store_id': 4}},
        )

    def test_list_scoped_to_current_store(self):
        self.login(store=TestDataFactory.store(id=4))
        self.http.add('GET', '/products', body=[TestDataFactory.product()])
        products = self.session.api.products.list(query='soap')
        self.assertEqual(len(products), 1)
        self.assertEqual(self.http.calls[-1].params, {'query': 'soap', 'store_id': 4})

    def test_stores_and_users_not_store_scoped(self):
        self.login(store=TestDataFactory.store(id=4))
        self.http.add('GET', '/users', body=[])
        self.session.api.users.list()
        self.assertIsNone(self.http.calls[-1].params)

    def test_update_does_not_add_store(self):
        self.login(store=TestDataFactory.store(id=4))
        self.http.add('PUT', '/products/3', body={'id': 3})
        self.session.api.products.update(3, {'name': 'Soap'})
        self.assertEqual(self.http.calls[-1].json, {'product': {'name': 'Soap'}})

    def test_add_purchase_payment(self):
        self.login()
        self.http.add('POST', '/purchases/5/add_payment', body={'id': 5, 'balance_due': '0.00'})
        self.session.api.purchases.add_payment(5, {'amount': '250.00'})
        self.assertEqual(self.http.calls[-1].json, {'purchase_payment': {'amount': '250.00'}})

    def test_find_customer_by_phone(self):
        self.login()
        self.http.add('GET', '/customers', body=[{'id': 2, 'name': 'Ravi', 'phone': '9876543210'}])
        customer = self.session.api.customers.find_by_phone(' 9876543210 ')
        self.assertEqual(customer['id'], 2)
        self.assertEqual(self.http.calls[-1].params, {'phone': '9876543210'})

    def test_find_customer_by_phone_none(self):
        self.login()
        self.http.add('GET', '/customers', body=None)
        self.assertIsNone(self.session.api.customers.find_by_phone('111'))

    def test_delete_returns_none_on_empty_body(self):
        self.login()
        self.http.add('DELETE', '/products/3', status_code=204)
        self.assertIsNone(self.session.api.products.delete(3))

    def test_server_error_message_verbatim(self):
        self.http.add('DELETE', '/products/3', status_code=422, body={'error': 'Cannot delete product with invoices'})
        with self.assertRaises(APIError) as ctx:
            self.session.api.products.delete(3)
        self.assertEqual(ctx.exception.message, 'Cannot delete product with invoices')
        self.assertEqual(ctx.exception.status_code, 422)

    def test_message_key_used_when_no_error_key(self):
        self.http.add('GET', '/dashboard', status_code=403, body={'message': 'Forbidden'})
        with self.assertRaises(APIError) as ctx:
            self.session.api.dashboard.get()
        self.assertEqual(str(ctx.exception), 'Forbidden')

    def test_generic_message_without_body(self):
        self.http.add('GET', '/invoices', status_code=500, raw='<html>oops</html>')
        with self.assertRaises(APIError) as ctx:
            self.session.api.invoices.list()
        self.assertEqual(ctx.exception.message, 'Request failed (500)')

    def test_transport_failure(self):
        self.http.add('GET', '/vendors', exc=requests.ConnectionError('connection refused'))
        with self.assertRaises(TransportError) as ctx:
            self.session.api.vendors.list()
        self.assertIn('connection refused', ctx.exception.message)

    def test_no_retry(self):
        self.http.add('GET', '/vendors', status_code=503, body={'error': 'Down'})
        with self.assertRaises(APIError):
            self.session.api.vendors.list()
        self.assertEqual(len(self.http.calls_to('GET', '/vendors')), 1)

    def test_base_url_from_settings(self):
        client = APIClient(http=FakeHTTP())
        self.assertEqual(client.base_url, 'http://testserver/api/v1')


class LocalStorageTests(SimpleTestCase):

    def setUp(self):
        self.storage = LocalStorage()
        self.storage.clear()

    def test_json_round_trip(self):
        self.storage.set_json(USER_KEY, {'id': 1, 'name': 'Asha'})
        self.assertEqual(self.storage.get_json(USER_KEY), {'id': 1, 'name': 'Asha'})

    def test_malformed_json_is_none(self):
        self.storage.set_item(USER_KEY, '{not json')
        self.assertIsNone(self.storage.get_json(USER_KEY))

    def test_clear_removes_session_keys(self):
        self.storage.set_item(TOKEN_KEY, 't')
        self.storage.set_json(STORE_KEY, {'id': 1})
        self.storage.clear()
        self.assertIsNone(self.storage.get_item(TOKEN_KEY))
        self.assertIsNone(self.storage.get_item(STORE_KEY))


class SessionContextTests(SimpleTestCase):
    """Test login, store selection, logout and rehydration"""

    def setUp(self):
        self.storage = LocalStorage()
        self.storage.clear()
        self.session, self.http = build_session(storage=self.storage)
        self.events = []
        store_changed.connect(self.record, dispatch_uid='session-tests')

    def tearDown(self):
        store_changed.disconnect(dispatch_uid='session-tests')

    def record(self, sender, store=None, generation=None, **kwargs):
        self.events.append((store, generation))

    def test_starts_anonymous(self):
        self.assertEqual(self.session.state, ANONYMOUS)
        self.assertFalse(self.session.is_authenticated)

    def test_login_persists_and_auto_selects_single_store(self):
        user = TestDataFactory.user(role='org_admin')
        only_store = TestDataFactory.store(id=7)
        self.http.add('POST', '/auth/login', body=TestDataFactory.login_response(user))
        self.http.add('GET', '/stores/available', body=[only_store])

        snapshot = self.session.login('user1@example.com', 'secret123')

        self.assertEqual(snapshot.state, AUTHENTICATED)
        self.assertEqual(snapshot.current_store, only_store)
        self.assertEqual(self.storage.get_item(TOKEN_KEY), 'token-abc')
        self.assertEqual(self.storage.get_json(USER_KEY), user)
        self.assertEqual(self.storage.get_json(STORE_KEY), only_store)
        self.assertEqual(self.http.calls_to('POST', '/auth/login')[0].json,
                         {'email': 'user1@example.com', 'password': 'secret123'})

    def test_login_does_not_auto_select_among_many(self):
        user = TestDataFactory.user(role='org_admin')
        self.http.add('POST', '/auth/login', body=TestDataFactory.login_response(user))
        self.http.add('GET', '/stores/available', body=[TestDataFactory.store(id=1), TestDataFactory.store(id=2)])
        self.session.login('user1@example.com', 'secret123')
        self.assertIsNone(self.session.current_store)
        self.assertEqual(len(self.session.available_stores), 2)

    def test_login_selects_users_own_store(self):
        store = TestDataFactory.store(id=3)
        user = TestDataFactory.user(role='store_worker', store=store)
        self.http.add('POST', '/auth/login', body=TestDataFactory.login_response(user))
        self.http.add('GET', '/stores/available', body=[store])
        self.session.login('user1@example.com', 'secret123')
        self.assertEqual(self.session.current_store_id, 3)
        self.assertTrue(self.session.is_store_worker)
        self.assertEqual(self.events[-1][0], store)

    def test_login_failure_stays_anonymous_with_server_reason(self):
        self.http.add('POST', '/auth/login', status_code=401, body={'error': 'Invalid email or password'})
        with self.assertRaises(APIError) as ctx:
            self.session.login('user1@example.com', 'wrong-password')
        self.assertEqual(ctx.exception.message, 'Invalid email or password')
        self.assertEqual(self.session.state, ANONYMOUS)
        self.assertIsNone(self.storage.get_item(TOKEN_KEY))

    def test_login_validates_before_request(self):
        with self.assertRaises(ValidationError):
            self.session.login('', '')
        self.assertEqual(self.http.calls, [])

    def test_login_survives_store_fetch_failure(self):
        user = TestDataFactory.user(role='org_admin')
        self.http.add('POST', '/auth/login', body=TestDataFactory.login_response(user))
        self.http.add('GET', '/stores/available', status_code=500, body={'error': 'boom'})
        snapshot = self.session.login('user1@example.com', 'secret123')
        self.assertTrue(snapshot.is_authenticated)
        self.assertEqual(snapshot.available_stores, ())

    def test_login_without_token_fails(self):
        self.http.add('POST', '/auth/login', body={'user': TestDataFactory.user()})
        with self.assertRaises(SessionError):
            self.session.login('user1@example.com', 'secret123')
        self.assertEqual(self.session.state, ANONYMOUS)

    def login_as_admin(self, stores):
        self.http.add('POST', '/auth/login', body=TestDataFactory.login_response(TestDataFactory.user()))
        self.http.add('GET', '/stores/available', body=stores)
        self.session.login('user1@example.com', 'secret123')
        self.events.clear()

    def test_select_store_persists_and_notifies_once(self):
        store_a = TestDataFactory.store(id=1)
        store_b = TestDataFactory.store(id=2)
        self.login_as_admin([store_a, store_b])
        self.session.select_store(store_a)
        self.events.clear()

        self.session.select_store(store_b)

        self.assertEqual(self.storage.get_json(STORE_KEY), store_b)
        self.assertEqual(len(self.events), 1)
        self.assertEqual(self.events[0][0], store_b)
        self.assertEqual(self.events[0][1], self.session.generation)

    def test_select_store_none_clears(self):
        store = TestDataFactory.store(id=1)
        self.login_as_admin([store])
        self.session.select_store(None)
        self.assertIsNone(self.storage.get_item(STORE_KEY))
        self.assertEqual(self.events, [(None, self.session.generation)])

    def test_select_store_requires_login(self):
        with self.assertRaises(NotAuthenticated):
            self.session.select_store(TestDataFactory.store())
        self.assertEqual(self.events, [])

    def test_select_store_by_id(self):
        self.login_as_admin([TestDataFactory.store(id=1), TestDataFactory.store(id=2)])
        self.assertEqual(self.session.select_store_by_id('2')['id'], 2)
        with self.assertRaises(SessionError):
            self.session.select_store_by_id(99)

    def test_generation_advances_on_every_change(self):
        self.login_as_admin([TestDataFactory.store(id=1), TestDataFactory.store(id=2)])
        start = self.session.generation
        self.session.select_store(TestDataFactory.store(id=1))
        self.session.select_store(TestDataFactory.store(id=2))
        self.assertEqual(self.session.generation, start + 2)
        self.assertFalse(self.session.is_current(start))

    def test_logout_clears_everything(self):
        self.login_as_admin([TestDataFactory.store(id=1)])
        self.session.logout()

        self.assertEqual(self.session.state, ANONYMOUS)
        self.assertIsNone(self.session.token)
        self.assertIsNone(self.session.user)
        self.assertIsNone(self.session.current_store)
        self.assertEqual(self.session.available_stores, [])
        for key in (TOKEN_KEY, USER_KEY, STORE_KEY):
            self.assertIsNone(self.storage.get_item(key))

        fresh, _ = build_session(storage=self.storage)
        self.assertEqual(fresh.state, ANONYMOUS)

    def test_logout_idempotent(self):
        self.session.logout()
        self.session.logout()
        self.assertEqual(self.session.state, ANONYMOUS)

    def test_rehydrates_from_storage(self):
        store = TestDataFactory.store(id=5)
        self.storage.set_item(TOKEN_KEY, 'stored-token')
        self.storage.set_json(USER_KEY, TestDataFactory.user())
        self.storage.set_json(STORE_KEY, store)

        restored, _ = build_session(storage=self.storage)

        self.assertTrue(restored.is_authenticated)
        self.assertEqual(restored.token, 'stored-token')
        self.assertEqual(restored.current_store, store)

    def test_rehydrate_falls_back_to_users_store(self):
        store = TestDataFactory.store(id=6)
        self.storage.set_item(TOKEN_KEY, 'stored-token')
        self.storage.set_json(USER_KEY, TestDataFactory.user(role='store_manager', store=store))
        restored, _ = build_session(storage=self.storage)
        self.assertEqual(restored.current_store_id, 6)

    def test_rehydrate_malformed_user_stays_anonymous(self):
        self.storage.set_item(TOKEN_KEY, 'stored-token')
        self.storage.set_item(USER_KEY, '{broken')
        restored, _ = build_session(storage=self.storage)
        self.assertEqual(restored.state, ANONYMOUS)

    def test_snapshot_is_a_copy(self):
        self.login_as_admin([TestDataFactory.store(id=1)])
        snapshot = self.session.snapshot()
        snapshot.current_store['name'] = 'changed'
        self.assertNotEqual(self.session.current_store['name'], 'changed')

    def test_fetch_available_stores_without_token(self):
        self.assertEqual(self.session.fetch_available_stores(), [])
        self.assertEqual(self.http.calls, [])

    def onboard_sharma_traders(self):
        return self.session.onboard(
            organization={'name': 'Sharma Traders'},
            store={'name': 'Main', 'code': 'main'},
            user={'name': 'Asha', 'email': 'owner@example.com', 'password': 'longenough',
                  'confirm_password': 'longenough'},
        )

    def test_onboard_starts_session_from_response(self):
        user = TestDataFactory.user(email='owner@example.com')
        self.http.add('POST', '/auth/onboard', status_code=201, body={'token': 'onboard-token', 'user': user})
        self.http.add('GET', '/stores/available', body=[TestDataFactory.store(id=1, code='MAIN')])

        snapshot = self.onboard_sharma_traders()

        form = self.http.calls_to('POST', '/auth/onboard')[0].data
        self.assertEqual(form['store[code]'], 'MAIN')
        self.assertNotIn('user[confirm_password]', form)
        self.assertTrue(snapshot.is_authenticated)
        self.assertEqual(self.session.token, 'onboard-token')
        self.assertEqual(self.storage.get_item(TOKEN_KEY), 'onboard-token')
        self.assertEqual(self.storage.get_json(USER_KEY), user)
        self.assertEqual(self.session.current_store['code'], 'MAIN')
        self.assertEqual(self.http.calls_to('POST', '/auth/login'), [])

    def test_onboard_without_session_logs_in(self):
        user = TestDataFactory.user(email='owner@example.com')
        self.http.add('POST', '/auth/onboard', status_code=201, body={'message': 'Onboarded'})
        self.http.add('POST', '/auth/login', body=TestDataFactory.login_response(user, token='login-token'))
        self.http.add('GET', '/stores/available', body=[])

        self.onboard_sharma_traders()

        self.assertEqual(self.session.token, 'login-token')
        self.assertEqual(self.storage.get_item(TOKEN_KEY), 'login-token')

    def test_onboard_then_failed_login_leaves_nothing_behind(self):
        self.http.add('POST', '/auth/onboard', status_code=201, body={'message': 'Onboarded'})
        self.http.add('POST', '/auth/login', status_code=500, body={'error': 'Try again later'})

        with self.assertRaises(APIError):
            self.onboard_sharma_traders()

        self.assertEqual(self.session.state, ANONYMOUS)
        self.assertIsNone(self.session.token)
        self.assertIsNone(self.storage.get_item(TOKEN_KEY))

    def test_failed_relogin_drops_previous_session(self):
        self.login_as_admin([TestDataFactory.store(id=1)])
        self.http.add('POST', '/auth/login', status_code=401, body={'error': 'Invalid email or password'})

        with self.assertRaises(APIError):
            self.session.login('user1@example.com', 'wrong-password')

        self.assertEqual(self.session.state, ANONYMOUS)
        self.assertIsNone(self.session.token)
        self.assertIsNone(self.session.user)
        self.assertIsNone(self.session.api.token())
        for key in (TOKEN_KEY, USER_KEY, STORE_KEY):
            self.assertIsNone(self.storage.get_item(key))
        restored, _ = build_session(storage=self.storage)
        self.assertEqual(restored.state, ANONYMOUS)

    def test_relogin_without_token_drops_previous_session(self):
        self.login_as_admin([TestDataFactory.store(id=1)])
        self.http.add('POST', '/auth/login', body={'user': TestDataFactory.user()})

        with self.assertRaises(SessionError):
            self.session.login('user1@example.com', 'secret123')

        self.assertIsNone(self.session.token)
        self.assertIsNone(self.storage.get_item(TOKEN_KEY))


class StoreScopedListTests(SimpleTestCase):
    """Test refresh on store change and stale response handling"""

    def setUp(self):
        LocalStorage().clear()
        self.session, self.http = build_session()
        self.store_a = TestDataFactory.store(id=1)
        self.store_b = TestDataFactory.store(id=2)
        self.http.add('POST', '/auth/login', body=TestDataFactory.login_response(TestDataFactory.user()))
        self.http.add('GET', '/stores/available', body=[self.store_a, self.store_b])
        self.session.login('user1@example.com', 'secret123')
        self.session.select_store(self.store_a)
        self.http.add('GET', '/invoices', body=[{'id': 1, 'invoice_no': 'INV-1'}])
        self.view = StoreScopedList(self.session, lambda: self.session.api.invoices.list())

    def tearDown(self):
        self.view.close()

    def test_refresh_loads_items(self):
        self.assertTrue(self.view.refresh())
        self.assertEqual(self.view.items, [{'id': 1, 'invoice_no': 'INV-1'}])
        self.assertEqual(self.http.calls[-1].params, {'store_id': 1})

    def test_store_change_triggers_reload(self):
        self.session.select_store(self.store_b)
        self.assertEqual(self.http.calls[-1].params, {'store_id': 2})
        self.assertEqual(self.view.loaded_generation, self.session.generation)

    def test_stale_response_dropped(self):
        ticket = self.view.begin()
        self.session.select_store(self.store_b)
        self.assertFalse(self.view.apply(ticket, [{'id': 99}]))
        self.assertNotIn({'id': 99}, self.view.items)
        self.assertEqual(self.view.dropped, 1)

    def test_closed_view_ignores_responses(self):
        self.view.close()
        calls = len(self.http.calls)
        self.session.select_store(self.store_b)
        self.assertEqual(len(self.http.calls), calls)
        self.assertFalse(self.view.apply(self.view.begin(), [{'id': 3}]))

    def test_error_kept_as_message(self):
        self.http.add('GET', '/invoices', status_code=500, body={'error': 'Database unavailable'})
        self.assertFalse(self.view.refresh())
        self.assertEqual(self.view.error, 'Database unavailable')

    def test_logout_empties_list(self):
        self.view.refresh()
        self.session.logout()
        self.assertEqual(self.view.items, [])

    def test_search_filters_visible(self):
        view = StoreScopedList(
            self.session,
            lambda: [{'name': 'Soap'}, {'name': 'Rice'}],
            search=lambda items, q: [i for i in items if q.lower() in i['name'].lower()],
        )
        try:
            view.refresh()
            view.query = 'so'
            self.assertEqual(view.visible, [{'name': 'Soap'}])
        finally:
            view.close()


class DeleteConfirmationTests(SimpleTestCase):

    def test_success_closes(self):
        deleted = []
        confirmation = DeleteConfirmation(deleted.append)
        confirmation.request(5, 'Delete "Soap"?')
        self.assertTrue(confirmation.confirm())
        self.assertEqual(deleted, [5])
        self.assertFalse(confirmation.is_open)

    def test_failure_stays_open_with_server_message(self):
        def action(target):
            raise APIError('Cannot delete vendor with purchases', status_code=422)

        confirmation = DeleteConfirmation(action)
        confirmation.request(3)
        self.assertFalse(confirmation.confirm())
        self.assertTrue(confirmation.is_open)
        self.assertEqual(confirmation.error, 'Cannot delete vendor with purchases')
        self.assertEqual(confirmation.target, 3)

    def test_confirm_without_request_does_nothing(self):
        confirmation = DeleteConfirmation(lambda target: None)
        self.assertFalse(confirmation.confirm())


class UserFormTests(SimpleTestCase):

    def form(self, editing=False, **overrides):
        data = {
            'name': 'Ravi', 'email': 'ravi@example.com', 'role': 'store_worker', 'store_id': 2,
            'password': 'password1', 'confirm_password': 'password1',
        }
        data.update(overrides)
        return UserFormSerializer(data=data, context={'editing': editing})

    def test_valid_user(self):
        form = self.form()
        self.assertTrue(form.is_valid(), form.errors)
        payload = form.to_payload()
        self.assertNotIn('confirm_password', payload)
        self.assertEqual(payload['store_id'], 2)

    def test_password_mismatch(self):
        form = self.form(confirm_password='password2')
        self.assertFalse(form.is_valid())
        self.assertEqual(user_message(ValidationError(form.errors)), 'Passwords do not match')

    def test_short_password(self):
        form = self.form(password='short', confirm_password='short')
        self.assertFalse(form.is_valid())
        self.assertIn('password', form.errors)

    def test_worker_needs_store(self):
        form = self.form(store_id=None)
        self.assertFalse(form.is_valid())
        self.assertIn('store_id', form.errors)

    def test_org_admin_cannot_have_store(self):
        form = self.form(role='org_admin')
        self.assertFalse(form.is_valid())
        self.assertEqual(
            str(form.errors['store_id'][0]),
            'Organization admins cannot be assigned to a store',
        )

    def test_edit_keeps_blank_password(self):
        form = self.form(editing=True, password='', confirm_password='')
        self.assertTrue(form.is_valid(), form.errors)
        self.assertNotIn('password', form.to_payload())


class OnboardingFormTests(SimpleTestCase):

    def test_requires_organization_name(self):
        form = OnboardingSerializer(data={
            'organization': {'name': ''},
            'store': {'name': 'Main', 'code': 'M1'},
            'user': {'name': 'A', 'email': 'a@example.com', 'password': 'longenough', 'confirm_password': 'longenough'},
        })
        self.assertFalse(form.is_valid())
        self.assertIn('organization', form.errors)

    def test_form_data_flattened(self):
        form = OnboardingSerializer(data={
            'organization': {'name': 'Sharma Traders', 'phone': ''},
            'store': {'name': 'Main', 'code': ' m1 '},
            'user': {'name': 'A', 'email': 'a@example.com', 'password': 'longenough', 'confirm_password': 'longenough'},
        })
        self.assertTrue(form.is_valid(), form.errors)
        data = form.to_form_data()
        self.assertEqual(data['organization[name]'], 'Sharma Traders')
        self.assertNotIn('organization[phone]', data)
        self.assertEqual(data['store[code]'], 'M1')
        self.assertEqual(data['user[password]'], 'longenough')


class CommandTests(SimpleTestCase):

    def setUp(self):
        LocalStorage().clear()

    def test_session_info_when_logged_out(self):
        out = StringIO()
        call_command('session_info', stdout=out)
        self.assertIn('Not logged in', out.getvalue())

    def test_session_info_restored(self):
        storage = LocalStorage()
        storage.set_item(TOKEN_KEY, 'stored-token')
        storage.set_json(USER_KEY, TestDataFactory.user(name='Asha Sharma'))
        storage.set_json(STORE_KEY, TestDataFactory.store(id=1, name='Main', code='MAIN'))
        out = StringIO()
        call_command('session_info', stdout=out)
        self.assertIn('Asha Sharma', out.getvalue())
        self.assertIn('Main (MAIN)', out.getvalue())

    def test_logout_command(self):
        LocalStorage().set_item(TOKEN_KEY, 'stored-token')
        call_command('logout', stdout=StringIO())
        self.assertIsNone(LocalStorage().get_item(TOKEN_KEY))


class SessionContextDefaultsTests(SimpleTestCase):

    def test_default_api_bound_to_session(self):
        LocalStorage().clear()
        session = SessionContext()
        self.assertIs(session.api.session, session)


class SettingsTests(SimpleTestCase):

    def test_api_base_url_override(self):
        self.assertEqual(_api_base_url(' https://billing.example.com/api/v1/ '), 'https://billing.example.com/api/v1')

    def test_api_base_url_falls_back_to_hosted_api(self):
        for value in (None, '', '   ', 'billing.example.com/api/v1', 'ftp://example.com'):
            self.assertEqual(_api_base_url(value), DEFAULT_API_BASE_URL, value)
        self.assertEqual(DEFAULT_API_BASE_URL, 'https://hisaabkitaab-be.onrender.com/api/v1')

    def test_every_app_installed(self):
        for label in ('core', 'pos', 'purchasing', 'catalog', 'parties', 'locations'):
            self.assertEqual(apps.get_app_config(label).name, f'frontend.{label}')
