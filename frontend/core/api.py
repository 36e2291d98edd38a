"""
REST client for the billing API.

Every authenticated request carries the session's bearer token, and every
list/create request on a store-scoped resource carries the currently
selected store. Mutating requests wrap their payload under the singular
resource key, e.g. {"product": {...}}.
"""
import logging

import requests
from django.conf import settings

from .exceptions import APIError, TransportError

logger = logging.getLogger(__name__)


class Resource:
    """Conventional CRUD endpoints for one resource"""

    def __init__(self, client, path, key, store_scoped=True):
        self.client = client
        self.path = path
        self.key = key
        self.store_scoped = store_scoped

    def _scoped_params(self, params):
        params = {k: v for k, v in (params or {}).items() if v not in (None, '')}
        store_id = self.client.current_store_id() if self.store_scoped else None
        if store_id is not None and 'store_id' not in params:
            params['store_id'] = store_id
        return params

    def _wrap(self, data, scoped=False):
        body = dict(data or {})
        if scoped and self.store_scoped and body.get('store_id') is None:
            store_id = self.client.current_store_id()
            if store_id is not None:
                body['store_id'] = store_id
        return {self.key: body}

    def list(self, **params):
        return self.client.get(self.path, params=self._scoped_params(params)) or []

    def get(self, pk):
        return self.client.get(f"{self.path}/{pk}")

    def create(self, data):
        return self.client.post(self.path, self._wrap(data, scoped=True))

    def update(self, pk, data):
        return self.client.put(f"{self.path}/{pk}", self._wrap(data))

    def delete(self, pk):
        return self.client.delete(f"{self.path}/{pk}")


class ProductResource(Resource):
    def list(self, query=None, **params):
        return super().list(query=query, **params)


class CustomerResource(Resource):
    def list(self, query=None, **params):
        return super().list(query=query, **params)

    def find_by_phone(self, phone):
        """Existing customer with this phone number, or None"""
        result = self.client.get(self.path, params=self._scoped_params({'phone': phone.strip()}))
        if isinstance(result, list):
            return result[0] if result else None
        return result or None


class PurchaseResource(Resource):
    def add_payment(self, pk, payment):
        return self.client.post(f"{self.path}/{pk}/add_payment", {'purchase_payment': dict(payment)})


class StoreResource(Resource):
    def available(self):
        """Stores the authenticated identity may act on"""
        return self.client.get(f"{self.path}/available") or []


class DashboardResource:
    def __init__(self, client, path='/dashboard'):
        self.client = client
        self.path = path

    def get(self):
        params = {}
        store_id = self.client.current_store_id()
        if store_id is not None:
            params['store_id'] = store_id
        return self.client.get(self.path, params=params)


class AuthResource:
    def __init__(self, client, path='/auth'):
        self.client = client
        self.path = path

    def login(self, email, password):
        return self.client.post(
            f"{self.path}/login",
            {'email': email, 'password': password},
            authenticated=False,
        )

    def check_onboarding(self):
        return self.client.get(f"{self.path}/check_onboarding", authenticated=False)

    def onboard(self, form_data, files=None):
        """Multipart onboarding form, see OnboardingSerializer.to_form_data()"""
        return self.client.request(
            'POST',
            f"{self.path}/onboard",
            data=form_data,
            files=files,
            authenticated=False,
        )


class APIClient:
    """Thin requests wrapper. No retries: failures surface to the caller immediately."""

    def __init__(self, base_url=None, timeout=None, session=None, http=None):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip('/')
        self.timeout = timeout if timeout is not None else settings.API_TIMEOUT
        self.session = session
        self.http = http or requests.Session()

        self.products = ProductResource(self, '/products', 'product')
        self.vendors = Resource(self, '/vendors', 'vendor')
        self.customers = CustomerResource(self, '/customers', 'customer')
        self.purchases = PurchaseResource(self, '/purchases', 'purchase')
        self.invoices = Resource(self, '/invoices', 'invoice')
        self.stores = StoreResource(self, '/stores', 'store', store_scoped=False)
        self.users = Resource(self, '/users', 'user', store_scoped=False)
        self.dashboard = DashboardResource(self)
        self.auth = AuthResource(self)

    def token(self):
        return self.session.token if self.session is not None else None

    def current_store_id(self):
        return self.session.current_store_id if self.session is not None else None

    def request(self, method, path, payload=None, params=None, data=None, files=None,
                authenticated=True):
        url = f"{self.base_url}{path}"
        headers = {'Accept': 'application/json'}
        token = self.token() if authenticated else None
        if token:
            headers['Authorization'] = f'Bearer {token}'

        try:
            response = self.http.request(
                method,
                url,
                params=params or None,
                json=payload,
                data=data,
                files=files,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise TransportError(e) from e

        body = self._decode(response)
        if not response.ok:
            message = self._error_message(body, response.status_code)
            logger.warning(f"{method} {path} returned {response.status_code}: {message}")
            raise APIError(message, status_code=response.status_code, payload=body)

        logger.debug(f"{method} {path} -> {response.status_code}")
        return body

    def get(self, path, params=None, authenticated=True):
        return self.request('GET', path, params=params, authenticated=authenticated)

    def post(self, path, payload=None, authenticated=True):
        return self.request('POST', path, payload=payload, authenticated=authenticated)

    def put(self, path, payload=None):
        return self.request('PUT', path, payload=payload)

    def delete(self, path):
        return self.request('DELETE', path)

    @staticmethod
    def _decode(response):
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            if response.ok:
                raise APIError(
                    f"Invalid response from server ({response.status_code})",
                    status_code=response.status_code,
                )
            return None

    @staticmethod
    def _error_message(body, status_code):
        if isinstance(body, dict):
            message = body.get('error') or body.get('message')
            if message:
                return message if isinstance(message, str) else str(message)
        return f"Request failed ({status_code})"
