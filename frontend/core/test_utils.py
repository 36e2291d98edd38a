"""
Test utilities: canned API data and a stand-in for requests.Session
"""
import json
from collections import namedtuple

import requests
from django.conf import settings

from frontend.core.api import APIClient
from frontend.core.session import SessionContext
from frontend.core.storage import LocalStorage

Call = namedtuple('Call', ['method', 'path', 'params', 'json', 'data', 'files', 'headers'])


def make_response(status_code=200, body=None, raw=None):
    """Build a real requests.Response with a JSON (or raw) body"""
    response = requests.Response()
    response.status_code = status_code
    if raw is not None:
        response._content = raw.encode()
    elif body is not None:
        response._content = json.dumps(body).encode()
        response.headers['Content-Type'] = 'application/json'
    else:
        response._content = b''
    response.encoding = 'utf-8'
    response.url = 'http://testserver/'
    return response


class FakeHTTP:
    """
    Routes (method, path) to canned responses and records every call.

    Unknown routes answer 404 {"error": "Not found"}.
    """

    def __init__(self, base_url=None):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip('/')
        self.routes = {}
        self.calls = []

    def add(self, method, path, status_code=200, body=None, raw=None, exc=None):
        self.routes[(method, path)] = (status_code, body, raw, exc)
        return self

    def request(self, method, url, params=None, json=None, data=None, files=None, headers=None, timeout=None):
        path = url[len(self.base_url):]
        self.calls.append(Call(method, path, params, json, data, files, headers or {}))
        route = self.routes.get((method, path))
        if route is None:
            return make_response(404, {'error': 'Not found'})
        status_code, body, raw, exc = route
        if exc is not None:
            raise exc
        return make_response(status_code, body, raw)

    def calls_to(self, method, path):
        return [c for c in self.calls if c.method == method and c.path == path]


class TestDataFactory:
    """Factory for API documents as the server returns them"""

    @staticmethod
    def organization(id=1, name='Sharma Traders'):
        return {'id': id, 'name': name, 'logo_url': None}

    @staticmethod
    def store(id=1, name=None, code=None, organization_id=1):
        return {
            'id': id,
            'name': name or f'Store {id}',
            'code': code or f'ST{id:03d}',
            'organization_id': organization_id,
        }

    @staticmethod
    def user(id=1, role='org_admin', store=None, email=None, name='Asha Sharma'):
        return {
            'id': id,
            'name': name,
            'email': email or f'user{id}@example.com',
            'role': role,
            'organization': TestDataFactory.organization(),
            'store': store,
        }

    @staticmethod
    def product(id=1, name=None, current_stock=10, selling_price='100.00', sku=None, barcode=None, active=True):
        return {
            'id': id,
            'name': name or f'Product {id}',
            'sku': sku,
            'barcode': barcode,
            'purchase_price': '60.00',
            'selling_price': selling_price,
            'current_stock': current_stock,
            'active': active,
        }

    @staticmethod
    def login_response(user, token='token-abc'):
        return {'token': token, 'user': user}


def build_session(http=None, storage=None):
    """SessionContext wired to a FakeHTTP; returns (session, http)"""
    http = http or FakeHTTP()
    api = APIClient(http=http)
    session = SessionContext(api=api, storage=storage or LocalStorage())
    return session, http
