"""
Durable local storage for session state.

Values are plain JSON strings kept in the `local_storage` cache alias
(file-based and non-expiring by default), so a restarted process can pick
up the previous login.
"""
import json
import logging

from django.conf import settings
from django.core.cache import caches

logger = logging.getLogger(__name__)

TOKEN_KEY = 'auth_token'
USER_KEY = 'auth_user'
STORE_KEY = 'current_store'

SESSION_KEYS = (TOKEN_KEY, USER_KEY, STORE_KEY)


class LocalStorage:
    """String key/value store, same contract as a browser's localStorage"""

    def __init__(self, alias=None):
        self.alias = alias or settings.LOCAL_STORAGE_ALIAS

    @property
    def backend(self):
        return caches[self.alias]

    def get_item(self, key):
        return self.backend.get(key)

    def set_item(self, key, value):
        self.backend.set(key, value, timeout=None)

    def remove_item(self, key):
        self.backend.delete(key)

    def clear(self):
        self.backend.delete_many(SESSION_KEYS)

    def get_json(self, key):
        """Parsed JSON value, or None when the key is missing or malformed"""
        raw = self.get_item(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring malformed JSON stored under {key!r}")
            return None

    def set_json(self, key, value):
        self.set_item(key, json.dumps(value))
