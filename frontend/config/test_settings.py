"""Settings used by the test suite: storage lives in memory."""
from .settings import *  # noqa: F401,F403

API_BASE_URL = 'http://testserver/api/v1'
API_TIMEOUT = 5

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'frontend-test-default',
    },
    LOCAL_STORAGE_ALIAS: {  # noqa: F405
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'frontend-test-storage',
        'TIMEOUT': None,
    },
}

LOG_LEVEL = 'WARNING'
LOGGING['loggers']['frontend']['level'] = LOG_LEVEL  # noqa: F405
