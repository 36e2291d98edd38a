"""
Django settings for the frontend client.

The client has no database: Django provides configuration, the cache layer
used as durable local storage, signals and management commands.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = os.environ.get('FRONTEND_SECRET_KEY', 'frontend-client-not-a-server')

DEBUG = os.environ.get('FRONTEND_DEBUG', '') == '1'

INSTALLED_APPS = [
    'rest_framework',
    'frontend.core',
    'frontend.pos',
    'frontend.purchasing',
    'frontend.catalog',
    'frontend.parties',
    'frontend.locations',
]

USE_I18N = True
USE_TZ = True
TIME_ZONE = 'Asia/Kolkata'
LANGUAGE_CODE = 'en-us'

DEFAULT_API_BASE_URL = 'https://hisaabkitaab-be.onrender.com/api/v1'


def _api_base_url(value):
    """Only absolute http(s) URLs are accepted, anything else falls back to the default."""
    value = (value or '').strip()
    if value.startswith('http://') or value.startswith('https://'):
        return value.rstrip('/')
    return DEFAULT_API_BASE_URL


API_BASE_URL = _api_base_url(os.environ.get('FRONTEND_API_BASE_URL'))
API_TIMEOUT = float(os.environ.get('FRONTEND_API_TIMEOUT', '30'))

# Durable local storage: token, user profile and current store survive restarts
LOCAL_STORAGE_ALIAS = 'local_storage'
LOCAL_STORAGE_DIR = os.environ.get(
    'FRONTEND_STORAGE_DIR',
    str(Path.home() / '.frontend' / 'storage'),
)

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'frontend-default',
    },
    LOCAL_STORAGE_ALIAS: {
        'BACKEND': 'django.core.cache.backends.filebased.FileBasedCache',
        'LOCATION': LOCAL_STORAGE_DIR,
        'TIMEOUT': None,
    },
}

LOG_LEVEL = os.environ.get('FRONTEND_LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'frontend': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
        'urllib3': {
            'handlers': ['console'],
            'level': 'WARNING',
        },
    },
}
