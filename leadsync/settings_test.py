"""
Django Test Settings for the Lead Sync Project

This module contains test-specific settings that override the main settings
for faster and more isolated test execution.

Usage:
    pytest --ds=leadsync.settings_test
"""

from .settings import *  # noqa: F401, F403

# =============================================================================
# TEST ENVIRONMENT CONFIGURATION
# =============================================================================

DEBUG = False
TESTING = True

SECRET_KEY = 'test-secret-key-not-for-production'

# Use a faster password hasher for tests
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

# =============================================================================
# DATABASE CONFIGURATION
# =============================================================================

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

# =============================================================================
# CELERY CONFIGURATION
# =============================================================================

# Execute tasks synchronously during tests
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

# =============================================================================
# LEAD SYNC CONFIGURATION
# =============================================================================

LEAD_SYNC = {
    'ENABLED': True,
    'INTEGRATION_NAME': 'lead_sync',
    'ENDPOINT_URL': 'https://crm.example.com/api/leads',
    'CREDENTIAL_NAME': 'lead_sync',
    'CHUNK_SIZE': 50,
    'REQUEST_TIMEOUT': 5,
    'RUN_AS_USERNAME': None,
}

# =============================================================================
# MIDDLEWARE ADJUSTMENTS
# =============================================================================

MIDDLEWARE = [m for m in MIDDLEWARE if m not in [  # noqa: F405
    'auditlog.middleware.AuditlogMiddleware',
]]

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

# Minimal logging during tests; records still propagate to pytest's caplog
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'root': {
        'handlers': ['null'],
        'level': 'WARNING',
    },
    'loggers': {
        'django': {
            'handlers': ['null'],
            'level': 'CRITICAL',
            'propagate': False,
        },
        'django.db.backends': {
            'handlers': ['null'],
            'level': 'CRITICAL',
            'propagate': False,
        },
    },
}

# =============================================================================
# TEST FIXTURES CONFIGURATION
# =============================================================================

# Factory Boy settings
FACTORY_BOY_RANDOM_SEED = 12345

# Faker locale
FAKER_LOCALE = 'en_US'
