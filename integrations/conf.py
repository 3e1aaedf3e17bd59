"""
Lead sync configuration.

All tunables live in the ``LEAD_SYNC`` settings dict; any key left out falls
back to the defaults below.
"""

from django.conf import settings

# Must stay below the host's per-invocation external call ceiling
CHUNK_SIZE = 50

DEFAULTS = {
    'ENABLED': True,
    'INTEGRATION_NAME': 'lead_sync',
    'ENDPOINT_URL': '',
    'CREDENTIAL_NAME': 'lead_sync',
    'CHUNK_SIZE': CHUNK_SIZE,
    'REQUEST_TIMEOUT': 30,
    'RUN_AS_USERNAME': None,
    'REFERENCE_FIELD': 'id',
    'TRACKED_FIELDS': (
        'first_name',
        'last_name',
        'company',
        'email',
        'phone',
        'source',
        'status',
    ),
    # Local field -> external payload key
    'FIELD_MAP': {
        'first_name': 'FirstName',
        'last_name': 'LastName',
        'company': 'Company',
        'email': 'Email',
        'phone': 'Phone',
        'source': 'LeadSource',
        'status': 'Status',
    },
    'SYNC_LOG_RETENTION_DAYS': 90,
}


def get_setting(name):
    """Read a single lead sync setting, falling back to its default."""
    if name not in DEFAULTS:
        raise KeyError(f"Unknown LEAD_SYNC setting: {name}")
    overrides = getattr(settings, 'LEAD_SYNC', None) or {}
    return overrides.get(name, DEFAULTS[name])


# Seconds allowed beyond the worst case of CHUNK_SIZE sequential timeouts
CHUNK_TIME_MARGIN = 60


def chunk_time_limits():
    """
    Soft and hard Celery time limits for one chunk invocation.

    Derived from CHUNK_SIZE * REQUEST_TIMEOUT so a chunk of hanging requests
    reaches the soft limit (and is wound down) only after every request has
    had its full timeout.
    """
    soft = get_setting('CHUNK_SIZE') * get_setting('REQUEST_TIMEOUT') + CHUNK_TIME_MARGIN
    return soft, soft + CHUNK_TIME_MARGIN
