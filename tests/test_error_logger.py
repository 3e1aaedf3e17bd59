"""
Tests for the fault-tolerant integration error logger.

This module tests:
- Persisting entries under the allow-all policy
- Permission-gated persistence for a run-as user
- Fallback to the diagnostic sink, which never raises
"""

import logging
from unittest.mock import patch

import pytest
from django.contrib.auth.models import Permission
from django.db import DatabaseError

from integrations.error_logger import (
    AllowAllAccessPolicy,
    FaultTolerantLogger,
    UserPermissionAccessPolicy,
    get_default_access_policy,
)
from integrations.exceptions import LoggingDegraded
from integrations.models import IntegrationErrorLog
from integrations.types import ErrorKind, LogEntry


def make_entry(record_id='17', **kwargs):
    values = {
        'integration_name': 'lead_sync',
        'record_id': record_id,
        'message': 'HTTP 500',
        'error_kind': ErrorKind.API_ERROR,
        'status_code': 500,
        'raw_response': '{"error":"rate_limited"}',
    }
    values.update(kwargs)
    return LogEntry(**values)


def grant(user, *codenames):
    for codename in codenames:
        user.user_permissions.add(
            Permission.objects.get(content_type__app_label='integrations', codename=codename)
        )
    # has_perm caches permissions on the instance
    for attr in ('_perm_cache', '_user_perm_cache', '_group_perm_cache'):
        if hasattr(user, attr):
            delattr(user, attr)


# =============================================================================
# PERSISTENCE TESTS
# =============================================================================

@pytest.mark.django_db
class TestPersistence:
    """Tests for entries written to IntegrationErrorLog."""

    def test_record_persists_entry(self, error_logger, fallback_entries):
        error_logger.record(make_entry())

        row = IntegrationErrorLog.objects.get()
        assert row.integration_name == 'lead_sync'
        assert row.record_id == '17'
        assert row.error_kind == ErrorKind.API_ERROR
        assert row.status_code == 500
        assert row.raw_response == '{"error":"rate_limited"}'
        assert fallback_entries == []

    def test_record_many_persists_batch(self, error_logger):
        error_logger.record_many([make_entry('1'), make_entry('2'), make_entry('3')])

        assert IntegrationErrorLog.objects.count() == 3

    def test_empty_batch_is_noop(self, error_logger, fallback_entries):
        error_logger.record_many([])

        assert IntegrationErrorLog.objects.count() == 0
        assert fallback_entries == []

    def test_default_policy_without_run_as_user(self):
        assert isinstance(get_default_access_policy(), AllowAllAccessPolicy)

    def test_entry_timestamp_is_kept(self, error_logger):
        entry = make_entry()

        error_logger.record(entry)

        assert IntegrationErrorLog.objects.get().logged_at == entry.timestamp


# =============================================================================
# ACCESS POLICY TESTS
# =============================================================================

@pytest.mark.django_db
class TestUserPermissionPolicy:
    """Tests for permission-gated persistence."""

    def test_without_create_permission_goes_to_fallback(self, user, fallback_entries):
        logger = FaultTolerantLogger(
            policy=UserPermissionAccessPolicy(user),
            fallback=lambda entry, reason: fallback_entries.append((entry, reason)),
        )

        logger.record(make_entry())

        assert IntegrationErrorLog.objects.count() == 0
        assert len(fallback_entries) == 1
        entry, reason = fallback_entries[0]
        assert entry.record_id == '17'
        assert 'LoggingDegraded' in reason

    def test_create_permission_without_raw_response_permission(self, user, fallback_entries):
        grant(user, 'add_integrationerrorlog')
        logger = FaultTolerantLogger(
            policy=UserPermissionAccessPolicy(user),
            fallback=lambda entry, reason: fallback_entries.append((entry, reason)),
        )

        logger.record(make_entry())

        row = IntegrationErrorLog.objects.get()
        assert row.raw_response == ''
        assert row.status_code == 500
        assert fallback_entries == []

    def test_full_permissions_keep_raw_response(self, user):
        grant(user, 'add_integrationerrorlog', 'write_raw_response')
        logger = FaultTolerantLogger(policy=UserPermissionAccessPolicy(user))

        logger.record(make_entry())

        assert IntegrationErrorLog.objects.get().raw_response == '{"error":"rate_limited"}'

    def test_superuser_can_write_everything(self, admin_user):
        policy = UserPermissionAccessPolicy(admin_user)

        assert policy.can_create()
        assert policy.can_write('raw_response')

    def test_run_as_user_from_settings(self, settings, user):
        settings.LEAD_SYNC = {'RUN_AS_USERNAME': user.username}

        policy = get_default_access_policy()

        assert isinstance(policy, UserPermissionAccessPolicy)
        assert policy.user == user

    def test_unknown_run_as_user_degrades(self, settings):
        settings.LEAD_SYNC = {'RUN_AS_USERNAME': 'nobody'}

        with pytest.raises(LoggingDegraded):
            get_default_access_policy()

    def test_unknown_run_as_user_never_raises_from_record(self, settings, caplog):
        settings.LEAD_SYNC = {'RUN_AS_USERNAME': 'nobody'}
        caplog.set_level(logging.ERROR, logger='integrations.fallback')

        FaultTolerantLogger().record(make_entry(record_id='99'))

        assert IntegrationErrorLog.objects.count() == 0
        assert 'INTEGRATION_ERROR' in caplog.text
        assert 'record=99' in caplog.text


# =============================================================================
# FALLBACK TESTS
# =============================================================================

@pytest.mark.django_db
class TestFallback:
    """Tests for the diagnostic fallback sink."""

    def test_database_error_goes_to_fallback(self, error_logger, fallback_entries):
        with patch.object(IntegrationErrorLog.objects, 'bulk_create', side_effect=DatabaseError('disk full')):
            error_logger.record_many([make_entry('1'), make_entry('2')])

        assert [entry.record_id for entry, _ in fallback_entries] == ['1', '2']
        assert 'disk full' in fallback_entries[0][1]

    def test_default_fallback_writes_structured_line(self, user, caplog):
        caplog.set_level(logging.ERROR, logger='integrations.fallback')
        logger = FaultTolerantLogger(policy=UserPermissionAccessPolicy(user))

        logger.record(make_entry(record_id='5'))

        record = [r for r in caplog.records if r.name == 'integrations.fallback'][0]
        assert record.levelno == logging.ERROR
        assert 'integration=lead_sync' in record.getMessage()
        assert 'kind=ApiError' in record.getMessage()
        assert 'status=500' in record.getMessage()

    def test_failing_fallback_sink_never_raises(self, user):
        def broken_sink(entry, reason):
            raise RuntimeError('sink down')

        logger = FaultTolerantLogger(policy=UserPermissionAccessPolicy(user), fallback=broken_sink)

        logger.record(make_entry())

    def test_failing_policy_never_raises(self, fallback_entries):
        class BrokenPolicy(AllowAllAccessPolicy):
            def can_create(self):
                raise RuntimeError('policy store down')

        logger = FaultTolerantLogger(
            policy=BrokenPolicy(),
            fallback=lambda entry, reason: fallback_entries.append((entry, reason)),
        )

        logger.record(make_entry())

        assert len(fallback_entries) == 1
