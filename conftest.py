"""
Lead Sync Test Configuration - pytest fixtures and factories

This module provides:
- pytest-django configuration
- factory_boy factories for leads, users and integration credentials
- Shared fixtures for the lead sync engine (fake CRM client, error sink,
  recording scheduler)

RUNNING TESTS:
# Run all tests
pytest tests/ -v

# Run by module
pytest tests/test_chunked_job.py -v
pytest tests/test_error_logger.py -v
"""

import uuid
from typing import Any, Dict, List

import pytest

import factory
from factory import fuzzy
from factory.django import DjangoModelFactory

from integrations.types import ErrorKind, SyncResult


# ============================================================================
# USER FACTORIES
# ============================================================================

class UserFactory(DjangoModelFactory):
    """Factory for Django auth users."""

    class Meta:
        model = 'auth.User'
        django_get_or_create = ('username',)
        skip_postgeneration_save = True

    username = factory.LazyAttribute(lambda o: f"user_{uuid.uuid4().hex[:8]}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    password = factory.PostGenerationMethodCall('set_password', 'testpass123')
    is_active = True


class SuperUserFactory(UserFactory):
    """Factory for superuser accounts."""

    is_staff = True
    is_superuser = True


# ============================================================================
# LEAD FACTORIES
# ============================================================================

class LeadFactory(DjangoModelFactory):
    """Factory for Lead model."""

    class Meta:
        model = 'leads.Lead'

    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    company = factory.Faker('company')
    email = factory.Sequence(lambda n: f"lead{n}@example.com")
    phone = factory.Faker('numerify', text='+1-555-###-####')
    source = fuzzy.FuzzyChoice(['web', 'referral', 'event', 'partner'])
    status = 'new'
    external_reference = ''


# ============================================================================
# INTEGRATION FACTORIES
# ============================================================================

class IntegrationCredentialFactory(DjangoModelFactory):
    """Factory for IntegrationCredential model."""

    class Meta:
        model = 'integrations.IntegrationCredential'
        django_get_or_create = ('name',)

    name = 'lead_sync'
    auth_type = 'bearer'
    header_name = 'Authorization'
    secret = factory.LazyFunction(lambda: f"tok_{uuid.uuid4().hex}")
    is_active = True


# ============================================================================
# FACTORY FIXTURES
# ============================================================================

@pytest.fixture
def user_factory(db):
    """Return UserFactory for creating users."""
    return UserFactory


@pytest.fixture
def superuser_factory(db):
    """Return SuperUserFactory for creating superusers."""
    return SuperUserFactory


@pytest.fixture
def lead_factory(db):
    """Return LeadFactory for creating leads."""
    return LeadFactory


@pytest.fixture
def credential_factory(db):
    """Return IntegrationCredentialFactory for creating credentials."""
    return IntegrationCredentialFactory


# ============================================================================
# MODEL FIXTURES
# ============================================================================

@pytest.fixture
def user(db):
    """Create a standard user."""
    return UserFactory()


@pytest.fixture
def admin_user(db):
    """Create an admin user."""
    return SuperUserFactory()


@pytest.fixture
def lead(db):
    """Create a single unsynced lead."""
    return LeadFactory()


@pytest.fixture
def credential(db):
    """Create the credential the lead sync provider authenticates with."""
    return IntegrationCredentialFactory(secret='tok_live_secret')


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client(db):
    """Provide a DRF API test client."""
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def authenticated_api_client(db, api_client, user):
    """Provide an authenticated DRF API test client."""
    api_client.force_authenticate(user=user)
    return api_client


@pytest.fixture
def admin_api_client(db, api_client, admin_user):
    """Provide a DRF API test client authenticated as staff."""
    api_client.force_authenticate(user=admin_user)
    return api_client


# ============================================================================
# LEAD SYNC TEST DOUBLES
# ============================================================================

class FakeCrmClient:
    """
    Stand-in for LeadSyncProvider.

    Succeeds for every lead unless an outcome is registered for its id in
    ``failures`` (a SyncResult) or ``errors`` (an exception to raise).
    """

    def __init__(self):
        self.sent: List[Any] = []
        self.failures: Dict[Any, SyncResult] = {}
        self.errors: Dict[Any, Exception] = {}

    def send(self, lead):
        self.sent.append(lead.pk)
        if lead.pk in self.errors:
            raise self.errors[lead.pk]
        if lead.pk in self.failures:
            return self.failures[lead.pk]
        return SyncResult.succeeded(lead.pk, f"EXT-{lead.pk}", status_code=201)

    def fail_with_transport_error(self, lead_id):
        self.failures[lead_id] = SyncResult.failed(
            lead_id, ErrorKind.TRANSPORT_ERROR, message="Request failed: ReadTimeout"
        )


class RecordingScheduler:
    """Scheduler double that records remainders instead of enqueueing them."""

    def __init__(self, error: Exception = None):
        self.calls: List[Dict[str, Any]] = []
        self.error = error

    def __call__(self, lead_ids, run_id=None, chunk_number=1):
        self.calls.append({
            'lead_ids': list(lead_ids),
            'run_id': run_id,
            'chunk_number': chunk_number,
        })
        if self.error is not None:
            raise self.error
        from integrations.services import SyncSchedule
        return SyncSchedule(
            run_id=run_id,
            task_id=f"task-{len(self.calls)}",
            chunk_number=chunk_number,
            queued=len(lead_ids),
        )


@pytest.fixture
def crm_client():
    """Provide a fake CRM client that succeeds by default."""
    return FakeCrmClient()


@pytest.fixture
def recording_scheduler():
    """Provide a scheduler double that accepts every remainder."""
    return RecordingScheduler()


@pytest.fixture
def fallback_entries():
    """Collect entries sent to the error logger's fallback sink."""
    return []


@pytest.fixture
def error_logger(fallback_entries):
    """Provide an allow-all FaultTolerantLogger with a list-backed fallback."""
    from integrations.error_logger import AllowAllAccessPolicy, FaultTolerantLogger
    return FaultTolerantLogger(
        policy=AllowAllAccessPolicy(),
        fallback=lambda entry, reason: fallback_entries.append((entry, reason)),
    )


@pytest.fixture
def run_id():
    """Provide a fresh run identifier."""
    return uuid.uuid4().hex


@pytest.fixture
def failing_scheduler():
    """Provide a scheduler double whose broker is down."""
    from integrations.exceptions import SchedulingUnavailable
    return RecordingScheduler(error=SchedulingUnavailable('broker down'))
