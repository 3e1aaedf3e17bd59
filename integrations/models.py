"""
Integrations Models - Outbound Lead Synchronization Bookkeeping

This module implements:
- IntegrationCredential: Named, encrypted credential attached to outgoing requests
- IntegrationSyncLog: One row per chunk invocation of a lead sync run
- IntegrationErrorLog: Durable record of a failed sync, write-back or scheduling step
"""

import base64
import uuid

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from .types import ErrorKind, JobState


def get_encryption_key():
    """
    Generate encryption key from Django SECRET_KEY.
    Uses PBKDF2 to derive a Fernet-compatible key.
    """
    password = settings.SECRET_KEY.encode()
    salt = b'leadsync_integrations_salt_v1'
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=100000,
    )
    return base64.urlsafe_b64encode(kdf.derive(password))


class EncryptedTextField(models.TextField):
    """
    Custom field that encrypts data at rest using Fernet symmetric encryption.
    """
    description = "Encrypted text field"

    def __init__(self, *args, **kwargs):
        kwargs['blank'] = kwargs.get('blank', True)
        super().__init__(*args, **kwargs)

    def get_fernet(self):
        return Fernet(get_encryption_key())

    def from_db_value(self, value, expression, connection):
        if value is None or value == '':
            return value
        try:
            return self.get_fernet().decrypt(value.encode()).decode()
        except InvalidToken:
            # Return raw value if decryption fails (for migration scenarios)
            return value

    def get_prep_value(self, value):
        if value is None or value == '':
            return value
        return self.get_fernet().encrypt(value.encode()).decode()


class IntegrationCredential(models.Model):
    """
    Named credential for an external system.
    The secret is resolved at request time and attached to the transport;
    sync code only ever refers to the credential by name.
    """

    class AuthType(models.TextChoices):
        BEARER = 'bearer', _('Bearer Token')
        API_KEY = 'api_key', _('API Key Header')

    # Identity
    uuid = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    name = models.SlugField(
        max_length=100,
        unique=True,
        help_text=_('Name referenced by LEAD_SYNC["CREDENTIAL_NAME"]')
    )

    # Auth type
    auth_type = models.CharField(
        max_length=20,
        choices=AuthType.choices,
        default=AuthType.BEARER
    )
    header_name = models.CharField(
        max_length=100,
        default='Authorization',
        help_text=_('Header that carries the secret')
    )

    # Secret (encrypted)
    secret = EncryptedTextField(
        blank=True,
        help_text=_('Access token or API key (encrypted)')
    )

    is_active = models.BooleanField(default=True)
    expires_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Integration Credential')
        verbose_name_plural = _('Integration Credentials')
        ordering = ['name']

    def __str__(self):
        return f"Credential {self.name}"

    @property
    def is_expired(self):
        """Check if the secret is expired."""
        if not self.expires_at:
            return False
        return timezone.now() >= self.expires_at

    @property
    def is_usable(self):
        return self.is_active and bool(self.secret) and not self.is_expired

    def build_header(self):
        """Return the (header, value) pair to attach to a request."""
        if self.auth_type == self.AuthType.BEARER:
            return self.header_name, f"Bearer {self.secret}"
        return self.header_name, self.secret


class IntegrationSyncLog(models.Model):
    """
    Tracks each chunk invocation of a lead sync run for auditing and debugging.
    All chunks of one run share ``run_id``.
    """

    # Identity
    uuid = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    run_id = models.UUIDField(db_index=True)
    chunk_number = models.PositiveIntegerField(default=1)

    integration_name = models.CharField(max_length=100)
    status = models.CharField(
        max_length=20,
        choices=JobState.choices,
        default=JobState.RUNNING
    )

    # Statistics
    records_in_chunk = models.PositiveIntegerField(default=0)
    records_succeeded = models.PositiveIntegerField(default=0)
    records_failed = models.PositiveIntegerField(default=0)
    records_remaining = models.PositiveIntegerField(default=0)

    # Error tracking
    error_message = models.TextField(blank=True)

    # Scheduling
    task_id = models.CharField(max_length=255, blank=True)
    next_task_id = models.CharField(max_length=255, blank=True)

    # Timestamps
    started_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _('Integration Sync Log')
        verbose_name_plural = _('Integration Sync Logs')
        ordering = ['-started_at']
        indexes = [
            models.Index(fields=['run_id', 'chunk_number'], name='integ_synclog_run_chunk_idx'),
            models.Index(fields=['status', '-started_at'], name='integ_synclog_status_idx'),
        ]

    def __str__(self):
        return f"{self.integration_name} run {self.run_id} chunk {self.chunk_number} ({self.get_status_display()})"

    @property
    def duration_seconds(self):
        """Calculate chunk duration in seconds."""
        if not self.completed_at:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def mark_finished(self, outcome, error_message=''):
        """Store the final state of the chunk invocation."""
        self.status = outcome.state
        self.records_succeeded = len(outcome.succeeded_ids)
        self.records_failed = len(outcome.failed_ids)
        self.records_remaining = outcome.remaining
        self.next_task_id = outcome.next_task_id or ''
        self.error_message = error_message
        self.completed_at = timezone.now()
        self.save()


class IntegrationErrorLog(models.Model):
    """
    Durable record of an integration failure.
    Rows are written once by the fault-tolerant logger and never updated.
    """

    # Identity
    uuid = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)

    integration_name = models.CharField(max_length=100, db_index=True)
    record_id = models.TextField(
        blank=True,
        help_text=_('Affected record id, or comma separated ids for a batch failure')
    )
    error_kind = models.CharField(max_length=30, choices=ErrorKind.choices)
    message = models.TextField()

    # Remote response
    status_code = models.PositiveIntegerField(null=True, blank=True)
    raw_response = models.TextField(blank=True)

    logged_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = _('Integration Error Log')
        verbose_name_plural = _('Integration Error Logs')
        ordering = ['-logged_at']
        indexes = [
            models.Index(fields=['integration_name', '-logged_at'], name='integ_errlog_name_idx'),
            models.Index(fields=['error_kind'], name='integ_errlog_kind_idx'),
        ]
        permissions = [
            ('write_raw_response', _('Can record raw integration responses')),
        ]

    def __str__(self):
        return f"{self.integration_name} {self.error_kind} [{self.record_id}]"


# Register models with auditlog
from auditlog.registry import auditlog  # noqa: E402
auditlog.register(IntegrationCredential, exclude_fields=['secret'])
