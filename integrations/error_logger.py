"""
Fault-Tolerant Integration Error Logger

Best-effort durable sink for integration failures. ``record`` and
``record_many`` never raise. When the entries cannot be persisted they go to
a diagnostic fallback sink, which by default is the ``integrations.fallback``
logger.

Persistence is gated by an AccessPolicy:
- without create permission on the error log, or without write access to a
  required field, the whole batch goes to the fallback sink
- optional fields the policy cannot write are blanked before saving
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Iterable, List, Optional

from django.db import transaction

from .conf import get_setting
from .exceptions import LoggingDegraded
from .types import LogEntry

logger = logging.getLogger(__name__)
fallback_logger = logging.getLogger('integrations.fallback')

REQUIRED_FIELDS = ('integration_name', 'error_kind', 'message')
OPTIONAL_FIELDS = ('record_id', 'status_code', 'raw_response', 'logged_at')

# Field -> permission required to write it; unlisted fields need no extra permission
FIELD_PERMISSIONS = {
    'raw_response': 'integrations.write_raw_response',
}

FallbackSink = Callable[[LogEntry, str], None]


# =============================================================================
# ACCESS POLICIES
# =============================================================================

class AccessPolicy(ABC):
    """What the current execution context may write to the error log."""

    @abstractmethod
    def can_create(self) -> bool:
        pass

    @abstractmethod
    def can_write(self, field: str) -> bool:
        pass


class AllowAllAccessPolicy(AccessPolicy):
    """System context: every field is writable."""

    def can_create(self) -> bool:
        return True

    def can_write(self, field: str) -> bool:
        return True


class UserPermissionAccessPolicy(AccessPolicy):
    """Checks Django model and field permissions of a run-as user."""

    create_permission = 'integrations.add_integrationerrorlog'

    def __init__(self, user, field_permissions=None):
        self.user = user
        self.field_permissions = FIELD_PERMISSIONS if field_permissions is None else field_permissions

    def can_create(self) -> bool:
        return bool(self.user and self.user.is_active and self.user.has_perm(self.create_permission))

    def can_write(self, field: str) -> bool:
        permission = self.field_permissions.get(field)
        if permission is None:
            return True
        return self.user.has_perm(permission)


def get_default_access_policy() -> AccessPolicy:
    """Policy for LEAD_SYNC['RUN_AS_USERNAME'], or allow-all when unset."""
    username = get_setting('RUN_AS_USERNAME')
    if not username:
        return AllowAllAccessPolicy()

    from django.contrib.auth import get_user_model
    User = get_user_model()
    user = User.objects.filter(**{User.USERNAME_FIELD: username}).first()
    if user is None:
        raise LoggingDegraded(f"Run-as user '{username}' does not exist")
    return UserPermissionAccessPolicy(user)


# =============================================================================
# FALLBACK SINK
# =============================================================================

def log_to_fallback(entry: LogEntry, reason: str):
    """Default diagnostic sink: one structured line per entry."""
    fallback_logger.error(
        f"INTEGRATION_ERROR integration={entry.integration_name} record={entry.record_id} "
        f"kind={entry.error_kind} status={entry.status_code} reason={reason} "
        f"message={entry.message!r} response={entry.raw_response!r} at={entry.timestamp.isoformat()}"
    )


# =============================================================================
# LOGGER
# =============================================================================

class FaultTolerantLogger:
    """
    Persist integration errors without ever failing the caller.

    Args:
        policy: AccessPolicy to apply; resolved from settings on each call when None
        fallback: Callable(entry, reason) used when persisting is not possible
    """

    def __init__(self, policy: Optional[AccessPolicy] = None, fallback: Optional[FallbackSink] = None):
        self._policy = policy
        self._fallback = fallback or log_to_fallback

    def record(self, entry: LogEntry):
        self.record_many([entry])

    def record_many(self, entries: Iterable[LogEntry]):
        entries = list(entries)
        if not entries:
            return

        try:
            policy = self._policy or get_default_access_policy()
            self._check_access(policy)
            self._persist(entries, policy)
        except LoggingDegraded as e:
            self._send_to_fallback(entries, f"LoggingDegraded: {e}")
        except Exception as e:
            logger.warning(f"Integration error log unavailable: {type(e).__name__}: {e}")
            self._send_to_fallback(entries, f"LoggingDegraded: {type(e).__name__}: {e}")

    def _check_access(self, policy: AccessPolicy):
        if not policy.can_create():
            raise LoggingDegraded("no create permission on integration error log")
        blocked = [field for field in REQUIRED_FIELDS if not policy.can_write(field)]
        if blocked:
            raise LoggingDegraded(f"required fields not writable: {', '.join(blocked)}")

    def _persist(self, entries: List[LogEntry], policy: AccessPolicy):
        from .models import IntegrationErrorLog

        writable = {field for field in OPTIONAL_FIELDS if policy.can_write(field)}
        rows = [self._to_row(IntegrationErrorLog, entry, writable) for entry in entries]

        # Savepoint keeps a failed insert from breaking the caller's transaction
        with transaction.atomic():
            IntegrationErrorLog.objects.bulk_create(rows)

    @staticmethod
    def _to_row(model, entry: LogEntry, writable):
        row = model(
            integration_name=entry.integration_name,
            error_kind=entry.error_kind,
            message=entry.message,
        )
        if 'record_id' in writable:
            row.record_id = entry.record_id or ''
        if 'status_code' in writable:
            row.status_code = entry.status_code
        if 'raw_response' in writable:
            row.raw_response = entry.raw_response or ''
        if 'logged_at' in writable:
            row.logged_at = entry.timestamp
        return row

    def _send_to_fallback(self, entries: List[LogEntry], reason: str):
        for entry in entries:
            try:
                self._fallback(entry, reason)
            except Exception:
                # Last resort: the sink itself failed, nothing left to report to
                logger.debug("Fallback sink failed", exc_info=True)
