"""
Integration exceptions.

Per-record remote failures are not raised; they travel as SyncResult values.
These exceptions cover the conditions that have to leave a call site.
"""


class IntegrationError(Exception):
    """Base exception for integration errors."""
    pass


class ConfigurationError(IntegrationError):
    """Raised when integration is misconfigured."""
    pass


class TransportError(IntegrationError):
    """Raised when the remote call never completed (timeout, refused, TLS)."""
    pass


class PersistenceError(IntegrationError):
    """Raised when the local write-back of sync results fails."""
    pass


class SchedulingUnavailable(IntegrationError):
    """Raised when the task scheduler refuses to enqueue a work queue."""

    def __init__(self, message, lead_ids=None):
        super().__init__(message)
        self.lead_ids = list(lead_ids or [])


class LoggingDegraded(IntegrationError):
    """Signals that error logging fell back to the diagnostic sink. Never escapes the logger."""
    pass
