"""
Value types shared by the lead sync components.

- SyncCandidate: a lead id that needs an outbound call this cycle
- SyncResult: outcome of one remote call for one lead
- LogEntry: one durable integration error record
- ChunkOutcome: what a single chunk invocation did
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

from django.db import models
from django.utils import timezone


class ErrorKind(models.TextChoices):
    API_ERROR = 'ApiError', 'API Error'
    TRANSPORT_ERROR = 'TransportError', 'Transport Error'
    PERSISTENCE_ERROR = 'PersistenceError', 'Persistence Error'
    SCHEDULING_UNAVAILABLE = 'SchedulingUnavailable', 'Scheduling Unavailable'
    UNEXPECTED = 'UnexpectedError', 'Unexpected Error'


class JobState(models.TextChoices):
    IDLE = 'idle', 'Idle'
    RUNNING = 'running', 'Running'
    RESCHEDULED = 'rescheduled', 'Rescheduled'
    COMPLETED = 'completed', 'Completed'
    FAILED = 'failed', 'Failed'


@dataclass(frozen=True)
class SyncCandidate:
    record_id: Any


@dataclass(frozen=True)
class SyncResult:
    record_id: Any
    success: bool
    external_reference: Optional[str] = None
    error_kind: Optional[str] = None
    status_code: Optional[int] = None
    raw_response: str = ''
    message: str = ''

    @classmethod
    def succeeded(cls, record_id, external_reference, status_code=None) -> 'SyncResult':
        return cls(
            record_id=record_id,
            success=True,
            external_reference=str(external_reference),
            status_code=status_code,
        )

    @classmethod
    def failed(cls, record_id, error_kind, message, status_code=None, raw_response='') -> 'SyncResult':
        return cls(
            record_id=record_id,
            success=False,
            error_kind=error_kind,
            status_code=status_code,
            raw_response=raw_response or '',
            message=message,
        )


@dataclass(frozen=True)
class LogEntry:
    integration_name: str
    record_id: str
    message: str
    error_kind: str
    status_code: Optional[int] = None
    raw_response: str = ''
    timestamp: datetime = field(default_factory=timezone.now)

    @classmethod
    def from_result(cls, integration_name: str, result: SyncResult) -> 'LogEntry':
        return cls(
            integration_name=integration_name,
            record_id=str(result.record_id),
            message=result.message,
            error_kind=result.error_kind or ErrorKind.UNEXPECTED,
            status_code=result.status_code,
            raw_response=result.raw_response,
        )

    @classmethod
    def from_exception(cls, integration_name: str, record_ids, exc: BaseException,
                       error_kind=ErrorKind.UNEXPECTED, message: str = '') -> 'LogEntry':
        if isinstance(record_ids, (list, tuple, set)):
            record_id = ','.join(str(r) for r in record_ids)
        else:
            record_id = str(record_ids)
        detail = f"{type(exc).__name__}: {exc}"
        return cls(
            integration_name=integration_name,
            record_id=record_id,
            message=f"{message}: {detail}" if message else detail,
            error_kind=error_kind,
        )


@dataclass
class ChunkOutcome:
    run_id: str
    chunk_number: int
    state: str = JobState.IDLE
    processed_ids: List[Any] = field(default_factory=list)
    succeeded_ids: List[Any] = field(default_factory=list)
    failed_ids: List[Any] = field(default_factory=list)
    remaining: int = 0
    next_task_id: Optional[str] = None

    def as_dict(self):
        return {
            'run_id': self.run_id,
            'chunk_number': self.chunk_number,
            'state': str(self.state),
            'processed': len(self.processed_ids),
            'succeeded': len(self.succeeded_ids),
            'failed': len(self.failed_ids),
            'remaining': self.remaining,
            'next_task_id': self.next_task_id,
        }
