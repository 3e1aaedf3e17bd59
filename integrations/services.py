"""
Lead Sync Orchestration Services

- schedule_lead_sync: turns candidate lead ids into one scheduled work queue
- handle_lead_changes: change-source entry point (filter, then schedule after commit)
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from django.db import transaction
from kombu.exceptions import OperationalError as BrokerOperationalError

from .change_filter import filter_sync_candidates
from .conf import chunk_time_limits, get_setting
from .error_logger import FaultTolerantLogger
from .exceptions import SchedulingUnavailable
from .recursion import SyncCycle, current_cycle
from .types import ErrorKind, LogEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncSchedule:
    """Acknowledgement of one accepted scheduling request."""
    run_id: str
    task_id: Optional[str]
    chunk_number: int
    queued: int


def schedule_lead_sync(lead_ids: Iterable[Any], run_id: str = None, chunk_number: int = 1) -> Optional[SyncSchedule]:
    """
    Submit one chunk-processing request carrying the whole work queue.

    Args:
        lead_ids: Candidate lead ids; duplicates are dropped, order is kept
        run_id: Run to continue; a new run is started when omitted
        chunk_number: Position of the first chunk of this queue within the run

    Returns:
        SyncSchedule, or None when there is nothing to schedule

    Raises:
        SchedulingUnavailable: the broker refused the request
    """
    from .tasks import process_lead_sync_chunk

    work_queue = list(dict.fromkeys(lead_ids))
    if not work_queue:
        return None

    run_id = run_id or uuid.uuid4().hex
    soft_time_limit, time_limit = chunk_time_limits()

    try:
        result = process_lead_sync_chunk.apply_async(
            kwargs={
                'lead_ids': work_queue,
                'run_id': run_id,
                'chunk_number': chunk_number,
            },
            soft_time_limit=soft_time_limit,
            time_limit=time_limit,
        )
    except (BrokerOperationalError, ConnectionError) as e:
        logger.error(f"Could not schedule lead sync run {run_id} ({len(work_queue)} leads): {e}")
        raise SchedulingUnavailable(f"Task scheduler rejected lead sync: {e}", lead_ids=work_queue) from e

    logger.info(f"Scheduled lead sync run {run_id} chunk {chunk_number}: {len(work_queue)} leads queued")
    return SyncSchedule(
        run_id=run_id,
        task_id=getattr(result, 'id', None),
        chunk_number=chunk_number,
        queued=len(work_queue),
    )


def handle_lead_changes(events, cycle: SyncCycle = None, error_logger: FaultTolerantLogger = None) -> List[Any]:
    """
    Filter a batch of lead change events and schedule the candidates.

    Scheduling runs after the surrounding transaction commits, so a sync
    problem can never block or roll back the write that caused it.

    Args:
        events: ChangeEvents from one change-source invocation
        cycle: Cycle whose ProcessedSet to honour; defaults to the current one

    Returns:
        Candidate lead ids handed to the scheduler
    """
    if not get_setting('ENABLED'):
        return []

    cycle = cycle or current_cycle()
    processed = cycle.processed if cycle is not None else frozenset()

    candidate_ids = [c.record_id for c in filter_sync_candidates(events, processed)]
    if not candidate_ids:
        return []

    error_logger = error_logger or FaultTolerantLogger()

    def _schedule():
        try:
            schedule_lead_sync(candidate_ids)
        except SchedulingUnavailable as e:
            error_logger.record(LogEntry.from_exception(
                get_setting('INTEGRATION_NAME'),
                candidate_ids,
                e,
                error_kind=ErrorKind.SCHEDULING_UNAVAILABLE,
                message='Lead sync could not be scheduled',
            ))

    transaction.on_commit(_schedule)
    return candidate_ids
