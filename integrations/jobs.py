"""
Chunked Lead Sync Job

One invocation owns one work queue. It processes the first CHUNK_SIZE lead ids
and hands the rest, wholesale, to a new scheduling request:

    idle -> running -> rescheduled | completed | failed

Per-record failures never abort the chunk, and a chunk-wide failure never
stops the remainder from being scheduled. An unusable credential or the
Celery soft time limit stops sending, but leads the remote system already
accepted are still written back. Only a failure to schedule the remainder
ends the run (state ``failed``).
"""

import logging
from typing import Any, Callable, List, Optional, Sequence

from celery.exceptions import SoftTimeLimitExceeded
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone

from .conf import get_setting
from .error_logger import FaultTolerantLogger
from .exceptions import ConfigurationError, PersistenceError, SchedulingUnavailable
from .recursion import sync_cycle
from .types import ChunkOutcome, ErrorKind, JobState, LogEntry

logger = logging.getLogger(__name__)

WRITE_BACK_FIELDS = ['external_reference', 'last_synced_at']


class ChunkedLeadSyncJob:
    """
    Process one chunk of a lead sync work queue.

    Args:
        work_queue: Remaining lead ids of the run, in order
        run_id: Identifier shared by every chunk of the run
        chunk_number: 1-based position of this chunk within the run
        client: Object with ``send(lead) -> SyncResult``; LeadSyncProvider by default
        error_logger: FaultTolerantLogger for failures
        scheduler: Callable(remainder, run_id, chunk_number) that enqueues the
            next invocation; defaults to schedule_lead_sync
        chunk_size: Ids processed per invocation; LEAD_SYNC['CHUNK_SIZE'] by default
    """

    def __init__(
        self,
        work_queue: Sequence[Any],
        run_id: str,
        chunk_number: int = 1,
        client=None,
        error_logger: FaultTolerantLogger = None,
        scheduler: Callable = None,
        chunk_size: int = None,
        task_id: str = None,
    ):
        self.work_queue = list(work_queue)
        self.run_id = run_id
        self.chunk_number = chunk_number
        self.chunk_size = chunk_size or get_setting('CHUNK_SIZE')
        self.integration_name = get_setting('INTEGRATION_NAME')
        self.error_logger = error_logger or FaultTolerantLogger()
        self.task_id = task_id or ''
        self._client = client
        self._scheduler = scheduler
        self.state = JobState.IDLE
        self.outcome = ChunkOutcome(run_id=run_id, chunk_number=chunk_number)

    @property
    def client(self):
        if self._client is None:
            from .providers.lead_sync import LeadSyncProvider
            self._client = LeadSyncProvider()
        return self._client

    @property
    def scheduler(self):
        if self._scheduler is None:
            from .services import schedule_lead_sync
            self._scheduler = schedule_lead_sync
        return self._scheduler

    def run(self) -> ChunkOutcome:
        if self.state != JobState.IDLE:
            raise RuntimeError(f"Chunk {self.chunk_number} of run {self.run_id} already ran")

        self.state = JobState.RUNNING
        batch = self.work_queue[:self.chunk_size]
        remainder = self.work_queue[self.chunk_size:]

        self.outcome.processed_ids = list(batch)
        self.outcome.remaining = len(remainder)

        sync_log = self._open_sync_log(batch)
        error_message = ''

        logger.info(
            f"Lead sync run {self.run_id} chunk {self.chunk_number}: "
            f"processing {len(batch)} leads, {len(remainder)} remaining"
        )

        try:
            self._process_batch(batch)
        except Exception as e:
            logger.exception(f"Lead sync run {self.run_id} chunk {self.chunk_number} failed as a whole")
            error_message = f"{type(e).__name__}: {e}"
            settled = set(self.outcome.succeeded_ids) | set(self.outcome.failed_ids)
            unsettled = [i for i in batch if i not in settled]
            self.outcome.failed_ids.extend(unsettled)
            self.error_logger.record(LogEntry.from_exception(
                self.integration_name,
                unsettled,
                e,
                message=f"Chunk {self.chunk_number} of run {self.run_id} failed",
            ))

        if remainder:
            self._reschedule(remainder)
            if self.state == JobState.FAILED:
                error_message = error_message or 'Remainder could not be scheduled'
        else:
            self.state = JobState.COMPLETED

        self.outcome.state = self.state
        self._close_sync_log(sync_log, error_message)

        logger.info(
            f"Lead sync run {self.run_id} chunk {self.chunk_number} {self.state}: "
            f"{len(self.outcome.succeeded_ids)} synced, {len(self.outcome.failed_ids)} failed"
        )
        return self.outcome

    # -------------------------------------------------------------------------
    # Batch processing
    # -------------------------------------------------------------------------

    def _process_batch(self, batch: List[Any]):
        from leads.models import Lead

        if not batch:
            return

        # One bulk read for the whole chunk
        found = Lead.objects.in_bulk(batch)
        missing = [i for i in batch if i not in found]
        if missing:
            logger.warning(f"Lead sync run {self.run_id}: {len(missing)} lead(s) no longer exist: {missing}")

        successes = []
        failures = []
        aborted = None

        for lead_id in batch:
            lead = found.get(lead_id)
            if lead is None:
                continue

            try:
                result = self.client.send(lead)
            except (ConfigurationError, SoftTimeLimitExceeded) as e:
                # Nothing after this can be sent; keep what the remote already accepted
                logger.error(f"Lead sync run {self.run_id} chunk {self.chunk_number} stopped at lead {lead_id}: {e!r}")
                aborted = e
                break
            except Exception as e:
                logger.exception(f"Unexpected error syncing lead {lead_id}")
                failures.append(LogEntry.from_exception(self.integration_name, lead_id, e))
                self.outcome.failed_ids.append(lead_id)
                continue

            if result.success:
                lead.external_reference = result.external_reference
                lead.last_synced_at = timezone.now()
                successes.append(lead)
            else:
                failures.append(LogEntry.from_result(self.integration_name, result))
                self.outcome.failed_ids.append(lead_id)

        if failures:
            self.error_logger.record_many(failures)

        self._write_back(successes)

        if aborted is not None:
            raise aborted

    def _write_back(self, leads: list):
        from leads.models import Lead

        if not leads:
            return

        lead_ids = [lead.pk for lead in leads]

        with sync_cycle() as cycle:
            # Our own write must not trigger another sync pass in this cycle
            cycle.mark_processed(lead_ids)
            try:
                with transaction.atomic():
                    Lead.objects.bulk_update(leads, WRITE_BACK_FIELDS)
            except DatabaseError as e:
                logger.error(f"Lead sync run {self.run_id}: write-back of {len(leads)} leads failed: {e}")
                self.outcome.failed_ids.extend(lead_ids)
                self.error_logger.record_many([
                    LogEntry.from_exception(
                        self.integration_name,
                        lead.pk,
                        PersistenceError(
                            f"Write-back of external reference {lead.external_reference} failed: "
                            f"{type(e).__name__}: {e}"
                        ),
                        error_kind=ErrorKind.PERSISTENCE_ERROR,
                    )
                    for lead in leads
                ])
                return

        self.outcome.succeeded_ids.extend(lead_ids)

    # -------------------------------------------------------------------------
    # Self-chaining
    # -------------------------------------------------------------------------

    def _reschedule(self, remainder: List[Any]):
        try:
            schedule = self.scheduler(remainder, run_id=self.run_id, chunk_number=self.chunk_number + 1)
        except SchedulingUnavailable as e:
            logger.error(
                f"Lead sync run {self.run_id} stopped: {len(remainder)} leads could not be rescheduled"
            )
            self.state = JobState.FAILED
            self.error_logger.record(LogEntry.from_exception(
                self.integration_name,
                remainder,
                e,
                error_kind=ErrorKind.SCHEDULING_UNAVAILABLE,
                message=f"Run {self.run_id} stopped after chunk {self.chunk_number}",
            ))
            return

        self.state = JobState.RESCHEDULED
        self.outcome.next_task_id = getattr(schedule, 'task_id', None)

    # -------------------------------------------------------------------------
    # Chunk bookkeeping (best effort)
    # -------------------------------------------------------------------------

    def _open_sync_log(self, batch) -> Optional[Any]:
        from .models import IntegrationSyncLog

        try:
            with transaction.atomic():
                return IntegrationSyncLog.objects.create(
                    run_id=self.run_id,
                    chunk_number=self.chunk_number,
                    integration_name=self.integration_name,
                    status=JobState.RUNNING,
                    records_in_chunk=len(batch),
                    task_id=self.task_id,
                )
        except (DatabaseError, ValidationError, ValueError) as e:
            logger.warning(f"Could not open sync log for run {self.run_id} chunk {self.chunk_number}: {e}")
            return None

    def _close_sync_log(self, sync_log, error_message: str):
        if sync_log is None:
            return
        try:
            with transaction.atomic():
                sync_log.mark_finished(self.outcome, error_message=error_message)
        except DatabaseError as e:
            logger.warning(f"Could not close sync log for run {self.run_id} chunk {self.chunk_number}: {e}")
