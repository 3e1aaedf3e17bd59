"""
Integrations Celery Tasks

Background tasks for:
- Chunked outbound lead synchronization (self-chaining)
- Sync log retention
"""

import logging
from datetime import timedelta

from celery import shared_task
from django.utils import timezone

logger = logging.getLogger(__name__)


@shared_task(bind=True, name='integrations.tasks.process_lead_sync_chunk', max_retries=0)
def process_lead_sync_chunk(self, lead_ids, run_id, chunk_number=1):
    """
    Process one chunk of a lead sync run and re-enqueue the remainder.

    Args:
        lead_ids: Remaining lead ids of the run (the whole work queue)
        run_id: Identifier shared by every chunk of the run
        chunk_number: 1-based position of this chunk within the run

    Returns:
        dict: Summary of the chunk outcome
    """
    from .jobs import ChunkedLeadSyncJob

    job = ChunkedLeadSyncJob(
        lead_ids,
        run_id=run_id,
        chunk_number=chunk_number,
        task_id=self.request.id,
    )
    outcome = job.run()
    return outcome.as_dict()


@shared_task(name='integrations.tasks.cleanup_old_sync_logs')
def cleanup_old_sync_logs():
    """
    Clean up old chunk sync log records.
    Runs daily via Celery Beat. Integration error logs are left untouched.
    """
    from .conf import get_setting
    from .models import IntegrationSyncLog

    threshold = timezone.now() - timedelta(days=get_setting('SYNC_LOG_RETENTION_DAYS'))

    deleted_count, _ = IntegrationSyncLog.objects.filter(
        started_at__lt=threshold
    ).delete()

    logger.info(f"Cleaned up {deleted_count} old sync logs")
    return deleted_count
