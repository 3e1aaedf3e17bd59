"""
Celery Beat Schedule Configuration for Lead Sync

Periodic maintenance for the integration bookkeeping tables.

Schedule Format:
- crontab(minute, hour, day_of_week, day_of_month, month_of_year)
- timedelta for interval-based schedules
"""

from celery.schedules import crontab


CELERY_BEAT_SCHEDULE = {
    # ==========================================================================
    # INTEGRATION MAINTENANCE TASKS (Daily)
    # ==========================================================================

    # Chunk logs only; integration error logs have no deletion path
    'cleanup-old-sync-logs-daily': {
        'task': 'integrations.tasks.cleanup_old_sync_logs',
        'schedule': crontab(hour=4, minute=0),  # Daily at 4 AM
        'options': {'queue': 'integrations'},
    },
}
