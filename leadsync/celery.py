"""
Celery configuration for the Lead Sync project.

This module configures Celery for the asynchronous lead synchronization with:
- Auto-discovery of tasks from all registered Django apps
- A dedicated queue for outbound integration work
- Serialization and execution limits for chunk invocations
"""

import os
from celery import Celery
from kombu import Exchange, Queue

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'leadsync.settings')

app = Celery('leadsync')

# - namespace='CELERY' means all celery-related configuration keys
#   should have a `CELERY_` prefix.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django apps.
app.autodiscover_tasks()


# ==================== QUEUE CONFIGURATION ====================

default_exchange = Exchange('default', type='direct')
integrations_exchange = Exchange('integrations', type='direct')

app.conf.task_queues = (
    Queue('default', default_exchange, routing_key='default'),
    Queue('integrations', integrations_exchange, routing_key='integrations'),
)

app.conf.task_default_queue = 'default'
app.conf.task_default_exchange = 'default'
app.conf.task_default_routing_key = 'default'


# ==================== TASK ROUTING ====================

app.conf.task_routes = {
    'integrations.tasks.*': {'queue': 'integrations', 'routing_key': 'integrations'},
}


# ==================== SERIALIZATION ====================

app.conf.task_serializer = 'json'
app.conf.result_serializer = 'json'
app.conf.accept_content = ['json']
app.conf.timezone = 'UTC'
app.conf.enable_utc = True


# ==================== WORKER CONFIGURATION ====================

# Prevent memory leaks by restarting workers after N tasks
app.conf.worker_max_tasks_per_child = 1000

# One chunk at a time per worker process; a chunk already holds CHUNK_SIZE calls
app.conf.worker_prefetch_multiplier = 1


# ==================== TASK EXECUTION ====================

# Default limits. Lead sync chunks are enqueued with their own limits,
# derived from CHUNK_SIZE * REQUEST_TIMEOUT (integrations.conf.chunk_time_limits)
app.conf.task_time_limit = 900

# Soft limit (raises SoftTimeLimitExceeded inside the task)
app.conf.task_soft_time_limit = 840

# Acknowledge after completion so a lost worker does not drop a chunk
app.conf.task_acks_late = True
app.conf.task_reject_on_worker_lost = True


# ==================== BEAT SCHEDULE ====================

from leadsync.celery_beat_schedule import CELERY_BEAT_SCHEDULE  # noqa: E402
app.conf.beat_schedule = CELERY_BEAT_SCHEDULE


@app.task(bind=True)
def health_check(self):
    """
    Simple health check task to verify Celery is running.
    """
    import platform
    import sys
    from datetime import datetime, timezone

    return {
        'status': 'healthy',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'python_version': sys.version,
        'platform': platform.platform(),
        'task_id': self.request.id,
        'worker_hostname': self.request.hostname,
    }
