"""
Integrations Signal Handlers

Connects the lead change source to outbound lead synchronization.
"""

import logging

from django.dispatch import receiver

from leads.models import Lead
from leads.signals import lead_changes

from .services import handle_lead_changes

logger = logging.getLogger(__name__)


@receiver(lead_changes, sender=Lead)
def on_lead_changes(sender, events, **kwargs):
    """Filter captured lead changes and schedule the ones that need a sync."""
    candidate_ids = handle_lead_changes(events)
    if candidate_ids:
        logger.debug(f"{len(candidate_ids)} lead(s) queued for sync after commit")
