"""
Leads Signal Handlers

Change source for leads. Every write to a Lead is reported as a batch of
ChangeEvents on the ``lead_changes`` signal:
- single saves through ``post_save``
- bulk updates through ``LeadQuerySet.bulk_update``

Receivers get ``events`` (a list of ChangeEvent) and must not mutate them.
"""

import logging

from django.db.models.signals import post_save
from django.dispatch import Signal, receiver

from .events import ChangeEvent
from .models import Lead

logger = logging.getLogger(__name__)

lead_changes = Signal()


def send_lead_changes(sender, events):
    if not events:
        return []
    logger.debug(f"Dispatching {len(events)} lead change event(s)")
    return lead_changes.send(sender=sender, events=events)


def send_bulk_update_events(sender, leads):
    """Report a bulk update of ``leads`` as one batch of update events."""
    events = []
    for lead in leads:
        events.append(ChangeEvent.updated(lead.pk, lead.get_loaded_snapshot(), lead.snapshot()))
        lead.reset_loaded_snapshot()
    return send_lead_changes(sender, events)


@receiver(post_save, sender=Lead)
def on_lead_saved(sender, instance, created, raw=False, **kwargs):
    """Report a single create or update."""
    if raw:
        # Fixture loading is not a business change
        return

    if created:
        event = ChangeEvent.created(instance.pk, instance.snapshot())
    else:
        event = ChangeEvent.updated(instance.pk, instance.get_loaded_snapshot(), instance.snapshot())

    instance.reset_loaded_snapshot()
    send_lead_changes(sender, [event])
