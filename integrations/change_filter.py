"""
Change filter for outbound lead synchronization.

Decides which captured lead changes need a remote call:
- every created lead is a candidate
- an updated lead is a candidate only if a tracked field changed
- a lead already in the cycle's ProcessedSet is never a candidate
"""

import logging
from typing import AbstractSet, Any, Iterable, List, Optional, Sequence

from leads.events import ChangeEvent

from .conf import get_setting
from .types import SyncCandidate

logger = logging.getLogger(__name__)


def filter_sync_candidates(
    events: Iterable[ChangeEvent],
    processed: AbstractSet[Any],
    tracked_fields: Optional[Sequence[str]] = None,
) -> List[SyncCandidate]:
    """
    Select the sync candidates from a batch of change events.

    Args:
        events: Change events from one change-source invocation
        processed: Ids already written back in this cycle (read only)
        tracked_fields: Fields whose change warrants a sync; defaults to
            LEAD_SYNC['TRACKED_FIELDS']

    Returns:
        Candidates in first-seen order, without duplicates
    """
    if tracked_fields is None:
        tracked_fields = get_setting('TRACKED_FIELDS')

    candidates = []
    seen = set()

    for event in events:
        if not isinstance(event, ChangeEvent):
            raise TypeError(f"Expected ChangeEvent, got {type(event).__name__}")

        record_id = event.record_id
        if record_id in seen:
            continue

        if record_id in processed:
            logger.debug(f"Lead {record_id} already synced in this cycle, skipping")
            continue

        if not event.is_create and not event.changed_fields(tracked_fields):
            continue

        seen.add(record_id)
        candidates.append(SyncCandidate(record_id=record_id))

    return candidates
