"""
Recursion guard for lead synchronization.

A SyncCycle carries the ProcessedSet of one synchronous change-source cycle:
the lead ids the sync engine has already written back. The set starts empty
when the cycle opens and is dropped when it closes. It is never persisted and
never shared with another request, worker invocation or thread.

The cycle is passed explicitly to the change filter. Signal receivers, which
cannot take extra arguments, look it up with ``current_cycle()``.
"""

import contextvars
from contextlib import contextmanager
from typing import Any, Iterable, Optional, Set


class SyncCycle:
    """Request-scoped state for one change-source cycle."""

    def __init__(self):
        self.processed: Set[Any] = set()

    def mark_processed(self, record_ids: Iterable[Any]):
        self.processed.update(record_ids)

    def is_processed(self, record_id) -> bool:
        return record_id in self.processed

    def __repr__(self):
        return f"<SyncCycle processed={len(self.processed)}>"


_current_cycle: contextvars.ContextVar[Optional[SyncCycle]] = contextvars.ContextVar(
    'lead_sync_cycle', default=None
)


def current_cycle() -> Optional[SyncCycle]:
    """Return the cycle open in this execution context, if any."""
    return _current_cycle.get()


@contextmanager
def sync_cycle():
    """
    Open a cycle for the enclosed block, or join the one already open.

    Nested use shares the outer ProcessedSet; only the outermost block
    discards it.
    """
    existing = _current_cycle.get()
    if existing is not None:
        yield existing
        return

    cycle = SyncCycle()
    token = _current_cycle.set(cycle)
    try:
        yield cycle
    finally:
        _current_cycle.reset(token)
