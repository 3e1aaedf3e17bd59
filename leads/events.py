"""
Lead Change Events

A ChangeEvent is one captured create or update of a Lead: its identifier, the
operation kind and the field snapshot before and after the write. Events are
built by the change source in ``leads.signals`` and consumed once by the
integration change filter.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from django.db import models


class Operation(models.TextChoices):
    CREATE = 'create', 'Create'
    UPDATE = 'update', 'Update'


@dataclass(frozen=True)
class ChangeEvent:
    record_id: Any
    operation: str
    new: Dict[str, Any]
    old: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        # A missing identifier is a programming error in the change source
        if self.record_id is None:
            raise ValueError(f"ChangeEvent ({self.operation}) has no record identifier")
        if self.operation not in Operation.values:
            raise ValueError(f"Unknown change operation: {self.operation!r}")

    @classmethod
    def created(cls, record_id, new: Dict[str, Any]) -> 'ChangeEvent':
        return cls(record_id=record_id, operation=Operation.CREATE, new=dict(new))

    @classmethod
    def updated(cls, record_id, old: Optional[Dict[str, Any]], new: Dict[str, Any]) -> 'ChangeEvent':
        return cls(
            record_id=record_id,
            operation=Operation.UPDATE,
            old=dict(old or {}),
            new=dict(new),
        )

    @property
    def is_create(self) -> bool:
        return self.operation == Operation.CREATE

    def changed_fields(self, fields: Iterable[str]) -> List[str]:
        """Return the subset of ``fields`` whose value differs between snapshots."""
        if self.is_create:
            return list(fields)
        old = self.old or {}
        return [f for f in fields if old.get(f) != self.new.get(f)]
