"""
Tests for the lead change filter and change events.

This module tests:
- Create events always produce a candidate
- Update events produce a candidate only when a tracked field changed
- ProcessedSet exclusion
- Deduplication in first-seen order
- Malformed events
"""

import pytest

from integrations.change_filter import filter_sync_candidates
from integrations.types import SyncCandidate
from leads.events import ChangeEvent, Operation


TRACKED = ('first_name', 'last_name', 'company', 'email', 'status')


def snapshot(**overrides):
    values = {
        'first_name': 'Ada',
        'last_name': 'Lovelace',
        'company': 'Analytical Engines',
        'email': 'ada@example.com',
        'status': 'new',
        'external_reference': '',
        'last_synced_at': None,
    }
    values.update(overrides)
    return values


# =============================================================================
# CHANGE EVENT TESTS
# =============================================================================

class TestChangeEvent:
    """Tests for ChangeEvent construction."""

    def test_created_event_has_no_old_snapshot(self):
        event = ChangeEvent.created(1, snapshot())

        assert event.operation == Operation.CREATE
        assert event.is_create
        assert event.old is None

    def test_updated_event_lists_changed_fields(self):
        event = ChangeEvent.updated(1, snapshot(), snapshot(company='Babbage & Co'))

        assert event.changed_fields(TRACKED) == ['company']

    def test_missing_record_id_rejected(self):
        with pytest.raises(ValueError):
            ChangeEvent.created(None, snapshot())

    def test_unknown_operation_rejected(self):
        with pytest.raises(ValueError):
            ChangeEvent(record_id=1, operation='delete', new={})


# =============================================================================
# FILTER TESTS
# =============================================================================

class TestFilterSyncCandidates:
    """Tests for filter_sync_candidates."""

    def test_create_is_always_a_candidate(self):
        events = [ChangeEvent.created(7, snapshot())]

        result = filter_sync_candidates(events, set(), TRACKED)

        assert result == [SyncCandidate(record_id=7)]

    def test_update_with_tracked_change_is_a_candidate(self):
        events = [ChangeEvent.updated(7, snapshot(), snapshot(status='qualified'))]

        assert filter_sync_candidates(events, set(), TRACKED) == [SyncCandidate(7)]

    def test_update_with_only_untracked_changes_is_dropped(self):
        events = [
            ChangeEvent.updated(
                7,
                snapshot(),
                snapshot(external_reference='EXT-7', last_synced_at='2026-01-01'),
            )
        ]

        assert filter_sync_candidates(events, set(), TRACKED) == []

    def test_update_without_changes_is_dropped(self):
        events = [ChangeEvent.updated(7, snapshot(), snapshot())]

        assert filter_sync_candidates(events, set(), TRACKED) == []

    def test_processed_ids_are_excluded(self):
        events = [
            ChangeEvent.created(1, snapshot()),
            ChangeEvent.updated(2, snapshot(), snapshot(email='new@example.com')),
        ]

        result = filter_sync_candidates(events, {1, 2}, TRACKED)

        assert result == []

    def test_processed_set_is_not_modified(self):
        processed = frozenset({3})
        events = [ChangeEvent.created(1, snapshot()), ChangeEvent.created(3, snapshot())]

        result = filter_sync_candidates(events, processed, TRACKED)

        assert result == [SyncCandidate(1)]
        assert processed == frozenset({3})

    def test_duplicates_are_collapsed_in_first_seen_order(self):
        events = [
            ChangeEvent.created(5, snapshot()),
            ChangeEvent.created(3, snapshot()),
            ChangeEvent.updated(5, snapshot(), snapshot(status='contacted')),
            ChangeEvent.created(4, snapshot()),
        ]

        result = filter_sync_candidates(events, set(), TRACKED)

        assert [c.record_id for c in result] == [5, 3, 4]

    def test_later_tracked_change_counts_after_untracked_duplicate(self):
        events = [
            ChangeEvent.updated(9, snapshot(), snapshot(last_synced_at='2026-01-01')),
            ChangeEvent.updated(9, snapshot(), snapshot(first_name='Augusta')),
        ]

        assert filter_sync_candidates(events, set(), TRACKED) == [SyncCandidate(9)]

    def test_empty_batch(self):
        assert filter_sync_candidates([], set(), TRACKED) == []

    def test_non_event_is_rejected(self):
        with pytest.raises(TypeError):
            filter_sync_candidates([{'record_id': 1}], set(), TRACKED)

    def test_tracked_fields_default_to_settings(self, settings):
        settings.LEAD_SYNC = {'TRACKED_FIELDS': ('phone',)}
        events = [
            ChangeEvent.updated(1, snapshot(phone='1'), snapshot(phone='2')),
            ChangeEvent.updated(2, snapshot(), snapshot(status='converted')),
        ]

        assert filter_sync_candidates(events, set()) == [SyncCandidate(1)]
