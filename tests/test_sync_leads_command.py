"""
Tests for the sync_leads management command.
"""

from io import StringIO
from unittest.mock import MagicMock, patch

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from kombu.exceptions import OperationalError


APPLY_ASYNC = 'integrations.tasks.process_lead_sync_chunk.apply_async'


@pytest.fixture
def apply_async():
    with patch(APPLY_ASYNC) as mock_apply:
        mock_apply.return_value = MagicMock(id='task-1')
        yield mock_apply


@pytest.mark.django_db
class TestSyncLeadsCommand:
    """Tests for sync_leads."""

    def test_sync_ids(self, apply_async, lead_factory):
        leads = [lead_factory() for _ in range(2)]
        out = StringIO()

        call_command('sync_leads', '--ids', *[str(lead.pk) for lead in leads], stdout=out)

        assert apply_async.call_args.kwargs['kwargs']['lead_ids'] == [lead.pk for lead in leads]
        assert 'Queued 2 leads' in out.getvalue()

    def test_unknown_ids_ignored(self, apply_async, lead):
        out = StringIO()

        call_command('sync_leads', '--ids', str(lead.pk), '999999', stdout=out)

        assert apply_async.call_args.kwargs['kwargs']['lead_ids'] == [lead.pk]
        assert '999999' in out.getvalue()

    def test_sync_unsynced(self, apply_async, lead_factory):
        pending = lead_factory()
        lead_factory(external_reference='EXT-1')

        call_command('sync_leads', '--unsynced', stdout=StringIO())

        assert apply_async.call_args.kwargs['kwargs']['lead_ids'] == [pending.pk]

    def test_dry_run(self, apply_async, lead):
        out = StringIO()

        call_command('sync_leads', '--unsynced', '--dry-run', stdout=out)

        apply_async.assert_not_called()
        assert 'Would queue 1 leads' in out.getvalue()

    def test_requires_one_selection(self, apply_async):
        with pytest.raises(CommandError):
            call_command('sync_leads', stdout=StringIO())

    def test_scheduler_unavailable(self, apply_async, lead):
        apply_async.side_effect = OperationalError('broker down')

        with pytest.raises(CommandError):
            call_command('sync_leads', '--ids', str(lead.pk), stdout=StringIO())
