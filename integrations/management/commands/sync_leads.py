"""
Management command to queue leads for outbound sync.
Used for backfills and for replaying leads whose sync failed.
"""

from django.core.management.base import BaseCommand, CommandError

from integrations.exceptions import SchedulingUnavailable
from integrations.services import schedule_lead_sync
from leads.models import Lead


class Command(BaseCommand):
    help = 'Queue leads for synchronization with the external CRM'

    def add_arguments(self, parser):
        parser.add_argument(
            '--ids',
            type=int,
            nargs='+',
            help='Lead ids to sync'
        )
        parser.add_argument(
            '--unsynced',
            action='store_true',
            help='Sync every lead without an external reference'
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be queued without scheduling anything'
        )

    def handle(self, *args, **options):
        lead_ids = options.get('ids')
        unsynced = options.get('unsynced', False)
        dry_run = options.get('dry_run', False)

        if bool(lead_ids) == unsynced:
            raise CommandError('Specify exactly one of --ids or --unsynced')

        if unsynced:
            lead_ids = list(
                Lead.objects.filter(external_reference='')
                .order_by('pk')
                .values_list('pk', flat=True)
            )
        else:
            existing = set(Lead.objects.filter(pk__in=lead_ids).values_list('pk', flat=True))
            unknown = [i for i in lead_ids if i not in existing]
            if unknown:
                self.stdout.write(self.style.WARNING(f"Unknown lead ids ignored: {unknown}"))
            lead_ids = [i for i in lead_ids if i in existing]

        if not lead_ids:
            self.stdout.write("No leads to sync")
            return

        if dry_run:
            self.stdout.write(self.style.WARNING("=== DRY RUN MODE ==="))
            self.stdout.write(f"Would queue {len(lead_ids)} leads")
            return

        try:
            schedule = schedule_lead_sync(lead_ids)
        except SchedulingUnavailable as e:
            raise CommandError(f"Task scheduler unavailable: {e}")

        self.stdout.write(self.style.SUCCESS(
            f"Queued {schedule.queued} leads (run {schedule.run_id}, task {schedule.task_id})"
        ))
