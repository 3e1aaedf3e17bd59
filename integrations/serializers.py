"""
Integrations API Serializers

Serializers for the lead sync REST API: chunk sync logs, integration error
logs and the manual resync request.
"""

from rest_framework import serializers
from django.utils.translation import gettext_lazy as _

from .models import (
    IntegrationErrorLog,
    IntegrationSyncLog,
)


# =============================================================================
# SYNC LOG SERIALIZERS
# =============================================================================

class IntegrationSyncLogSerializer(serializers.ModelSerializer):
    """Serializer for chunk sync log entries."""
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    duration_seconds = serializers.FloatField(read_only=True)

    class Meta:
        model = IntegrationSyncLog
        fields = [
            'uuid',
            'run_id',
            'chunk_number',
            'integration_name',
            'status',
            'status_display',
            'records_in_chunk',
            'records_succeeded',
            'records_failed',
            'records_remaining',
            'error_message',
            'task_id',
            'next_task_id',
            'started_at',
            'completed_at',
            'duration_seconds',
        ]
        read_only_fields = fields


# =============================================================================
# ERROR LOG SERIALIZERS
# =============================================================================

class IntegrationErrorLogSerializer(serializers.ModelSerializer):
    """Serializer for integration error log entries."""
    error_kind_display = serializers.CharField(source='get_error_kind_display', read_only=True)

    class Meta:
        model = IntegrationErrorLog
        fields = [
            'uuid',
            'integration_name',
            'record_id',
            'error_kind',
            'error_kind_display',
            'message',
            'status_code',
            'raw_response',
            'logged_at',
        ]
        read_only_fields = fields


# =============================================================================
# RESYNC SERIALIZERS
# =============================================================================

class LeadResyncSerializer(serializers.Serializer):
    """Serializer for a manual lead resync request."""
    lead_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        required=False,
        allow_empty=False,
        help_text=_("Lead ids to push to the remote system")
    )
    unsynced = serializers.BooleanField(
        default=False,
        help_text=_("Push every lead that has no external reference yet")
    )

    def validate(self, attrs):
        if not attrs.get('lead_ids') and not attrs.get('unsynced'):
            raise serializers.ValidationError(
                _("Provide lead_ids or set unsynced to true")
            )
        if attrs.get('lead_ids') and attrs.get('unsynced'):
            raise serializers.ValidationError(
                _("lead_ids and unsynced are mutually exclusive")
            )
        return attrs

    def get_lead_ids(self):
        """Resolve the validated request to a list of lead ids."""
        from leads.models import Lead

        if self.validated_data.get('unsynced'):
            return list(
                Lead.objects.filter(external_reference='')
                .order_by('pk')
                .values_list('pk', flat=True)
            )
        return list(dict.fromkeys(self.validated_data['lead_ids']))


class SyncScheduleSerializer(serializers.Serializer):
    """Serializer for the acknowledgement of an accepted resync."""
    run_id = serializers.CharField()
    task_id = serializers.CharField(allow_null=True)
    chunk_number = serializers.IntegerField()
    queued = serializers.IntegerField()
