"""
Integrations API Views and ViewSets

Admin-only REST API for the outbound lead sync:
- read-only chunk sync logs and integration error logs
- manual resync of selected or unsynced leads
"""

import logging

from django.utils.translation import gettext_lazy as _

from rest_framework import viewsets, status, permissions
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from .exceptions import SchedulingUnavailable
from .models import (
    IntegrationErrorLog,
    IntegrationSyncLog,
)
from .serializers import (
    IntegrationErrorLogSerializer,
    IntegrationSyncLogSerializer,
    LeadResyncSerializer,
    SyncScheduleSerializer,
)
from .services import schedule_lead_sync

logger = logging.getLogger(__name__)


class IntegrationPagination(PageNumberPagination):
    """Pagination for integration-related endpoints."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


# =============================================================================
# SYNC LOG VIEWSET
# =============================================================================

class IntegrationSyncLogViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only ViewSet for chunk sync logs.

    Endpoints:
    - GET /sync-logs/ - List chunk sync logs
    - GET /sync-logs/{uuid}/ - Get one chunk sync log
    - GET /sync-logs/?run_id=... - Every chunk of one run
    """

    serializer_class = IntegrationSyncLogSerializer
    permission_classes = [permissions.IsAdminUser]
    pagination_class = IntegrationPagination
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_fields = ['run_id', 'status', 'integration_name']
    ordering_fields = ['started_at', 'completed_at', 'chunk_number']
    ordering = ['-started_at']
    lookup_field = 'uuid'

    def get_queryset(self):
        return IntegrationSyncLog.objects.all()


# =============================================================================
# ERROR LOG VIEWSET
# =============================================================================

class IntegrationErrorLogViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only ViewSet for integration error logs.

    Endpoints:
    - GET /error-logs/ - List error logs
    - GET /error-logs/{uuid}/ - Get one error log
    - GET /error-logs/?record_id=...&error_kind=... - Filtered list
    """

    serializer_class = IntegrationErrorLogSerializer
    permission_classes = [permissions.IsAdminUser]
    pagination_class = IntegrationPagination
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_fields = ['integration_name', 'error_kind', 'record_id', 'status_code']
    ordering_fields = ['logged_at', 'status_code']
    ordering = ['-logged_at']
    lookup_field = 'uuid'

    def get_queryset(self):
        return IntegrationErrorLog.objects.all()


# =============================================================================
# LEAD SYNC VIEWSET
# =============================================================================

class LeadSyncViewSet(viewsets.ViewSet):
    """
    Manual control of the outbound lead sync.

    Endpoints:
    - POST /lead-sync/resync/ - Queue leads for sync
    """

    permission_classes = [permissions.IsAdminUser]

    @action(detail=False, methods=['post'])
    def resync(self, request):
        """
        Queue leads for sync.

        Accepts either ``lead_ids`` or ``unsynced: true``. Responds 202 with
        the run identifier once the scheduler accepted the work queue, and
        503 when the scheduler is unavailable.
        """
        serializer = LeadResyncSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        lead_ids = serializer.get_lead_ids()
        if not lead_ids:
            return Response(
                {'detail': _("No leads to sync"), 'queued': 0},
                status=status.HTTP_200_OK
            )

        try:
            schedule = schedule_lead_sync(lead_ids)
        except SchedulingUnavailable as e:
            logger.warning(f"Manual lead resync by {request.user} rejected: {e}")
            return Response(
                {'detail': _("Task scheduler unavailable, try again later")},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )

        logger.info(f"Manual lead resync by {request.user}: run {schedule.run_id}, {schedule.queued} leads")
        return Response(
            SyncScheduleSerializer(schedule).data,
            status=status.HTTP_202_ACCEPTED
        )
