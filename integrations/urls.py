"""
URL configuration for integrations app.

REST API endpoints for lead sync logs, error logs and manual resync.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    IntegrationErrorLogViewSet,
    IntegrationSyncLogViewSet,
    LeadSyncViewSet,
)

app_name = 'integrations'

# REST API Router
router = DefaultRouter()
router.register(r'sync-logs', IntegrationSyncLogViewSet, basename='sync-log')
router.register(r'error-logs', IntegrationErrorLogViewSet, basename='error-log')
router.register(r'lead-sync', LeadSyncViewSet, basename='lead-sync')

urlpatterns = [
    path('', include(router.urls)),
]
