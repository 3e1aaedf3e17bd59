# Integration Providers Package
# Contains provider implementations for outbound integrations

from .base import BaseIntegrationProvider
from .lead_sync import LeadSyncProvider

__all__ = [
    'BaseIntegrationProvider',
    'LeadSyncProvider',
]
