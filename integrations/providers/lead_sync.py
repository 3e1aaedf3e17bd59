"""
Lead Sync Provider

Stateless request/response adapter to the external CRM:
- maps a Lead onto the CRM payload
- POSTs it as JSON with the named credential attached
- turns the response into a SyncResult

The provider performs no retries. Re-running a failed record is left to the
caller and the task scheduler.
"""

import logging
from typing import Any, Dict, Tuple

from ..conf import get_setting
from ..exceptions import ConfigurationError, TransportError
from ..types import ErrorKind, SyncResult
from .base import BaseIntegrationProvider

logger = logging.getLogger(__name__)


class LeadSyncProvider(BaseIntegrationProvider):
    """Pushes leads to the external CRM's lead endpoint."""

    provider_name = 'lead_sync'
    display_name = 'CRM Lead Sync'

    def __init__(self, endpoint_url: str = None, credential_name: str = None,
                 field_map: Dict[str, str] = None, reference_field: str = None,
                 timeout: int = None):
        super().__init__(
            credential_name=credential_name or get_setting('CREDENTIAL_NAME'),
            timeout=timeout if timeout is not None else get_setting('REQUEST_TIMEOUT'),
        )
        self.endpoint_url = endpoint_url or get_setting('ENDPOINT_URL')
        self.field_map = field_map or get_setting('FIELD_MAP')
        self.reference_field = reference_field or get_setting('REFERENCE_FIELD')

        if not self.endpoint_url:
            raise ConfigurationError("LEAD_SYNC['ENDPOINT_URL'] is not configured")

    def build_payload(self, lead) -> Dict[str, Any]:
        """Map local lead fields to the external payload shape."""
        payload = {}
        for local_field, remote_field in self.field_map.items():
            value = getattr(lead, local_field)
            payload[remote_field] = value if value is not None else ''
        return payload

    def send(self, lead) -> SyncResult:
        """
        Push one lead to the CRM.

        Returns:
            SyncResult with the external reference on 2xx, otherwise a
            failure classified as ApiError (with status and raw body) or
            TransportError (no status)
        """
        payload = self.build_payload(lead)

        try:
            response = self.make_request('POST', self.endpoint_url, data=payload)
        except TransportError as e:
            return SyncResult.failed(
                lead.pk,
                ErrorKind.TRANSPORT_ERROR,
                message=f"Request failed: {e}",
            )

        raw_body = response.text or ''

        if not 200 <= response.status_code < 300:
            return SyncResult.failed(
                lead.pk,
                ErrorKind.API_ERROR,
                message=f"HTTP {response.status_code}",
                status_code=response.status_code,
                raw_response=raw_body,
            )

        reference = self._parse_reference(response)
        if reference in (None, ''):
            return SyncResult.failed(
                lead.pk,
                ErrorKind.API_ERROR,
                message=f"Response carries no '{self.reference_field}' field",
                status_code=response.status_code,
                raw_response=raw_body,
            )

        return SyncResult.succeeded(lead.pk, reference, status_code=response.status_code)

    def _parse_reference(self, response):
        try:
            body = response.json()
        except ValueError:
            return None
        if not isinstance(body, dict):
            return None
        return body.get(self.reference_field)

    def test_connection(self) -> Tuple[bool, str]:
        try:
            response = self.make_request('OPTIONS', self.endpoint_url)
        except (TransportError, ConfigurationError) as e:
            return False, str(e)

        if response.status_code in (401, 403):
            return False, f"Authentication rejected: HTTP {response.status_code}"
        if response.status_code >= 500:
            return False, f"Server error: HTTP {response.status_code}"
        return True, f"Reachable: HTTP {response.status_code}"
