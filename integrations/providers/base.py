"""
Base Integration Provider

Abstract base class for outbound integration providers.
Implements the shared HTTP session, credential attachment and request
error translation.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple

import requests
from django.conf import settings

from ..credentials import NamedCredentialAuth
from ..exceptions import TransportError

logger = logging.getLogger(__name__)


class BaseIntegrationProvider(ABC):
    """
    Abstract base class for all integration providers.

    Subclasses must implement:
    - provider_name: Unique provider identifier
    - display_name: Human-readable provider name
    - test_connection(): Verify credentials and endpoint are reachable
    """

    # Provider identification - override in subclasses
    provider_name: str = ''
    display_name: str = ''

    # Default timeout for API requests
    request_timeout: int = 30

    def __init__(self, credential_name: str = None, timeout: int = None):
        """
        Initialize provider.

        Args:
            credential_name: Name of the IntegrationCredential to attach
            timeout: Request timeout in seconds
        """
        self.credential_name = credential_name
        if timeout is not None:
            self.request_timeout = timeout
        self._session = None

    @property
    def session(self) -> requests.Session:
        """Get or create requests session with default configuration."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({
                'User-Agent': f'LeadSync/{getattr(settings, "VERSION", "1.0")}',
                'Accept': 'application/json',
            })
            if self.credential_name:
                self._session.auth = NamedCredentialAuth(self.credential_name)
        return self._session

    def make_request(
        self,
        method: str,
        url: str,
        data: Dict = None,
        params: Dict = None,
        headers: Dict = None,
    ) -> requests.Response:
        """
        Make an authenticated API request.

        Any HTTP status is returned to the caller as-is; there is no retry
        on 401 or 429.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Absolute request URL
            data: JSON request body
            params: URL query parameters
            headers: Additional headers

        Returns:
            Response object

        Raises:
            TransportError: the request did not complete (timeout, connection, TLS)
        """
        try:
            return self.session.request(
                method=method,
                url=url,
                json=data,
                params=params,
                headers=headers,
                timeout=self.request_timeout
            )
        except requests.RequestException as e:
            logger.warning(f"{self.provider_name} request to {url} failed: {type(e).__name__}")
            raise TransportError(f"{type(e).__name__}: {e}") from e

    @abstractmethod
    def test_connection(self) -> Tuple[bool, str]:
        """
        Test if the integration is properly configured and reachable.

        Returns:
            Tuple of (success: bool, message: str)
        """
        pass

    def describe(self) -> Dict[str, Any]:
        return {
            'provider': self.provider_name,
            'display_name': self.display_name,
            'credential': self.credential_name,
            'timeout': self.request_timeout,
        }
