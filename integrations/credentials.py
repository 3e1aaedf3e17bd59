"""
Credential provider for outbound integration requests.

The secret is looked up and attached inside the requests auth hook, at the
moment a request is prepared. Callers hold only the credential name.
"""

import logging

from requests.auth import AuthBase

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class NamedCredentialAuth(AuthBase):
    """Attach the named IntegrationCredential to each outgoing request."""

    def __init__(self, credential_name: str):
        self.credential_name = credential_name

    def __call__(self, request):
        header, value = self._resolve_header()
        request.headers[header] = value
        return request

    def __eq__(self, other):
        return getattr(other, 'credential_name', None) == self.credential_name

    def __ne__(self, other):
        return not self == other

    def __repr__(self):
        return f"<NamedCredentialAuth {self.credential_name}>"

    def _resolve_header(self):
        from .models import IntegrationCredential

        try:
            credential = IntegrationCredential.objects.get(name=self.credential_name)
        except IntegrationCredential.DoesNotExist:
            raise ConfigurationError(f"Credential '{self.credential_name}' is not configured")

        if not credential.is_usable:
            logger.warning(f"Credential '{self.credential_name}' is inactive, empty or expired")
            raise ConfigurationError(f"Credential '{self.credential_name}' is not usable")

        return credential.build_header()
