"""Factory for Auth0 Management API components."""

from typing import Optional

from keyward.config import ProviderConfig
from keyward.core.encryption_key_client import EncryptionKeyClient
from keyward.core.factory import KeywardFactory


class Auth0Factory(KeywardFactory):
    """Factory for Auth0 Management API clients.

    Args:
        config: Resolved ProviderConfig. When omitted, the remaining keyword
            settings are merged over the AUTH0_* environment variables with
            ProviderConfig.resolve().
        timeout: HTTP request timeout in seconds.
        **settings: domain, audience, client_id, client_secret, api_token, debug.

    Examples:
        >>> factory = Auth0Factory(domain="example.eu.auth0.com", api_token=token)
        >>> client = factory.create_client()
        >>> key = await client.read_key(kid)

    Note:
        Credentials are validated when the factory is built, not when the
        first request is made.
    """

    def __init__(
        self,
        config: Optional[ProviderConfig] = None,
        timeout: float = 10.0,
        **settings,
    ):
        self.config = config or ProviderConfig.resolve(**settings)
        self.timeout = timeout
        self._client: Optional[EncryptionKeyClient] = None

    def create_client(self) -> EncryptionKeyClient:
        """Create or return the cached Auth0 encryption key client."""
        if self._client is None:
            from keyward.clients.auth0 import Auth0EncryptionKeyClient

            self._client = Auth0EncryptionKeyClient(config=self.config, timeout=self.timeout)
        return self._client
