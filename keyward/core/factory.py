"""Abstract factory for creating encryption key clients."""

from abc import ABC, abstractmethod

from keyward.core.encryption_key_client import EncryptionKeyClient


class KeywardFactory(ABC):
    """Abstract factory for creating Management API clients.

    Implementations build a backend-specific EncryptionKeyClient. The
    provider asks its factory for a client once, during configure(), and
    hands the same client to every resource.

    Usage:
        Do not instantiate this class directly. Use create_factory() instead:

        >>> from keyward import create_factory
        >>> factory = create_factory("auth0", domain="example.eu.auth0.com", api_token="...")

    See Also:
        - create_factory(): Main entry point for creating factories
        - Auth0Factory: Auth0 Management API implementation
        - MockFactory: In-memory implementation for testing
    """

    @abstractmethod
    def create_client(self) -> EncryptionKeyClient:
        """Create or return the cached encryption key client.

        Returns:
            EncryptionKeyClient: A backend-specific client.

        Examples:
            >>> factory = create_factory("mock")
            >>> client = factory.create_client()
            >>> keys = await client.list_keys()
        """
        pass


def create_factory(provider_type: str, **kwargs) -> KeywardFactory:
    """Create a factory for the specified backend.

    Args:
        provider_type: The backend to use.
            Valid values: "auth0", "mock"

        **kwargs: Backend-specific configuration arguments.

            For provider_type="auth0":
                config (ProviderConfig, optional): Already resolved configuration.
                domain, audience, client_id, client_secret, api_token, debug
                    (optional): Settings merged over the AUTH0_* environment
                    variables when config is not given.
                timeout (float, optional): HTTP timeout in seconds.

            For provider_type="mock":
                visibility_reads, activation_reads, destruction_reads (int, optional):
                    Simulated server-side delays, counted in reads.

    Returns:
        KeywardFactory: A configured factory instance.

    Raises:
        ValueError: If provider_type is unknown.
        ConfigurationError: If the Auth0 settings are invalid.

    Examples:
        >>> factory = create_factory("auth0")  # everything from AUTH0_* variables
        >>> factory = create_factory("mock", activation_reads=3)
    """
    if provider_type == "auth0":
        from keyward.factories.auth0 import Auth0Factory

        return Auth0Factory(**kwargs)
    elif provider_type == "mock":
        from keyward.factories.mock import MockFactory

        return MockFactory(**kwargs)
    else:
        raise ValueError(
            f"Unknown provider type: '{provider_type}'. "
            f"Valid types: 'auth0', 'mock'. "
            f"Example: create_factory('auth0', domain='example.eu.auth0.com')"
        )
