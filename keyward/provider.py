"""Provider assembly.

A Provider is built from explicit lists of resource and data source
factories. Nothing registers itself at import time: whatever the provider
serves is whatever new_provider() was given.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional, Sequence, TypeVar

import structlog

from keyward.core.encryption_key_client import EncryptionKeyClient
from keyward.core.factory import KeywardFactory, create_factory
from keyward.data_sources.provider import ProviderDataSource
from keyward.diagnostics import diagnostics_from_error
from keyward.exceptions import ConfigurationError, KeywardError
from keyward.models import Diagnostic
from keyward.resources.encryption_key_manager import EncryptionKeyManagerResource
from keyward.version import VERSION

log = structlog.get_logger()

T = TypeVar("T")

# Factories receive the configured client and return a resource/data source
ResourceFactory = Callable[[EncryptionKeyClient], Any]
DataSourceFactory = Callable[[EncryptionKeyClient], Any]

DEFAULT_RESOURCES: tuple[ResourceFactory, ...] = (EncryptionKeyManagerResource,)
DEFAULT_DATA_SOURCES: tuple[DataSourceFactory, ...] = (ProviderDataSource,)


class Provider:
    """Auth0 provider serving a fixed set of resources and data sources.

    Args:
        resources: Resource factories
        data_sources: Data source factories
        provider_type: Backend passed to create_factory() ("auth0" or "mock")

    Call configure() before looking up resources.
    """

    type_name = "auth0"
    version = VERSION

    def __init__(
        self,
        resources: Sequence[ResourceFactory],
        data_sources: Sequence[DataSourceFactory],
        provider_type: str = "auth0",
    ):
        self._resource_factories = list(resources)
        self._data_source_factories = list(data_sources)
        self.provider_type = provider_type
        self._client: Optional[EncryptionKeyClient] = None
        self._resources: dict[str, Any] = {}
        self._data_sources: dict[str, Any] = {}

    @property
    def configured(self) -> bool:
        return self._client is not None

    def configure(
        self,
        factory: Optional[KeywardFactory] = None,
        **settings,
    ) -> list[Diagnostic]:
        """Build the API client and instantiate every resource and data source.

        Args:
            factory: Prebuilt factory. When omitted one is made with
                create_factory(self.provider_type, **settings).
            **settings: Backend settings (see create_factory())

        Returns:
            Diagnostics for invalid configuration, empty on success
        """
        try:
            factory = factory or create_factory(self.provider_type, **settings)
            client = factory.create_client()
        except ConfigurationError as e:
            log.error("provider_configure_failed", error=e.message, field=e.field)
            return diagnostics_from_error(e)

        self._resources = self._build(self._resource_factories, client, "resource")
        self._data_sources = self._build(self._data_source_factories, client, "data source")
        self._client = client
        log.info(
            "provider_configured",
            provider_type=self.provider_type,
            resources=sorted(self._resources),
            data_sources=sorted(self._data_sources),
        )
        return []

    @staticmethod
    def _build(factories: Sequence[Callable], client: EncryptionKeyClient, kind: str) -> dict[str, Any]:
        built: dict[str, Any] = {}
        for make in factories:
            instance = make(client)
            name = instance.type_name
            if name in built:
                raise ValueError(f"Duplicate {kind} type name: '{name}'")
            built[name] = instance
        return built

    @property
    def resource_types(self) -> list[str]:
        return sorted(self._resources)

    @property
    def data_source_types(self) -> list[str]:
        return sorted(self._data_sources)

    def resource(self, type_name: str) -> Any:
        """Return the configured resource with the given type name."""
        self._require_configured()
        try:
            return self._resources[type_name]
        except KeyError:
            raise ConfigurationError(f"Unknown resource type: '{type_name}'", field=type_name)

    def data_source(self, type_name: str) -> Any:
        """Return the configured data source with the given type name."""
        self._require_configured()
        try:
            return self._data_sources[type_name]
        except KeyError:
            raise ConfigurationError(f"Unknown data source type: '{type_name}'", field=type_name)

    def _require_configured(self) -> None:
        if self._client is None:
            raise ConfigurationError("Provider has not been configured")

    @staticmethod
    async def run(operation: Awaitable[T]) -> tuple[Optional[T], list[Diagnostic]]:
        """Await a resource operation, reporting Keyward errors as diagnostics.

        Errors outside the Keyward hierarchy propagate unchanged.
        """
        try:
            return await operation, []
        except KeywardError as e:
            log.error("provider_operation_failed", code=e.code, error=e.message)
            return None, diagnostics_from_error(e)


def new_provider(
    resources: Optional[Sequence[ResourceFactory]] = None,
    data_sources: Optional[Sequence[DataSourceFactory]] = None,
    provider_type: str = "auth0",
) -> Provider:
    """Create a provider.

    Args:
        resources: Resource factories (defaults to the encryption key manager)
        data_sources: Data source factories (defaults to auth0_provider)
        provider_type: "auth0" for a real tenant, "mock" for in-memory keys

    Examples:
        >>> provider = new_provider(provider_type="mock")
        >>> provider.configure()
        >>> manager = provider.resource("auth0_encryption_key_manager")
    """
    return Provider(
        resources=DEFAULT_RESOURCES if resources is None else resources,
        data_sources=DEFAULT_DATA_SOURCES if data_sources is None else data_sources,
        provider_type=provider_type,
    )
