"""Keyward - Auth0 encryption key management with bounded reconciliation.

Keyward manages the encryption keys of an Auth0 tenant declaratively and
waits out the asynchronous server-side transitions each change triggers.

Features:
- Tenant master key rotation
- Customer provided root key provisioning (create, wrap, import, remove)
- Bounded polling until a key reaches its expected state
- Provider configuration from arguments or AUTH0_* environment variables
- In-memory backend for tests and local development
"""

from keyward.config import ProviderConfig
from keyward.core.encryption_key_client import EncryptionKeyClient
from keyward.core.factory import KeywardFactory, create_factory
from keyward.clients import Auth0EncryptionKeyClient, MockEncryptionKeyClient
from keyward.data_sources import ProviderDataSource
from keyward.diagnostics import diagnostics_from_error
from keyward.factories import Auth0Factory, MockFactory
from keyward.provider import Provider, new_provider
from keyward.resources import DEFAULT_RETRY_BUDGET, EncryptionKeyManagerResource
from keyward.wait import wait_until, wait_until_budget
from keyward.exceptions import (
    ConfigurationError,
    KeyNotFoundError,
    KeywardError,
    ManagementAPIError,
    RateLimitError,
    WaitTimeoutError,
    WrappedKeyNotReadyError,
    is_status_not_found,
)
from keyward.models import (
    CustomerProvidedRootKey,
    CustomerProvidedRootKeyConfig,
    Diagnostic,
    DiagnosticSeverity,
    EncryptionKey,
    EncryptionKeyList,
    EncryptionKeyManagerConfig,
    EncryptionKeyManagerState,
    EncryptionKeyState,
    EncryptionKeyType,
    RetryBudget,
    WrappingKey,
)
from keyward.version import VERSION

__version__ = VERSION

__all__ = [
    # Core interfaces
    "EncryptionKeyClient",
    # Factory
    "create_factory",
    "KeywardFactory",
    "Auth0Factory",
    "MockFactory",
    # Provider
    "Provider",
    "ProviderConfig",
    "new_provider",
    "EncryptionKeyManagerResource",
    "ProviderDataSource",
    "DEFAULT_RETRY_BUDGET",
    # Reconciliation
    "wait_until",
    "wait_until_budget",
    "diagnostics_from_error",
    # Clients
    "Auth0EncryptionKeyClient",
    "MockEncryptionKeyClient",
    # Models
    "CustomerProvidedRootKey",
    "CustomerProvidedRootKeyConfig",
    "Diagnostic",
    "DiagnosticSeverity",
    "EncryptionKey",
    "EncryptionKeyList",
    "EncryptionKeyManagerConfig",
    "EncryptionKeyManagerState",
    "EncryptionKeyState",
    "EncryptionKeyType",
    "RetryBudget",
    "WrappingKey",
    # Exceptions
    "KeywardError",
    "ManagementAPIError",
    "KeyNotFoundError",
    "RateLimitError",
    "WaitTimeoutError",
    "WrappedKeyNotReadyError",
    "ConfigurationError",
    "is_status_not_found",
]
