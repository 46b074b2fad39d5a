"""Encryption key models - typed records for remote keys, configuration and state."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from keyward.exceptions import ConfigurationError


class EncryptionKeyType(str, Enum):
    """Encryption key type in the Auth0 key hierarchy."""

    CUSTOMER_PROVIDED_ROOT_KEY = "customer-provided-root-key"
    ENVIRONMENT_ROOT_KEY = "environment-root-key"
    TENANT_MASTER_KEY = "tenant-master-key"


class EncryptionKeyState(str, Enum):
    """Lifecycle state of an encryption key."""

    PRE_ACTIVATION = "pre-activation"
    ACTIVE = "active"
    DEACTIVATED = "deactivated"
    DESTROYED = "destroyed"


# Algorithm used to wrap a customer provided root key
WRAPPING_ALGORITHM = "CKM_RSA_AES_KEY_WRAP"


@dataclass(frozen=True)
class RetryBudget:
    """Bounds for a polling wait.

    max_attempts * interval_ms bounds the total time spent sleeping.
    """

    max_attempts: int = 20
    interval_ms: int = 100

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.interval_ms < 0:
            raise ValueError(f"interval_ms must be >= 0, got {self.interval_ms}")

    @property
    def max_wait_ms(self) -> int:
        return self.max_attempts * self.interval_ms


@dataclass
class EncryptionKey:
    """Encryption key as returned by the Management API."""

    key_id: str  # kid
    type: Union[EncryptionKeyType, str]
    state: Union[EncryptionKeyState, str]
    parent_key_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_type(self, key_type: EncryptionKeyType) -> bool:
        return self.type == key_type

    def is_state(self, state: EncryptionKeyState) -> bool:
        return self.state == state


@dataclass
class WrappingKey:
    """Public wrapping key used to wrap a customer provided root key."""

    public_key: str  # PEM
    algorithm: str = WRAPPING_ALGORITHM


@dataclass
class EncryptionKeyList:
    """One page of encryption keys."""

    keys: list[EncryptionKey]
    start: int = 0
    limit: int = 0
    total: int = 0

    def has_next(self) -> bool:
        """Return True if another page follows this one."""
        return self.start + self.limit < self.total


# ==================== Resource Configuration ====================


@dataclass
class CustomerProvidedRootKeyConfig:
    """User-supplied customer_provided_root_key block."""

    wrapped_key: Optional[str] = None


@dataclass
class EncryptionKeyManagerConfig:
    """Configuration of the encryption key manager resource.

    Build it with from_dict() so the raw shape is validated once, at the
    boundary.
    """

    key_rotation_id: Optional[str] = None
    customer_provided_root_key: Optional[CustomerProvidedRootKeyConfig] = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "EncryptionKeyManagerConfig":
        """Validate and convert a raw configuration mapping.

        The root key block may be given as a mapping, a list holding at most
        one mapping, or omitted entirely.

        Raises:
            ConfigurationError: If an attribute is unknown or has the wrong type
        """
        allowed = {"key_rotation_id", "customer_provided_root_key"}
        unknown = set(raw) - allowed
        if unknown:
            raise ConfigurationError(
                f"Unsupported attributes: {sorted(unknown)}", field=sorted(unknown)[0]
            )

        key_rotation_id = raw.get("key_rotation_id")
        if key_rotation_id is not None and not isinstance(key_rotation_id, str):
            raise ConfigurationError("key_rotation_id must be a string", field="key_rotation_id")

        block = raw.get("customer_provided_root_key")
        if isinstance(block, list):
            if len(block) > 1:
                raise ConfigurationError(
                    "At most one customer_provided_root_key block is allowed",
                    field="customer_provided_root_key",
                )
            block = block[0] if block else None

        root_key: Optional[CustomerProvidedRootKeyConfig] = None
        if block is not None:
            if not isinstance(block, dict):
                raise ConfigurationError(
                    "customer_provided_root_key must be a block",
                    field="customer_provided_root_key",
                )
            wrapped_key = block.get("wrapped_key")
            if wrapped_key is not None and not isinstance(wrapped_key, str):
                raise ConfigurationError(
                    "wrapped_key must be a string",
                    field="customer_provided_root_key.wrapped_key",
                )
            root_key = CustomerProvidedRootKeyConfig(wrapped_key=wrapped_key or None)

        return cls(key_rotation_id=key_rotation_id, customer_provided_root_key=root_key)


# ==================== Resource State ====================


@dataclass
class CustomerProvidedRootKey:
    """Computed customer_provided_root_key block kept in state."""

    wrapped_key: Optional[str] = None
    public_wrapping_key: Optional[str] = None
    wrapping_algorithm: Optional[str] = None
    key_id: Optional[str] = None
    type: Optional[str] = None
    state: Optional[str] = None
    parent_key_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class EncryptionKeyManagerState:
    """State of the encryption key manager resource."""

    id: str
    key_rotation_id: Optional[str] = None
    customer_provided_root_key: Optional[CustomerProvidedRootKey] = None
    encryption_keys: list[EncryptionKey] = field(default_factory=list)

    @property
    def root_key_id(self) -> str:
        block = self.customer_provided_root_key
        return (block.key_id or "") if block else ""

    def to_dict(self) -> dict[str, Any]:
        """Render state with plain values (enums as strings, ISO 8601 dates)."""

        def _iso(value: Optional[datetime]) -> Optional[str]:
            return value.isoformat() if value else None

        root_key = None
        if self.customer_provided_root_key is not None:
            block = self.customer_provided_root_key
            root_key = {
                "wrapped_key": block.wrapped_key,
                "public_wrapping_key": block.public_wrapping_key,
                "wrapping_algorithm": block.wrapping_algorithm,
                "key_id": block.key_id,
                "type": block.type,
                "state": block.state,
                "parent_key_id": block.parent_key_id,
                "created_at": _iso(block.created_at),
                "updated_at": _iso(block.updated_at),
            }

        return {
            "id": self.id,
            "key_rotation_id": self.key_rotation_id,
            "customer_provided_root_key": [root_key] if root_key else [],
            "encryption_keys": [
                {
                    "key_id": key.key_id,
                    "type": str(getattr(key.type, "value", key.type)),
                    "state": str(getattr(key.state, "value", key.state)),
                    "parent_key_id": key.parent_key_id,
                    "created_at": _iso(key.created_at),
                    "updated_at": _iso(key.updated_at),
                }
                for key in self.encryption_keys
            ],
        }


# ==================== Diagnostics ====================


class DiagnosticSeverity(str, Enum):
    """Severity of a diagnostic."""

    ERROR = "error"


@dataclass
class Diagnostic:
    """User-facing diagnostic produced from an error."""

    summary: str
    detail: str
    severity: DiagnosticSeverity = DiagnosticSeverity.ERROR
