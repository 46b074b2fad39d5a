"""Mock encryption key client for local development without an Auth0 tenant.

Keys live in memory. Server-side transitions (a new key becoming readable,
activation after import, destruction after delete) complete only after a
configurable number of reads, which is how the reconciler sees them on a
real tenant.
"""

import base64
import secrets
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from keyward.core.encryption_key_client import EncryptionKeyClient
from keyward.exceptions import KeyNotFoundError, ManagementAPIError
from keyward.models import (
    WRAPPING_ALGORITHM,
    EncryptionKey,
    EncryptionKeyList,
    EncryptionKeyState,
    EncryptionKeyType,
    WrappingKey,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_kid() -> str:
    return uuid.uuid4().hex


def _fake_public_key() -> str:
    body = base64.b64encode(secrets.token_bytes(96)).decode("ascii")
    return f"-----BEGIN PUBLIC KEY-----\n{body}\n-----END PUBLIC KEY-----\n"


class MockEncryptionKeyClient(EncryptionKeyClient):
    """
    In-memory encryption key client.

    Starts with an active tenant master key under an active environment
    root key, like a fresh tenant.

    Args:
        visibility_reads: Reads of a new key that answer "not found" first
        activation_reads: Reads after an import before the key is active
        destruction_reads: Reads after a delete before the key is destroyed
    """

    def __init__(
        self,
        visibility_reads: int = 0,
        activation_reads: int = 0,
        destruction_reads: int = 0,
    ) -> None:
        self.visibility_reads = visibility_reads
        self.activation_reads = activation_reads
        self.destruction_reads = destruction_reads

        self._keys: Dict[str, EncryptionKey] = {}
        self._wrapping_keys: Dict[str, WrappingKey] = {}
        self._wrapped_keys: Dict[str, str] = {}

        # Countdowns of pending transitions, keyed by kid
        self._until_visible: Dict[str, int] = {}
        self._until_active: Dict[str, int] = {}
        self._until_destroyed: Dict[str, int] = {}

        # Names of every API call made, in order
        self.calls: List[str] = []

        root = self._add_key(EncryptionKeyType.ENVIRONMENT_ROOT_KEY, EncryptionKeyState.ACTIVE)
        self._add_key(
            EncryptionKeyType.TENANT_MASTER_KEY,
            EncryptionKeyState.ACTIVE,
            parent_key_id=root.key_id,
        )

    def _add_key(
        self,
        key_type: EncryptionKeyType,
        state: EncryptionKeyState,
        parent_key_id: Optional[str] = None,
    ) -> EncryptionKey:
        now = _now()
        key = EncryptionKey(
            key_id=_new_kid(),
            type=key_type,
            state=state,
            parent_key_id=parent_key_id,
            created_at=now,
            updated_at=now,
        )
        self._keys[key.key_id] = key
        return key

    def _set_state(self, key: EncryptionKey, state: EncryptionKeyState) -> None:
        key.state = state
        key.updated_at = _now()

    def _advance(self, key: EncryptionKey) -> None:
        """Count one read against the key's pending transitions."""
        kid = key.key_id
        if kid in self._until_active:
            self._until_active[kid] -= 1
            if self._until_active[kid] <= 0:
                del self._until_active[kid]
                self._activate_root_key(key)
        if kid in self._until_destroyed:
            self._until_destroyed[kid] -= 1
            if self._until_destroyed[kid] <= 0:
                del self._until_destroyed[kid]
                self._set_state(key, EncryptionKeyState.DESTROYED)

    def _activate_root_key(self, key: EncryptionKey) -> None:
        """Activate a customer root key, replacing the environment root key."""
        for other in self._keys.values():
            if other.is_type(EncryptionKeyType.ENVIRONMENT_ROOT_KEY) and other.is_state(
                EncryptionKeyState.ACTIVE
            ):
                self._set_state(other, EncryptionKeyState.DEACTIVATED)
            elif other.is_type(EncryptionKeyType.TENANT_MASTER_KEY) and other.is_state(
                EncryptionKeyState.ACTIVE
            ):
                other.parent_key_id = key.key_id
                other.updated_at = _now()
        self._set_state(key, EncryptionKeyState.ACTIVE)

    def _get(self, key_id: str, operation: str) -> EncryptionKey:
        key = self._keys.get(key_id)
        if key is None or key_id in self._until_visible:
            raise KeyNotFoundError(key_id, operation=operation)
        return key

    def _visible_keys(self) -> List[EncryptionKey]:
        return [k for kid, k in self._keys.items() if kid not in self._until_visible]

    # ==================== Key Operations ====================

    async def list_keys(self, page: int = 0, per_page: int = 50) -> EncryptionKeyList:
        self.calls.append("list_keys")
        keys = self._visible_keys()
        start = page * per_page
        return EncryptionKeyList(
            keys=[EncryptionKey(**vars(k)) for k in keys[start:start + per_page]],
            start=start,
            limit=per_page,
            total=len(keys),
        )

    async def read_key(self, key_id: str) -> EncryptionKey:
        self.calls.append("read_key")
        if self._until_visible.get(key_id, 0) > 0:
            self._until_visible[key_id] -= 1
            if self._until_visible[key_id] <= 0:
                del self._until_visible[key_id]
            raise KeyNotFoundError(key_id)

        key = self._get(key_id, "read_key")
        self._advance(key)
        return EncryptionKey(**vars(key))

    async def create_key(self, key_type: EncryptionKeyType) -> EncryptionKey:
        self.calls.append("create_key")
        if key_type != EncryptionKeyType.CUSTOMER_PROVIDED_ROOT_KEY:
            raise ManagementAPIError(
                f"Failed to create key: unsupported type '{key_type.value}'",
                "create_key",
                status_code=400,
            )
        key = self._add_key(key_type, EncryptionKeyState.PRE_ACTIVATION)
        if self.visibility_reads > 0:
            self._until_visible[key.key_id] = self.visibility_reads
        return EncryptionKey(**vars(key))

    async def delete_key(self, key_id: str) -> None:
        self.calls.append("delete_key")
        key = self._get(key_id, "delete_key")
        self._until_active.pop(key_id, None)
        if self.destruction_reads > 0:
            self._until_destroyed[key_id] = self.destruction_reads
        else:
            del self._keys[key_id]

    async def rekey(self) -> None:
        self.calls.append("rekey")
        parent_key_id = None
        for key in self._keys.values():
            if key.is_type(EncryptionKeyType.TENANT_MASTER_KEY) and key.is_state(
                EncryptionKeyState.ACTIVE
            ):
                parent_key_id = key.parent_key_id
                self._set_state(key, EncryptionKeyState.DEACTIVATED)
        self._add_key(
            EncryptionKeyType.TENANT_MASTER_KEY,
            EncryptionKeyState.ACTIVE,
            parent_key_id=parent_key_id,
        )

    async def create_public_wrapping_key(self, key_id: str) -> WrappingKey:
        self.calls.append("create_public_wrapping_key")
        key = self._get(key_id, "create_public_wrapping_key")
        if not key.is_state(EncryptionKeyState.PRE_ACTIVATION):
            raise ManagementAPIError(
                f"Key '{key_id}' is not awaiting a wrapped key",
                "create_public_wrapping_key",
                status_code=409,
            )
        wrapping_key = WrappingKey(public_key=_fake_public_key(), algorithm=WRAPPING_ALGORITHM)
        self._wrapping_keys[key_id] = wrapping_key
        return wrapping_key

    async def import_wrapped_key(self, key_id: str, wrapped_key: str) -> EncryptionKey:
        self.calls.append("import_wrapped_key")
        key = self._get(key_id, "import_wrapped_key")
        if key_id not in self._wrapping_keys or not key.is_state(EncryptionKeyState.PRE_ACTIVATION):
            raise ManagementAPIError(
                f"Key '{key_id}' is not awaiting a wrapped key",
                "import_wrapped_key",
                status_code=409,
            )
        self._wrapped_keys[key_id] = wrapped_key
        if self.activation_reads > 0:
            self._until_active[key_id] = self.activation_reads
        else:
            self._activate_root_key(key)
        return EncryptionKey(**vars(key))
