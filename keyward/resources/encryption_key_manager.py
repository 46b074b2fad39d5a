"""auth0_encryption_key_manager resource.

Manages tenant master key rotation and the customer provided root key
lifecycle:

    [no key] --create--> [pre-activation, awaiting wrapped_key]
    [pre-activation] --import wrapped_key, wait until active--> [active]
    [active or pre-activation] --delete, wait until destroyed--> [gone]

The move out of pre-activation needs the customer to wrap their key with
the public wrapping key and supply it in a later apply. Every other step
is driven here, waiting on the server with wait_until().
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Optional

import structlog

from keyward.core.encryption_key_client import EncryptionKeyClient
from keyward.exceptions import ManagementAPIError, WrappedKeyNotReadyError, is_status_not_found
from keyward.models import (
    CustomerProvidedRootKey,
    CustomerProvidedRootKeyConfig,
    EncryptionKey,
    EncryptionKeyManagerConfig,
    EncryptionKeyManagerState,
    EncryptionKeyState,
    EncryptionKeyType,
    RetryBudget,
    WrappingKey,
)
from keyward.wait import wait_until_budget

log = structlog.get_logger()

TYPE_NAME = "auth0_encryption_key_manager"

DEFAULT_RETRY_BUDGET = RetryBudget(max_attempts=20, interval_ms=100)

# Page size used when listing keys
LIST_PAGE_SIZE = 5


def _enum_value(value) -> Optional[str]:
    if value is None:
        return None
    return str(getattr(value, "value", value))


class EncryptionKeyManagerResource:
    """Resource to allow the rekeying of your tenant master key.

    Args:
        client: Management API encryption key client
        retry_budget: Bounds for every wait on a server-side transition
    """

    type_name = TYPE_NAME

    def __init__(
        self,
        client: EncryptionKeyClient,
        retry_budget: RetryBudget = DEFAULT_RETRY_BUDGET,
    ):
        self._client = client
        self._budget = retry_budget

    # ==================== Lifecycle ====================

    async def create(self, config: EncryptionKeyManagerConfig) -> EncryptionKeyManagerState:
        """Create the resource and provision whatever the configuration asks for."""
        state = EncryptionKeyManagerState(id=str(uuid.uuid4()))
        log.info("encryption_key_manager_create", id=state.id)
        return await self._apply(state, config, is_new=True)

    async def update(
        self,
        prior: EncryptionKeyManagerState,
        config: EncryptionKeyManagerConfig,
    ) -> EncryptionKeyManagerState:
        """Reconcile prior state with a changed configuration."""
        state = replace(
            prior,
            customer_provided_root_key=(
                replace(prior.customer_provided_root_key)
                if prior.customer_provided_root_key
                else None
            ),
            encryption_keys=list(prior.encryption_keys),
        )
        return await self._apply(state, config, is_new=False)

    async def read(self, state: EncryptionKeyManagerState) -> EncryptionKeyManagerState:
        """Refresh the key list and the customer provided root key block."""
        keys = await self._list_all_keys()

        block = state.customer_provided_root_key
        if block is not None:
            # A key going through activation takes precedence over an active one
            root_key = self._find_key(
                keys, EncryptionKeyType.CUSTOMER_PROVIDED_ROOT_KEY, EncryptionKeyState.PRE_ACTIVATION
            ) or self._find_key(
                keys, EncryptionKeyType.CUSTOMER_PROVIDED_ROOT_KEY, EncryptionKeyState.ACTIVE
            )
            if root_key is not None:
                state.customer_provided_root_key = self._flatten_root_key(
                    root_key, wrapping_key=None, prior=block, wrapped_key=block.wrapped_key
                )

        state.encryption_keys = keys
        return state

    async def delete(self, state: EncryptionKeyManagerState) -> None:
        """Remove the customer provided root key, if one was provisioned."""
        if state.root_key_id:
            await self._remove_key(state.root_key_id)
        log.info("encryption_key_manager_deleted", id=state.id)

    async def import_state(self, resource_id: str) -> EncryptionKeyManagerState:
        """Build state for an existing tenant, adopting its customer root key."""
        state = EncryptionKeyManagerState(id=resource_id)
        keys = await self._list_all_keys()
        root_key = self._find_key(
            keys, EncryptionKeyType.CUSTOMER_PROVIDED_ROOT_KEY, EncryptionKeyState.PRE_ACTIVATION
        ) or self._find_key(
            keys, EncryptionKeyType.CUSTOMER_PROVIDED_ROOT_KEY, EncryptionKeyState.ACTIVE
        )
        if root_key is not None:
            # A pre-activation key needs a wrapping key before wrapped_key can be imported
            wrapping_key = None
            if root_key.is_state(EncryptionKeyState.PRE_ACTIVATION):
                wrapping_key = await self._client.create_public_wrapping_key(root_key.key_id)
            state.customer_provided_root_key = self._flatten_root_key(root_key, wrapping_key=wrapping_key)
            log.info("customer_provided_root_key_adopted", id=resource_id, key_id=root_key.key_id)
        state.encryption_keys = keys
        return state

    # ==================== Reconciliation ====================

    async def _apply(
        self,
        state: EncryptionKeyManagerState,
        config: EncryptionKeyManagerConfig,
        is_new: bool,
    ) -> EncryptionKeyManagerState:
        rotation_changed = config.key_rotation_id != state.key_rotation_id
        if not is_new and rotation_changed and config.key_rotation_id:
            await self._client.rekey()
            log.info("encryption_keys_rekeyed", id=state.id, key_rotation_id=config.key_rotation_id)
        state.key_rotation_id = config.key_rotation_id

        prior_block = state.customer_provided_root_key
        config_block = config.customer_provided_root_key
        if is_new or self._root_key_changed(prior_block, config_block):
            await self._apply_root_key(state, prior_block, config_block)

        return await self.read(state)

    @staticmethod
    def _root_key_changed(
        prior: Optional[CustomerProvidedRootKey],
        config: Optional[CustomerProvidedRootKeyConfig],
    ) -> bool:
        if (prior is None) != (config is None):
            return True
        return prior is not None and config is not None and prior.wrapped_key != config.wrapped_key

    async def _apply_root_key(
        self,
        state: EncryptionKeyManagerState,
        prior: Optional[CustomerProvidedRootKey],
        config: Optional[CustomerProvidedRootKeyConfig],
    ) -> None:
        root_key_id = state.root_key_id

        if config is None:
            # The block was removed, so was any key it provisioned
            if root_key_id:
                await self._remove_key(root_key_id)
            state.customer_provided_root_key = None
            return

        wrapped_key = config.wrapped_key
        if wrapped_key:
            root_key_state = prior.state if prior else None
            public_wrapping_key = prior.public_wrapping_key if prior else None
            if (
                root_key_id
                and root_key_state == EncryptionKeyState.PRE_ACTIVATION.value
                and public_wrapping_key
            ):
                await self._import_wrapped_key(root_key_id, wrapped_key)
            elif not root_key_id or not public_wrapping_key:
                raise WrappedKeyNotReadyError()

        if not root_key_id:
            root_key, wrapping_key = await self._create_root_key()
            state.customer_provided_root_key = self._flatten_root_key(
                root_key, wrapping_key=wrapping_key, prior=prior, wrapped_key=wrapped_key
            )
        elif prior is not None:
            prior.wrapped_key = wrapped_key

    async def _remove_key(self, key_id: str) -> None:
        try:
            await self._client.delete_key(key_id)
        except ManagementAPIError as e:
            if not is_status_not_found(e):
                raise
            log.info("encryption_key_already_removed", key_id=key_id)
            return

        async def destroyed() -> bool:
            try:
                key = await self._client.read_key(key_id)
            except ManagementAPIError as e:
                if not is_status_not_found(e):
                    raise
                return True
            return key.is_state(EncryptionKeyState.DESTROYED)

        await wait_until_budget(self._budget, destroyed)
        log.info("encryption_key_removed", key_id=key_id)

    async def _import_wrapped_key(self, key_id: str, wrapped_key: str) -> None:
        await self._client.import_wrapped_key(key_id, wrapped_key)

        async def activated() -> bool:
            key = await self._client.read_key(key_id)
            return key.is_state(EncryptionKeyState.ACTIVE)

        await wait_until_budget(self._budget, activated)
        log.info("customer_provided_root_key_activated", key_id=key_id)

    async def _create_root_key(self) -> tuple[EncryptionKey, WrappingKey]:
        key = await self._client.create_key(EncryptionKeyType.CUSTOMER_PROVIDED_ROOT_KEY)

        async def visible() -> bool:
            # Not found means not propagated yet; anything else is fatal
            try:
                await self._client.read_key(key.key_id)
            except ManagementAPIError as e:
                if not is_status_not_found(e):
                    raise
                return False
            return True

        await wait_until_budget(self._budget, visible)

        wrapping_key = await self._client.create_public_wrapping_key(key.key_id)
        log.info("customer_provided_root_key_created", key_id=key.key_id)
        return key, wrapping_key

    # ==================== Helpers ====================

    async def _list_all_keys(self) -> list[EncryptionKey]:
        keys: list[EncryptionKey] = []
        page = 0
        while True:
            result = await self._client.list_keys(page=page, per_page=LIST_PAGE_SIZE)
            keys.extend(result.keys)
            if not result.has_next():
                break
            page += 1
        return keys

    @staticmethod
    def _find_key(
        keys: list[EncryptionKey],
        key_type: EncryptionKeyType,
        key_state: EncryptionKeyState,
    ) -> Optional[EncryptionKey]:
        for key in keys:
            if key.is_type(key_type) and key.is_state(key_state):
                return key
        return None

    @staticmethod
    def _flatten_root_key(
        key: EncryptionKey,
        wrapping_key: Optional[WrappingKey] = None,
        prior: Optional[CustomerProvidedRootKey] = None,
        wrapped_key: Optional[str] = None,
    ) -> CustomerProvidedRootKey:
        """Build the root key block, keeping the wrapping key from prior state."""
        public_wrapping_key = prior.public_wrapping_key if prior else None
        wrapping_algorithm = prior.wrapping_algorithm if prior else None
        if wrapping_key is not None:
            public_wrapping_key = wrapping_key.public_key
            wrapping_algorithm = wrapping_key.algorithm

        return CustomerProvidedRootKey(
            wrapped_key=wrapped_key,
            public_wrapping_key=public_wrapping_key,
            wrapping_algorithm=wrapping_algorithm,
            key_id=key.key_id,
            type=_enum_value(key.type),
            state=_enum_value(key.state),
            parent_key_id=key.parent_key_id,
            created_at=key.created_at,
            updated_at=key.updated_at,
        )
