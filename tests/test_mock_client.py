"""Tests for the in-memory encryption key client."""

import pytest

from keyward import (
    EncryptionKeyClient,
    EncryptionKeyState,
    EncryptionKeyType,
    KeyNotFoundError,
    ManagementAPIError,
    MockEncryptionKeyClient,
)


def test_encryption_key_client_is_abstract():
    """Test that EncryptionKeyClient cannot be instantiated."""
    with pytest.raises(TypeError):
        EncryptionKeyClient()  # type: ignore


def test_mock_client_implements_interface():
    """Test that MockEncryptionKeyClient provides every client operation."""
    required_methods = [
        "list_keys",
        "read_key",
        "create_key",
        "delete_key",
        "rekey",
        "create_public_wrapping_key",
        "import_wrapped_key",
    ]

    client = MockEncryptionKeyClient()

    assert isinstance(client, EncryptionKeyClient)
    for method in required_methods:
        assert callable(getattr(client, method)), f"MockEncryptionKeyClient.{method} is not callable"


@pytest.mark.asyncio
async def test_fresh_tenant_keys():
    """Test the mock starts with an active root key and tenant master key."""
    client = MockEncryptionKeyClient()

    result = await client.list_keys()

    by_type = {k.type: k for k in result.keys}
    assert by_type[EncryptionKeyType.ENVIRONMENT_ROOT_KEY].state == EncryptionKeyState.ACTIVE
    master = by_type[EncryptionKeyType.TENANT_MASTER_KEY]
    assert master.state == EncryptionKeyState.ACTIVE
    assert master.parent_key_id == by_type[EncryptionKeyType.ENVIRONMENT_ROOT_KEY].key_id


@pytest.mark.asyncio
async def test_new_key_invisible_for_configured_reads():
    """Test a created key answers not-found for visibility_reads reads."""
    client = MockEncryptionKeyClient(visibility_reads=2)
    key = await client.create_key(EncryptionKeyType.CUSTOMER_PROVIDED_ROOT_KEY)

    for _ in range(2):
        with pytest.raises(KeyNotFoundError):
            await client.read_key(key.key_id)

    assert (await client.read_key(key.key_id)).state == EncryptionKeyState.PRE_ACTIVATION


@pytest.mark.asyncio
async def test_only_root_keys_can_be_created():
    client = MockEncryptionKeyClient()

    with pytest.raises(ManagementAPIError) as exc:
        await client.create_key(EncryptionKeyType.TENANT_MASTER_KEY)

    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_import_requires_wrapping_key():
    """Test importing before the wrapping key exists is rejected."""
    client = MockEncryptionKeyClient()
    key = await client.create_key(EncryptionKeyType.CUSTOMER_PROVIDED_ROOT_KEY)

    with pytest.raises(ManagementAPIError) as exc:
        await client.import_wrapped_key(key.key_id, "abc")

    assert exc.value.status_code == 409


@pytest.mark.asyncio
async def test_activation_after_reads():
    """Test an imported key activates after activation_reads reads."""
    client = MockEncryptionKeyClient(activation_reads=3)
    key = await client.create_key(EncryptionKeyType.CUSTOMER_PROVIDED_ROOT_KEY)
    await client.create_public_wrapping_key(key.key_id)
    await client.import_wrapped_key(key.key_id, "abc")

    states = [(await client.read_key(key.key_id)).state for _ in range(3)]

    assert states == [
        EncryptionKeyState.PRE_ACTIVATION,
        EncryptionKeyState.PRE_ACTIVATION,
        EncryptionKeyState.ACTIVE,
    ]


@pytest.mark.asyncio
async def test_destruction_after_reads():
    """Test a deleted key is destroyed after destruction_reads reads."""
    client = MockEncryptionKeyClient(destruction_reads=2)
    key = await client.create_key(EncryptionKeyType.CUSTOMER_PROVIDED_ROOT_KEY)
    await client.delete_key(key.key_id)

    first = await client.read_key(key.key_id)
    second = await client.read_key(key.key_id)

    assert first.state == EncryptionKeyState.PRE_ACTIVATION
    assert second.state == EncryptionKeyState.DESTROYED


@pytest.mark.asyncio
async def test_immediate_delete_removes_key():
    client = MockEncryptionKeyClient()
    key = await client.create_key(EncryptionKeyType.CUSTOMER_PROVIDED_ROOT_KEY)

    await client.delete_key(key.key_id)

    with pytest.raises(KeyNotFoundError):
        await client.read_key(key.key_id)
    with pytest.raises(KeyNotFoundError):
        await client.delete_key(key.key_id)


@pytest.mark.asyncio
async def test_rekey_replaces_tenant_master_key():
    """Test rekey deactivates the active master key and adds a new one."""
    client = MockEncryptionKeyClient()

    await client.rekey()

    masters = [k for k in (await client.list_keys()).keys if k.is_type(EncryptionKeyType.TENANT_MASTER_KEY)]
    assert sorted(k.state.value for k in masters) == ["active", "deactivated"]
    assert masters[0].parent_key_id == masters[1].parent_key_id


@pytest.mark.asyncio
async def test_returned_keys_are_copies():
    """Test callers cannot mutate the stored keys."""
    client = MockEncryptionKeyClient()
    listed = (await client.list_keys()).keys[0]

    listed.state = EncryptionKeyState.DESTROYED

    assert (await client.read_key(listed.key_id)).state == EncryptionKeyState.ACTIVE
