"""Shared pytest fixtures for keyward tests."""

import pytest

from keyward import (
    EncryptionKeyManagerResource,
    MockEncryptionKeyClient,
    RetryBudget,
)
from keyward.config import (
    ENV_API_TOKEN,
    ENV_AUDIENCE,
    ENV_CLIENT_ID,
    ENV_CLIENT_SECRET,
    ENV_DEBUG,
    ENV_DOMAIN,
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove AUTH0_* variables so tests see only what they set."""
    for name in (ENV_DOMAIN, ENV_AUDIENCE, ENV_CLIENT_ID, ENV_CLIENT_SECRET, ENV_API_TOKEN, ENV_DEBUG):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def fast_budget():
    """Retry budget that does not sleep."""
    return RetryBudget(max_attempts=20, interval_ms=0)


@pytest.fixture
def mock_client():
    """Mock client with every server-side transition delayed by two reads."""
    return MockEncryptionKeyClient(visibility_reads=2, activation_reads=2, destruction_reads=2)


@pytest.fixture
def manager(mock_client, fast_budget):
    """Encryption key manager backed by the mock client."""
    return EncryptionKeyManagerResource(mock_client, retry_budget=fast_budget)
