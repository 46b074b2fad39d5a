"""Factory for mock/testing components."""

from typing import Optional

from keyward.core.encryption_key_client import EncryptionKeyClient
from keyward.core.factory import KeywardFactory


class MockFactory(KeywardFactory):
    """Factory for in-memory clients.

    The mock client needs no credentials or network access. It starts with
    an active environment root key and tenant master key.

    Args:
        visibility_reads: Reads of a new key that answer "not found" first
        activation_reads: Reads after an import before the key is active
        destruction_reads: Reads after a delete before the key is destroyed

    Examples:
        >>> factory = MockFactory(activation_reads=2)
        >>> client = factory.create_client()

    Note:
        The client is cached so every resource sees the same keys.
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
        self._client: Optional[EncryptionKeyClient] = None

    def create_client(self) -> EncryptionKeyClient:
        """Create or return the cached mock client."""
        if self._client is None:
            from keyward.clients.mock import MockEncryptionKeyClient

            self._client = MockEncryptionKeyClient(
                visibility_reads=self.visibility_reads,
                activation_reads=self.activation_reads,
                destruction_reads=self.destruction_reads,
            )
        return self._client
