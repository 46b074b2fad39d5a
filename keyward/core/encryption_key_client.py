"""Abstract encryption key client interface.

This module defines the operations the encryption key manager needs from
the Auth0 Management API. Implementations can talk to a real tenant or keep
keys in memory for tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from keyward.models import (
    EncryptionKey,
    EncryptionKeyList,
    EncryptionKeyType,
    WrappingKey,
)


class EncryptionKeyClient(ABC):
    """Abstract client for the encryption key endpoints.

    Reads are classified into success, KeyNotFoundError and any other
    ManagementAPIError, so callers can decide whether "not found" means
    done or not-yet.

    Implementations:
        - Auth0EncryptionKeyClient: Auth0 Management API over HTTPS
        - MockEncryptionKeyClient: In-memory keys with simulated delays
    """

    @abstractmethod
    async def list_keys(self, page: int = 0, per_page: int = 50) -> EncryptionKeyList:
        """List one page of encryption keys.

        Args:
            page: Zero-based page index
            per_page: Number of keys per page

        Returns:
            EncryptionKeyList with keys and pagination totals

        Raises:
            ManagementAPIError: On API errors
        """

    @abstractmethod
    async def read_key(self, key_id: str) -> EncryptionKey:
        """Read a single encryption key.

        Args:
            key_id: The key identifier (kid)

        Returns:
            The EncryptionKey

        Raises:
            KeyNotFoundError: If the key does not exist
            ManagementAPIError: On other API errors
        """

    @abstractmethod
    async def create_key(self, key_type: EncryptionKeyType) -> EncryptionKey:
        """Create an encryption key.

        The key may not be readable immediately after this returns.

        Args:
            key_type: Type of key to create

        Returns:
            The created EncryptionKey

        Raises:
            ManagementAPIError: On API errors
        """

    @abstractmethod
    async def delete_key(self, key_id: str) -> None:
        """Request deletion of an encryption key.

        Destruction completes asynchronously on the server.

        Raises:
            KeyNotFoundError: If the key does not exist
            ManagementAPIError: On other API errors
        """

    @abstractmethod
    async def rekey(self) -> None:
        """Rotate the tenant master key and its descendants.

        Raises:
            ManagementAPIError: On API errors
        """

    @abstractmethod
    async def create_public_wrapping_key(self, key_id: str) -> WrappingKey:
        """Generate the public wrapping key for a pre-activation root key.

        Raises:
            KeyNotFoundError: If the key does not exist
            ManagementAPIError: On other API errors
        """

    @abstractmethod
    async def import_wrapped_key(self, key_id: str, wrapped_key: str) -> EncryptionKey:
        """Import customer key material wrapped with the public wrapping key.

        Activation completes asynchronously on the server.

        Args:
            key_id: The pre-activation root key identifier
            wrapped_key: Base64-encoded wrapped key material

        Returns:
            The EncryptionKey as returned by the import call

        Raises:
            KeyNotFoundError: If the key does not exist
            ManagementAPIError: On other API errors
        """
