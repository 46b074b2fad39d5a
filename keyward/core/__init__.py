"""Core abstractions for the Keyward provider."""

from keyward.core.encryption_key_client import EncryptionKeyClient
from keyward.core.factory import KeywardFactory, create_factory

__all__ = [
    "EncryptionKeyClient",
    "KeywardFactory",
    "create_factory",
]
