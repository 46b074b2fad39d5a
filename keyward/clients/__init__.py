"""Encryption key client implementations."""

from keyward.clients.auth0 import Auth0EncryptionKeyClient
from keyward.clients.mock import MockEncryptionKeyClient

__all__ = [
    "Auth0EncryptionKeyClient",
    "MockEncryptionKeyClient",
]
