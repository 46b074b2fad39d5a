"""Managed resources."""

from keyward.resources.encryption_key_manager import (
    DEFAULT_RETRY_BUDGET,
    EncryptionKeyManagerResource,
)

__all__ = [
    "DEFAULT_RETRY_BUDGET",
    "EncryptionKeyManagerResource",
]
