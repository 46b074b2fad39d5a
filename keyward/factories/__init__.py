"""Factory implementations for creating Keyward components."""

from keyward.factories.auth0 import Auth0Factory
from keyward.factories.mock import MockFactory

__all__ = [
    "Auth0Factory",
    "MockFactory",
]
