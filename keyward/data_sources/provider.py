"""auth0_provider data source."""

from __future__ import annotations

from typing import Any

from keyward.core.encryption_key_client import EncryptionKeyClient
from keyward.version import VERSION


class ProviderDataSource:
    """Data source exposing information about the provider itself."""

    type_name = "auth0_provider"

    def __init__(self, client: EncryptionKeyClient):
        self._client = client

    async def read(self) -> dict[str, Any]:
        return {"provider_version": VERSION}
