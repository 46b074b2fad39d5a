"""Auth0 Management API implementation of EncryptionKeyClient."""

from __future__ import annotations

import asyncio
import threading
import time
from datetime import datetime
from enum import Enum
from typing import Any, Optional, TypeVar

import jwt
import requests
import structlog

from keyward.config import ProviderConfig
from keyward.core.encryption_key_client import EncryptionKeyClient
from keyward.exceptions import KeyNotFoundError, ManagementAPIError, RateLimitError
from keyward.models import (
    WRAPPING_ALGORITHM,
    EncryptionKey,
    EncryptionKeyList,
    EncryptionKeyState,
    EncryptionKeyType,
    WrappingKey,
)
from keyward.version import VERSION

log = structlog.get_logger()

KEYS_PATH = "/api/v2/keys/encryption"
TOKEN_PATH = "/oauth/token"

# Refresh client credentials tokens this long before they expire
TOKEN_EXPIRY_LEEWAY_SECONDS = 60

E = TypeVar("E", bound=Enum)


def _parse_enum(enum_type: type[E], value: Any) -> E | str:
    """Map a wire value to an enum member, keeping unknown values as strings."""
    try:
        return enum_type(value)
    except ValueError:
        return str(value or "")


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        log.warning("auth0_unparseable_timestamp", value=value)
        return None


class Auth0EncryptionKeyClient(EncryptionKeyClient):
    """Auth0 Management API client for encryption keys.

    Blocking HTTP calls run in a worker thread so the event loop stays free
    to cancel a wait in progress.

    Args:
        config: Resolved provider configuration
        session: Optional requests session (a new one is created otherwise)
        timeout: HTTP request timeout in seconds

    Note:
        Use Auth0Factory.create_client() instead of instantiating directly.
    """

    def __init__(
        self,
        config: ProviderConfig,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ):
        self._config = config
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "User-Agent": f"keyward/{VERSION}",
                "Accept": "application/json",
            }
        )
        self._token: Optional[str] = config.api_token if config.uses_api_token else None
        self._token_expires_at: float = float("inf") if config.uses_api_token else 0.0
        self._lock = threading.Lock()

    # ==================== Authentication ====================

    def _fetch_token(self) -> tuple[str, float]:
        """Run the client credentials grant and return (token, expires_at)."""
        try:
            response = self._session.post(
                f"{self._config.base_url}{TOKEN_PATH}",
                json={
                    "grant_type": "client_credentials",
                    "client_id": self._config.client_id,
                    "client_secret": self._config.client_secret,
                    "audience": self._config.management_audience,
                },
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            log.error("auth0_token_request_failed", error=str(e))
            raise ManagementAPIError(f"Failed to obtain access token: {e}", "get_token")

        if response.status_code >= 400:
            log.error("auth0_token_request_rejected", status_code=response.status_code)
            raise ManagementAPIError(
                f"Failed to obtain access token: {self._error_message(response)}",
                "get_token",
                status_code=response.status_code,
            )

        try:
            body = response.json()
            token = body["access_token"]
        except (ValueError, KeyError, TypeError):
            log.error("auth0_token_response_invalid", status_code=response.status_code)
            raise ManagementAPIError(
                "Failed to obtain access token: response did not contain an access_token",
                "get_token",
                status_code=response.status_code,
            )

        try:
            claims = jwt.decode(token, options={"verify_signature": False})
            expires_at = float(claims["exp"])
        except (jwt.InvalidTokenError, KeyError):
            expires_at = time.time() + float(body.get("expires_in", 0))

        log.debug("auth0_token_obtained", expires_at=expires_at)
        return token, expires_at

    def _access_token(self) -> str:
        with self._lock:
            if self._token and self._token_expires_at - TOKEN_EXPIRY_LEEWAY_SECONDS > time.time():
                return self._token
            self._token, self._token_expires_at = self._fetch_token()
            return self._token

    # ==================== HTTP ====================

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason or str(response.status_code)
        if isinstance(body, dict):
            return body.get("message") or body.get("error_description") or body.get("error") or str(body)
        return str(body)

    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        key_id: Optional[str] = None,
        params: Optional[dict[str, Any]] = None,
        payload: Optional[dict[str, Any]] = None,
    ) -> Any:
        url = f"{self._config.base_url}{KEYS_PATH}{path}"
        headers = {"Authorization": f"Bearer {self._access_token()}"}

        if self._config.debug:
            log.debug("auth0_request", method=method, url=url, params=params)

        try:
            response = self._session.request(
                method,
                url,
                headers=headers,
                params=params,
                json=payload,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            log.error("auth0_request_failed", operation=operation, error=str(e))
            raise ManagementAPIError(f"Failed to {operation.replace('_', ' ')}: {e}", operation)

        if self._config.debug:
            log.debug("auth0_response", method=method, url=url, status_code=response.status_code)

        if response.status_code == 404 and key_id is not None:
            raise KeyNotFoundError(key_id, operation=operation)
        if response.status_code == 429:
            log.warning("auth0_rate_limited", operation=operation)
            raise RateLimitError(operation)
        if response.status_code >= 400:
            message = self._error_message(response)
            log.error(
                "auth0_request_rejected",
                operation=operation,
                status_code=response.status_code,
                error=message,
            )
            raise ManagementAPIError(
                f"Failed to {operation.replace('_', ' ')}: {message}",
                operation,
                status_code=response.status_code,
            )

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def _call(self, *args: Any, **kwargs: Any) -> Any:
        return await asyncio.to_thread(self._request, *args, **kwargs)

    def _api_key_to_encryption_key(self, data: dict[str, Any]) -> EncryptionKey:
        """Convert a Management API key object to an EncryptionKey."""
        return EncryptionKey(
            key_id=data.get("kid", ""),
            type=_parse_enum(EncryptionKeyType, data.get("type")),
            state=_parse_enum(EncryptionKeyState, data.get("state")),
            parent_key_id=data.get("parent_kid"),
            created_at=_parse_timestamp(data.get("created_at")),
            updated_at=_parse_timestamp(data.get("updated_at")),
        )

    # ==================== Key Operations ====================

    async def list_keys(self, page: int = 0, per_page: int = 50) -> EncryptionKeyList:
        """List one page of encryption keys, with totals."""
        body = await self._call(
            "GET",
            "",
            "list_keys",
            params={"page": page, "per_page": per_page, "include_totals": "true"},
        )
        body = body or {}
        keys = [self._api_key_to_encryption_key(item) for item in body.get("keys", [])]
        return EncryptionKeyList(
            keys=keys,
            start=body.get("start", page * per_page),
            limit=body.get("limit", per_page),
            total=body.get("total", len(keys)),
        )

    async def read_key(self, key_id: str) -> EncryptionKey:
        """Read an encryption key by kid."""
        body = await self._call("GET", f"/{key_id}", "read_key", key_id=key_id)
        return self._api_key_to_encryption_key(body)

    async def create_key(self, key_type: EncryptionKeyType) -> EncryptionKey:
        """Create an encryption key of the given type."""
        body = await self._call("POST", "", "create_key", payload={"type": key_type.value})
        key = self._api_key_to_encryption_key(body)
        log.info("auth0_encryption_key_created", key_id=key.key_id, type=key_type.value)
        return key

    async def delete_key(self, key_id: str) -> None:
        """Request deletion of an encryption key."""
        await self._call("DELETE", f"/{key_id}", "delete_key", key_id=key_id)
        log.info("auth0_encryption_key_delete_requested", key_id=key_id)

    async def rekey(self) -> None:
        """Rotate the tenant master key."""
        await self._call("POST", "/rekey", "rekey")
        log.info("auth0_encryption_keys_rekeyed")

    async def create_public_wrapping_key(self, key_id: str) -> WrappingKey:
        """Generate the public wrapping key for a root key."""
        body = await self._call(
            "POST", f"/{key_id}/wrapping-key", "create_public_wrapping_key", key_id=key_id
        )
        return WrappingKey(
            public_key=body.get("public_key", ""),
            algorithm=body.get("algorithm") or WRAPPING_ALGORITHM,
        )

    async def import_wrapped_key(self, key_id: str, wrapped_key: str) -> EncryptionKey:
        """Import the wrapped customer key material."""
        body = await self._call(
            "POST",
            f"/{key_id}",
            "import_wrapped_key",
            key_id=key_id,
            payload={"wrapped_key": wrapped_key},
        )
        log.info("auth0_wrapped_key_imported", key_id=key_id)
        if body:
            return self._api_key_to_encryption_key(body)
        return await self.read_key(key_id)
