"""Provider configuration.

Explicit values take precedence over the AUTH0_* environment variables.
The merged result is validated once, here, so the rest of the library can
rely on a complete ProviderConfig.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from keyward.exceptions import ConfigurationError

ENV_DOMAIN = "AUTH0_DOMAIN"
ENV_AUDIENCE = "AUTH0_AUDIENCE"
ENV_CLIENT_ID = "AUTH0_CLIENT_ID"
ENV_CLIENT_SECRET = "AUTH0_CLIENT_SECRET"
ENV_API_TOKEN = "AUTH0_API_TOKEN"
ENV_DEBUG = "AUTH0_DEBUG"

_TRUTHY = {"1", "true", "on"}


@dataclass(frozen=True)
class ProviderConfig:
    """Resolved Auth0 provider configuration.

    Attributes:
        domain: Tenant domain, e.g. "example.eu.auth0.com"
        audience: Management API audience when using a custom domain
        client_id: Client ID for the client credentials grant
        client_secret: Client secret for the client credentials grant
        api_token: Static Management API access token
        debug: Log every Management API request
    """

    domain: str
    audience: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    api_token: Optional[str] = None
    debug: bool = False

    @property
    def base_url(self) -> str:
        domain = self.domain.rstrip("/")
        if domain.startswith(("http://", "https://")):
            return domain
        return f"https://{domain}"

    @property
    def management_audience(self) -> str:
        return self.audience or f"{self.base_url}/api/v2/"

    @property
    def uses_api_token(self) -> bool:
        return bool(self.api_token)

    @classmethod
    def resolve(
        cls,
        domain: Optional[str] = None,
        audience: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        api_token: Optional[str] = None,
        debug: Optional[bool] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ProviderConfig":
        """Merge explicit settings over the environment and validate.

        Args:
            domain, audience, client_id, client_secret, api_token, debug:
                Explicit settings. Empty strings count as unset.
            environ: Environment mapping (defaults to os.environ)

        Returns:
            Validated ProviderConfig

        Raises:
            ConfigurationError: If settings conflict or credentials are missing
        """
        env = os.environ if environ is None else environ

        # Conflicts are only checked on explicit settings, mirroring schema
        # validation. Environment fallbacks may carry both credential kinds.
        if api_token and client_id:
            raise ConfigurationError(
                "client_id conflicts with api_token", field="client_id"
            )
        if api_token and client_secret:
            raise ConfigurationError(
                "client_secret conflicts with api_token", field="client_secret"
            )
        if client_id and not client_secret:
            raise ConfigurationError(
                "client_id also requires client_secret", field="client_secret"
            )
        if client_secret and not client_id:
            raise ConfigurationError(
                "client_secret also requires client_id", field="client_id"
            )

        resolved_debug = env.get(ENV_DEBUG, "").lower() in _TRUTHY
        if debug is not None:
            resolved_debug = debug

        config = cls(
            domain=domain or env.get(ENV_DOMAIN, ""),
            audience=audience or env.get(ENV_AUDIENCE) or None,
            client_id=client_id or env.get(ENV_CLIENT_ID) or None,
            client_secret=client_secret or env.get(ENV_CLIENT_SECRET) or None,
            api_token=api_token or env.get(ENV_API_TOKEN) or None,
            debug=resolved_debug,
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Check the merged configuration is usable.

        Raises:
            ConfigurationError: If the domain or credentials are missing
        """
        if not self.domain:
            raise ConfigurationError(
                f"domain is required. It can also be sourced from the {ENV_DOMAIN} "
                "environment variable.",
                field="domain",
            )
        if self.api_token:
            return
        if not (self.client_id and self.client_secret):
            raise ConfigurationError(
                "Either api_token or client_id and client_secret must be configured. "
                f"They can also be sourced from {ENV_API_TOKEN}, {ENV_CLIENT_ID} and "
                f"{ENV_CLIENT_SECRET}.",
                field="api_token",
            )
