"""Configuration resolver.

Validates the API key and works out which organization every tool call is
scoped to. Resolution never raises: it returns either a ``HookbaseConfig``
or a tagged ``ConfigError`` that an operator can act on.
"""

from typing import Any, Optional

import httpx

from hookbase_client.client import HookbaseClient
from hookbase_shared.config import API_KEY_PREFIX, HookbaseSettings
from hookbase_shared.errors import ConfigurationNotInitializedError
from hookbase_shared.logging import get_logger
from hookbase_shared.models import (
    ConfigError,
    ConfigErrorKind,
    ConfigResolution,
    HookbaseConfig,
    OrganizationRef,
)

logger = get_logger(__name__)

IDENTITY_PATH = "/api/auth/me"


class ConfigurationResolver:
    """
    Resolves and caches the process-wide configuration.

    Only a successful resolution is cached; after a failure ``resolve`` may
    be called again (for example once the operator has fixed the
    environment). Once cached, ``resolve`` returns the cached value without
    re-validating anything.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._transport = transport
        self._config: Optional[HookbaseConfig] = None
        self._last_error: Optional[ConfigError] = None

    def current(self) -> HookbaseConfig:
        """
        Return the cached configuration.

        Raises:
            ConfigurationNotInitializedError: If resolution never succeeded
        """
        if self._config is None:
            raise ConfigurationNotInitializedError(
                self._last_error.message if self._last_error else None
            )
        return self._config

    async def resolve(self, settings: HookbaseSettings) -> ConfigResolution:
        """
        Resolve configuration from the environment.

        Args:
            settings: Environment-derived settings

        Returns:
            The resolved configuration or a tagged failure
        """
        if self._config is not None:
            return self._config

        outcome = await self._resolve(settings)

        if isinstance(outcome, HookbaseConfig):
            self._config = outcome
            self._last_error = None
            logger.info("Configuration resolved", org_id=outcome.org_id, api_url=outcome.api_url)
        else:
            self._last_error = outcome
            logger.error("Configuration error", kind=outcome.kind.value, error=outcome.message)

        return outcome

    async def _resolve(self, settings: HookbaseSettings) -> ConfigResolution:
        api_key = settings.api_key
        api_url = settings.base_url

        if not api_key:
            return ConfigError(
                kind=ConfigErrorKind.MISSING_CREDENTIAL,
                message=(
                    "Missing HOOKBASE_API_KEY environment variable. "
                    "Get your API key from the Hookbase dashboard."
                ),
            )

        if not api_key.startswith(API_KEY_PREFIX):
            return ConfigError(
                kind=ConfigErrorKind.INVALID_CREDENTIAL_FORMAT,
                message=(
                    'Invalid HOOKBASE_API_KEY format. '
                    f'API keys should start with "{API_KEY_PREFIX}".'
                ),
            )

        # Escape hatch for keys that belong to several organizations
        if settings.org_id:
            return HookbaseConfig(api_url=api_url, api_key=api_key, org_id=settings.org_id)

        async with HookbaseClient(api_url, api_key, transport=self._transport) as client:
            response = await client.dispatch("GET", IDENTITY_PATH, fallback_error="Invalid API key")

        if response.status == 0:
            return ConfigError(
                kind=ConfigErrorKind.NETWORK_ERROR,
                message=f"Failed to validate API key: {response.error}",
            )

        if not response.ok:
            return ConfigError(
                kind=ConfigErrorKind.AUTHENTICATION_FAILED,
                message=response.error or "Invalid API key",
            )

        organizations = _parse_organizations(response.data)

        if not organizations:
            return ConfigError(
                kind=ConfigErrorKind.NO_ORGANIZATION,
                message="No organizations found for this API key",
            )

        if len(organizations) > 1:
            org_list = "\n".join(f"  - {o.name} ({o.id})" for o in organizations)
            return ConfigError(
                kind=ConfigErrorKind.AMBIGUOUS_ORGANIZATION,
                message=f"Multiple organizations found. Set HOOKBASE_ORG_ID to one of:\n{org_list}",
                candidates=organizations,
            )

        return HookbaseConfig(api_url=api_url, api_key=api_key, org_id=organizations[0].id)


def _parse_organizations(data: Any) -> list[OrganizationRef]:
    if not isinstance(data, dict):
        return []
    raw = data.get("organizations") or []
    return [
        OrganizationRef(id=str(org["id"]), name=org.get("name") or "", slug=org.get("slug"))
        for org in raw
        if isinstance(org, dict) and org.get("id")
    ]


# Global resolver instance
_resolver: Optional[ConfigurationResolver] = None


def get_resolver() -> ConfigurationResolver:
    """Get the global configuration resolver instance."""
    global _resolver
    if _resolver is None:
        _resolver = ConfigurationResolver()
    return _resolver
