"""Transport dispatcher for the Hookbase REST API.

Every remote operation funnels through ``HookbaseClient.dispatch``: one
authenticated HTTP round-trip, JSON in and out, and a uniform
``ApiResponse`` envelope for success, remote errors and transport failures.
Nothing is retried here; replays are explicit tool calls.
"""

from typing import Any, Optional

import httpx

from hookbase_shared.errors import ConfigurationNotInitializedError
from hookbase_shared.logging import get_logger
from hookbase_shared.models import ApiResponse, HookbaseConfig

logger = get_logger(__name__)

DEFAULT_ERROR = "Request failed"


def clean_query(params: Optional[dict[str, Any]]) -> dict[str, str]:
    """Drop unset query values and render the rest the way the API expects."""
    query: dict[str, str] = {}
    for key, value in (params or {}).items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            query[key] = "true" if value else "false"
        else:
            query[key] = str(value)
    return query


def extract_error_message(payload: Any) -> Optional[str]:
    """Pull the server-supplied message out of an error body, if any."""
    if not isinstance(payload, dict):
        return None
    for key in ("error", "message"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
        if isinstance(value, dict) and isinstance(value.get("message"), str):
            return value["message"]
    return None


class HookbaseClient:
    """
    Authenticated HTTP client for the Hookbase API.

    Built either from a resolved ``HookbaseConfig`` (the normal case) or,
    during bootstrap, from just a URL and a key. A client without an
    organization can reach unscoped endpoints such as ``/api/auth/me`` but
    refuses to build organization-scoped paths.

    The underlying ``httpx.AsyncClient`` is shared by all concurrent calls.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        org_id: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        """
        Initialize the client.

        Args:
            api_url: Hookbase API base URL
            api_key: Bearer credential
            org_id: Resolved organization, or None for a bootstrap client
            transport: Optional httpx transport (used by tests)
        """
        self.api_url = api_url.rstrip("/")
        self._api_key = api_key
        self.org_id = org_id
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_config(
        cls,
        config: HookbaseConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "HookbaseClient":
        """Create a client bound to a resolved configuration."""
        return cls(
            api_url=config.api_url,
            api_key=config.api_key,
            org_id=config.org_id,
            transport=transport,
        )

    def _get_headers(self) -> dict[str, str]:
        """Get request headers including authentication."""
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.api_url,
                headers=self._get_headers(),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HookbaseClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def org_path(self, suffix: str) -> str:
        """
        Prefix a resource path with the organization scope.

        Raises:
            ConfigurationNotInitializedError: If no organization was resolved
        """
        if self.org_id is None:
            raise ConfigurationNotInitializedError()
        return f"/api/organizations/{self.org_id}{suffix}"

    async def dispatch(
        self,
        method: str,
        path: str,
        body: Optional[Any] = None,
        params: Optional[dict[str, Any]] = None,
        fallback_error: str = DEFAULT_ERROR
    ) -> ApiResponse:
        """
        Perform exactly one HTTP round-trip.

        Args:
            method: HTTP verb
            path: Absolute API path (already organization-scoped if needed)
            body: Optional JSON-serializable request body
            params: Optional query parameters; None/empty values are dropped
            fallback_error: Message used when an error body carries none

        Returns:
            ApiResponse with either ``data`` or ``error``; ``status`` is 0
            when no usable response was received
        """
        try:
            client = await self._get_client()
            response = await client.request(
                method,
                path,
                json=body,
                params=clean_query(params),
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Hookbase request failed", method=method, path=path, error=str(e))
            return ApiResponse(status=0, error=str(e) or e.__class__.__name__)

        logger.debug(
            "Hookbase request",
            method=method,
            path=path,
            status=response.status_code
        )

        payload: Any = None
        parse_error: Optional[str] = None
        if response.content:
            try:
                payload = response.json()
            except ValueError as e:
                parse_error = f"Invalid JSON response: {e}"

        if not response.is_success:
            return ApiResponse(
                status=response.status_code,
                error=extract_error_message(payload) or fallback_error,
            )

        if parse_error:
            return ApiResponse(status=0, error=parse_error)

        return ApiResponse(
            status=response.status_code,
            data=payload if payload is not None else {},
        )

    async def get(self, suffix: str, params: Optional[dict[str, Any]] = None) -> ApiResponse:
        """GET an organization-scoped path."""
        return await self.dispatch("GET", self.org_path(suffix), params=params)

    async def post(self, suffix: str, body: Optional[Any] = None) -> ApiResponse:
        """POST to an organization-scoped path."""
        return await self.dispatch("POST", self.org_path(suffix), body=body)

    async def patch(self, suffix: str, body: Optional[Any] = None) -> ApiResponse:
        """PATCH an organization-scoped path."""
        return await self.dispatch("PATCH", self.org_path(suffix), body=body)

    async def delete(self, suffix: str) -> ApiResponse:
        """DELETE an organization-scoped path."""
        return await self.dispatch("DELETE", self.org_path(suffix))
