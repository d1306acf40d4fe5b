"""Destinations - where received webhooks are forwarded to."""

import re
from typing import Any, Optional

from hookbase_domains.base import (
    HTTP_METHODS,
    Handler,
    HookbaseAdapter,
    RemoteRecord,
    boolean,
    choice,
    flag,
    number,
    pick,
    string,
    string_map,
    url,
)
from hookbase_shared.models import ExecutionContext, ExecutionType

AUTH_TYPES = ["none", "basic", "bearer", "api_key", "custom_header"]

DEFAULT_TIMEOUT_MS = 30000


def slugify(name: str) -> str:
    """Derive a URL-safe slug from a display name."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


class Destination(RemoteRecord):
    id: str
    name: Optional[str] = None
    slug: Optional[str] = None
    url: Optional[str] = None
    method: Optional[str] = None
    headers: Optional[Any] = None
    auth_type: Optional[str] = None
    auth_config: Optional[Any] = None
    timeout_ms: Optional[Any] = None
    rate_limit_per_minute: Optional[Any] = None
    mock_mode: Optional[Any] = None
    is_active: Optional[Any] = None
    delivery_count: Optional[Any] = None
    success_count: Optional[Any] = None
    failure_count: Optional[Any] = None
    created_at: Optional[str] = None

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "url": self.url,
            "method": self.method,
            "authType": self.auth_type,
            "isActive": flag(self.is_active),
            "deliveryCount": self.delivery_count or 0,
            "successCount": self.success_count or 0,
            "failureCount": self.failure_count or 0,
            "createdAt": self.created_at,
        }

    def detail(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "url": self.url,
            "method": self.method,
            "headers": self.headers,
            "authType": self.auth_type,
            "authConfig": self.auth_config,
            "timeoutMs": self.timeout_ms,
            "rateLimitPerMinute": self.rate_limit_per_minute,
            "mockMode": self.mock_mode,
            "isActive": flag(self.is_active),
            "deliveryCount": self.delivery_count or 0,
            "successCount": self.success_count or 0,
            "failureCount": self.failure_count or 0,
            "createdAt": self.created_at,
        }


DESTINATION_FIELDS = {
    "name": "name",
    "url": "url",
    "method": "method",
    "headers": "headers",
    "auth_type": "authType",
    "auth_config": "authConfig",
    "timeout_ms": "timeoutMs",
    "rate_limit_per_minute": "rateLimitPerMinute",
    "is_active": "isActive",
}


class DestinationsAdapter(HookbaseAdapter):
    """Inbound webhook destinations."""

    domain = "destinations"

    def _define_tools(self) -> None:
        self._tool(
            "hookbase_list_destinations",
            "List all webhook destinations in the organization. Destinations are endpoints where "
            "webhooks are forwarded to.",
        )

        self._tool(
            "hookbase_get_destination",
            "Get detailed information about a specific destination, including authentication configuration.",
            {"destination_id": string("The ID of the destination to retrieve")},
            required=["destination_id"],
        )

        self._tool(
            "hookbase_create_destination",
            "Create a new webhook destination. Destinations are endpoints where webhooks are "
            "forwarded after processing.",
            {
                "name": string("Display name for the destination"),
                "url": url("The URL to forward webhooks to"),
                "method": choice(HTTP_METHODS, "HTTP method (default: POST)"),
                "headers": string_map("Custom headers to include in requests"),
                "auth_type": choice(AUTH_TYPES, "Authentication type (default: none)"),
                "auth_config": string_map(
                    "Auth configuration (username/password for basic, token for bearer, etc.)"
                ),
                "timeout_ms": number("Request timeout in milliseconds (default: 30000)"),
                "rate_limit_per_minute": number("Maximum requests per minute"),
            },
            required=["name", "url"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_update_destination",
            "Update an existing destination configuration.",
            {
                "destination_id": string("The ID of the destination to update"),
                "name": string("New display name"),
                "url": url("New URL"),
                "method": choice(HTTP_METHODS, "HTTP method"),
                "headers": string_map("Custom headers"),
                "auth_type": choice(AUTH_TYPES, "Authentication type"),
                "auth_config": string_map("Auth configuration"),
                "timeout_ms": number("Request timeout in milliseconds"),
                "rate_limit_per_minute": number("Maximum requests per minute"),
                "is_active": boolean("Enable or disable the destination"),
            },
            required=["destination_id"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_delete_destination",
            "Delete a destination. This will also delete all associated routes.",
            {"destination_id": string("The ID of the destination to delete")},
            required=["destination_id"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_test_destination",
            "Test connectivity to a destination by sending a test request. Returns response status and timing.",
            {"destination_id": string("The ID of the destination to test")},
            required=["destination_id"],
            execution_type=ExecutionType.WRITE,
        )

    @property
    def handlers(self) -> dict[str, Handler]:
        return {
            "hookbase_list_destinations": self._list_destinations,
            "hookbase_get_destination": self._get_destination,
            "hookbase_create_destination": self._create_destination,
            "hookbase_update_destination": self._update_destination,
            "hookbase_delete_destination": self._delete_destination,
            "hookbase_test_destination": self._test_destination,
        }

    async def _list_destinations(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.get("/destinations"))
        return {"destinations": [d.summary() for d in Destination.parse_many(data.get("destinations"))]}

    async def _get_destination(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.get(f"/destinations/{args['destination_id']}"))
        destination = Destination.parse(data.get("destination"))
        return {"destination": destination.detail() if destination else None}

    async def _create_destination(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        body = {
            "name": args["name"],
            "slug": slugify(args["name"]),
            "url": args["url"],
            "method": args.get("method") or "POST",
            "headers": args.get("headers"),
            "authType": args.get("auth_type") or "none",
            "authConfig": args.get("auth_config"),
            "timeoutMs": args.get("timeout_ms") or DEFAULT_TIMEOUT_MS,
            "rateLimitPerMinute": args.get("rate_limit_per_minute"),
        }
        body = {k: v for k, v in body.items() if v is not None}

        data = self._unwrap(await self.client.post("/destinations", body))
        destination = Destination.parse(data.get("destination"))
        return {
            "message": "Destination created successfully",
            "destination": {
                "id": destination.id,
                "name": destination.name,
                "slug": destination.slug,
                "url": destination.url,
            } if destination else None,
        }

    async def _update_destination(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        body = pick(args, DESTINATION_FIELDS)
        data = self._unwrap(await self.client.patch(f"/destinations/{args['destination_id']}", body))
        return {"message": "Destination updated successfully", "destination": data.get("destination")}

    async def _delete_destination(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        self._unwrap(await self.client.delete(f"/destinations/{args['destination_id']}"))
        return {"message": "Destination deleted successfully"}

    async def _test_destination(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.post(f"/destinations/{args['destination_id']}/test"))
        return {
            "success": data.get("success"),
            "statusCode": data.get("statusCode"),
            "responseTime": data.get("responseTime"),
            "responseBody": data.get("responseBody"),
            "error": data.get("error"),
        }
