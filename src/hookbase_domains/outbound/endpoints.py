"""Webhook endpoints - URLs that receive outbound deliveries."""

from typing import Any, Optional

from hookbase_domains.base import (
    CamelRecord,
    Handler,
    HookbaseAdapter,
    as_object,
    boolean,
    choice,
    flag,
    limit_and_cursor,
    number,
    pick,
    set_inverted,
    string,
    url,
)
from hookbase_shared.models import ExecutionContext, ExecutionType

CIRCUIT_STATES = ["closed", "open", "half_open"]

SECRET_WARNING = "Save the signing secret now. It will not be shown again."

HEADER_LIST_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "name": string("Header name"),
            "value": string("Header value"),
        },
        "required": ["name", "value"],
        "additionalProperties": False,
    },
}

CIRCUIT_FIELDS = {
    "circuit_failure_threshold": "circuitFailureThreshold",
    "circuit_success_threshold": "circuitSuccessThreshold",
    "circuit_cooldown_seconds": "circuitCooldownSeconds",
}


def header_list(description: str) -> dict[str, Any]:
    return {**HEADER_LIST_SCHEMA, "description": description}


class Endpoint(CamelRecord):
    id: str
    application_id: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    secret_prefix: Optional[str] = None
    has_secret: Optional[Any] = None
    secret: Optional[str] = None
    secret_version: Optional[Any] = None
    headers: Optional[Any] = None
    timeout_seconds: Optional[Any] = None
    is_disabled: Optional[Any] = None
    disabled_at: Optional[str] = None
    disabled_reason: Optional[str] = None
    circuit_state: Optional[str] = None
    circuit_opened_at: Optional[str] = None
    circuit_failure_count: Optional[Any] = None
    circuit_failure_threshold: Optional[Any] = None
    circuit_success_threshold: Optional[Any] = None
    circuit_cooldown_seconds: Optional[Any] = None
    total_messages: Optional[Any] = None
    total_successes: Optional[Any] = None
    total_failures: Optional[Any] = None
    avg_response_time_ms: Optional[Any] = None
    last_success_at: Optional[str] = None
    last_failure_at: Optional[str] = None
    last_response_status: Optional[Any] = None
    is_verified: Optional[Any] = None
    verified_at: Optional[str] = None
    subscription_count: Optional[Any] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_enabled(self) -> bool:
        return not flag(self.is_disabled)

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "applicationId": self.application_id,
            "url": self.url,
            "description": self.description,
            "isEnabled": self.is_enabled,
            "circuitState": self.circuit_state,
            "totalMessages": self.total_messages or 0,
            "totalSuccesses": self.total_successes or 0,
            "totalFailures": self.total_failures or 0,
            "avgResponseTimeMs": self.avg_response_time_ms,
            "subscriptionCount": self.subscription_count,
            "createdAt": self.created_at,
        }

    def detail(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "applicationId": self.application_id,
            "url": self.url,
            "description": self.description,
            "secretPrefix": self.secret_prefix,
            "hasSecret": self.has_secret,
            "secretVersion": self.secret_version,
            "headers": self.headers,
            "timeoutSeconds": self.timeout_seconds,
            "isEnabled": self.is_enabled,
            "disabledAt": self.disabled_at,
            "disabledReason": self.disabled_reason,
            "circuitState": self.circuit_state,
            "circuitOpenedAt": self.circuit_opened_at,
            "circuitFailureCount": self.circuit_failure_count,
            "circuitFailureThreshold": self.circuit_failure_threshold,
            "circuitSuccessThreshold": self.circuit_success_threshold,
            "circuitCooldownSeconds": self.circuit_cooldown_seconds,
            "totalMessages": self.total_messages or 0,
            "totalSuccesses": self.total_successes or 0,
            "totalFailures": self.total_failures or 0,
            "avgResponseTimeMs": self.avg_response_time_ms,
            "lastSuccessAt": self.last_success_at,
            "lastFailureAt": self.last_failure_at,
            "lastResponseStatus": self.last_response_status,
            "isVerified": flag(self.is_verified),
            "verifiedAt": self.verified_at,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


class EndpointsAdapter(HookbaseAdapter):
    """Outbound webhook endpoints and their circuit breakers."""

    domain = "endpoints"

    def _define_tools(self) -> None:
        self._tool(
            "hookbase_list_endpoints",
            "List webhook endpoints. Endpoints are URLs that receive webhook deliveries.",
            {
                "application_id": string("Filter by application ID"),
                "is_enabled": boolean("Filter by enabled status (false = disabled)"),
                "circuit_state": choice(CIRCUIT_STATES, "Filter by circuit breaker state"),
                **limit_and_cursor(),
            },
        )

        self._tool(
            "hookbase_get_endpoint",
            "Get detailed information about a webhook endpoint, including circuit breaker state "
            "and delivery statistics.",
            {"endpoint_id": string("The ID of the endpoint")},
            required=["endpoint_id"],
        )

        self._tool(
            "hookbase_create_endpoint",
            "Create a new webhook endpoint. The signing secret is only returned once on creation - "
            "save it securely.",
            {
                "application_id": string("The application ID this endpoint belongs to"),
                "url": url("The HTTPS URL to receive webhooks"),
                "description": string("Description of the endpoint"),
                "headers": header_list("Custom headers to include in requests"),
                "timeout_seconds": number("Request timeout in seconds (default 30)"),
                "circuit_failure_threshold": number("Failures before opening circuit (default 5)"),
                "circuit_success_threshold": number("Successes to close circuit (default 2)"),
                "circuit_cooldown_seconds": number("Cooldown before half-open (default 60)"),
            },
            required=["application_id", "url"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_update_endpoint",
            "Update a webhook endpoint configuration.",
            {
                "endpoint_id": string("The ID of the endpoint to update"),
                "url": url("New HTTPS URL"),
                "description": string("New description"),
                "headers": header_list("Updated custom headers"),
                "timeout_seconds": number("Request timeout in seconds"),
                "is_enabled": boolean("Enable or disable the endpoint"),
                "disabled_reason": string("Reason for disabling (when is_enabled=false)"),
                "circuit_failure_threshold": number("Failures before opening circuit"),
                "circuit_success_threshold": number("Successes to close circuit"),
                "circuit_cooldown_seconds": number("Cooldown before half-open"),
            },
            required=["endpoint_id"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_delete_endpoint",
            "Delete a webhook endpoint. This also removes all subscriptions for this endpoint.",
            {"endpoint_id": string("The ID of the endpoint to delete")},
            required=["endpoint_id"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_rotate_endpoint_secret",
            "Rotate the signing secret for an endpoint. Returns the new secret (save it securely). "
            "Old secret remains valid during grace period.",
            {
                "endpoint_id": string("The ID of the endpoint"),
                "grace_period_seconds": number("How long old secret remains valid (default 3600 = 1 hour)"),
            },
            required=["endpoint_id"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_reset_endpoint_circuit",
            "Reset the circuit breaker for an endpoint. Use this to immediately re-enable "
            "deliveries after fixing an issue.",
            {"endpoint_id": string("The ID of the endpoint")},
            required=["endpoint_id"],
            execution_type=ExecutionType.WRITE,
        )

    @property
    def handlers(self) -> dict[str, Handler]:
        return {
            "hookbase_list_endpoints": self._list_endpoints,
            "hookbase_get_endpoint": self._get_endpoint,
            "hookbase_create_endpoint": self._create_endpoint,
            "hookbase_update_endpoint": self._update_endpoint,
            "hookbase_delete_endpoint": self._delete_endpoint,
            "hookbase_rotate_endpoint_secret": self._rotate_endpoint_secret,
            "hookbase_reset_endpoint_circuit": self._reset_endpoint_circuit,
        }

    async def _list_endpoints(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        params = {
            "applicationId": args.get("application_id"),
            "circuitState": args.get("circuit_state"),
            "limit": args.get("limit"),
            "cursor": args.get("cursor"),
        }
        set_inverted(params, args, "is_enabled", "isDisabled")

        data = self._unwrap(await self.client.get("/webhook-endpoints", params))
        return {
            "endpoints": [e.summary() for e in Endpoint.parse_many(data.get("data"))],
            "pagination": data.get("pagination"),
        }

    async def _get_endpoint(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.get(f"/webhook-endpoints/{args['endpoint_id']}"))
        endpoint = Endpoint.parse(data.get("data"))
        return {"endpoint": endpoint.detail() if endpoint else None}

    async def _create_endpoint(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        body = {"applicationId": args["application_id"], "url": args["url"]}
        body.update(pick(args, {
            "description": "description",
            "headers": "headers",
            "timeout_seconds": "timeoutSeconds",
            **CIRCUIT_FIELDS,
        }))

        data = self._unwrap(await self.client.post("/webhook-endpoints", body))
        created = as_object(data.get("data"))
        return {
            "message": "Endpoint created successfully",
            "warning": data.get("warning") or SECRET_WARNING,
            "endpoint": {
                "id": created.get("id"),
                "url": created.get("url"),
                "secret": created.get("secret"),
            },
        }

    async def _update_endpoint(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        body = pick(args, {
            "url": "url",
            "description": "description",
            "headers": "headers",
            "timeout_seconds": "timeoutSeconds",
            "disabled_reason": "disabledReason",
            **CIRCUIT_FIELDS,
        })
        set_inverted(body, args, "is_enabled", "isDisabled")

        data = self._unwrap(await self.client.patch(f"/webhook-endpoints/{args['endpoint_id']}", body))
        return {"message": "Endpoint updated successfully", "endpoint": data.get("data")}

    async def _delete_endpoint(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        self._unwrap(await self.client.delete(f"/webhook-endpoints/{args['endpoint_id']}"))
        return {"message": "Endpoint deleted successfully"}

    async def _rotate_endpoint_secret(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        body = pick(args, {"grace_period_seconds": "gracePeriodSeconds"})
        data = self._unwrap(await self.client.post(f"/webhook-endpoints/{args['endpoint_id']}/rotate-secret", body))
        return {
            "message": "Secret rotated successfully. Save the new secret now.",
            "secret": data.get("secret"),
            "secretVersion": data.get("secretVersion"),
            "previousSecretExpiresAt": data.get("previousSecretExpiresAt"),
        }

    async def _reset_endpoint_circuit(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.post(f"/webhook-endpoints/{args['endpoint_id']}/reset-circuit"))
        return {
            "message": "Circuit breaker reset successfully",
            "circuitState": data.get("circuitState"),
        }
