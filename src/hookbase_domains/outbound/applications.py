"""Webhook applications - a customer or integration receiving outbound webhooks."""

from typing import Any, Optional

from hookbase_domains.base import (
    CamelRecord,
    Handler,
    HookbaseAdapter,
    any_map,
    boolean,
    flag,
    limit_and_cursor,
    number,
    pick,
    set_inverted,
    string,
)
from hookbase_shared.models import ExecutionContext, ExecutionType


class Application(CamelRecord):
    id: str
    name: Optional[str] = None
    external_id: Optional[str] = None
    metadata: Optional[Any] = None
    rate_limit_per_second: Optional[Any] = None
    rate_limit_per_minute: Optional[Any] = None
    rate_limit_per_hour: Optional[Any] = None
    is_disabled: Optional[Any] = None
    disabled_at: Optional[str] = None
    disabled_reason: Optional[str] = None
    total_endpoints: Optional[Any] = None
    endpoint_count: Optional[Any] = None
    total_messages_sent: Optional[Any] = None
    total_messages_failed: Optional[Any] = None
    last_event_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_enabled(self) -> bool:
        return not flag(self.is_disabled)

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "externalId": self.external_id,
            "isEnabled": self.is_enabled,
            "totalEndpoints": self.total_endpoints or 0,
            "totalMessagesSent": self.total_messages_sent or 0,
            "totalMessagesFailed": self.total_messages_failed or 0,
            "rateLimitPerSecond": self.rate_limit_per_second,
            "rateLimitPerMinute": self.rate_limit_per_minute,
            "rateLimitPerHour": self.rate_limit_per_hour,
            "createdAt": self.created_at,
        }

    def detail(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "externalId": self.external_id,
            "metadata": self.metadata,
            "isEnabled": self.is_enabled,
            "disabledAt": self.disabled_at,
            "disabledReason": self.disabled_reason,
            "totalEndpoints": self.total_endpoints or 0,
            "endpointCount": self.endpoint_count,
            "totalMessagesSent": self.total_messages_sent or 0,
            "totalMessagesFailed": self.total_messages_failed or 0,
            "lastEventAt": self.last_event_at,
            "rateLimitPerSecond": self.rate_limit_per_second,
            "rateLimitPerMinute": self.rate_limit_per_minute,
            "rateLimitPerHour": self.rate_limit_per_hour,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


RATE_LIMIT_FIELDS = {
    "rate_limit_per_second": "rateLimitPerSecond",
    "rate_limit_per_minute": "rateLimitPerMinute",
    "rate_limit_per_hour": "rateLimitPerHour",
}


class ApplicationsAdapter(HookbaseAdapter):
    """Outbound webhook applications."""

    domain = "applications"

    def _define_tools(self) -> None:
        self._tool(
            "hookbase_list_applications",
            "List webhook applications in the organization. Applications group endpoints that "
            "receive outbound webhooks for a customer or integration.",
            {
                "search": string("Search by application name"),
                "is_enabled": boolean("Filter by enabled status (false = disabled)"),
                **limit_and_cursor(),
            },
        )

        self._tool(
            "hookbase_get_application",
            "Get detailed information about a specific webhook application, including its "
            "endpoints and delivery statistics.",
            {"application_id": string("The ID of the webhook application")},
            required=["application_id"],
        )

        self._tool(
            "hookbase_create_application",
            "Create a new webhook application. Applications represent a customer or integration "
            "that will receive webhooks.",
            {
                "name": string("Display name for the application"),
                "external_id": string("Your system's ID for this customer/application"),
                "metadata": any_map("Custom metadata as key-value pairs"),
                "rate_limit_per_second": number("Max events per second (default 100)"),
                "rate_limit_per_minute": number("Max events per minute (default 1000)"),
                "rate_limit_per_hour": number("Max events per hour (default 10000)"),
            },
            required=["name"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_update_application",
            "Update a webhook application configuration.",
            {
                "application_id": string("The ID of the application to update"),
                "name": string("New display name"),
                "metadata": any_map("Updated metadata"),
                "rate_limit_per_second": number("Max events per second"),
                "rate_limit_per_minute": number("Max events per minute"),
                "rate_limit_per_hour": number("Max events per hour"),
                "is_enabled": boolean("Enable or disable the application"),
                "disabled_reason": string("Reason for disabling (when is_enabled=false)"),
            },
            required=["application_id"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_delete_application",
            "Delete a webhook application. This also deletes all endpoints and subscriptions for this application.",
            {"application_id": string("The ID of the application to delete")},
            required=["application_id"],
            execution_type=ExecutionType.WRITE,
        )

    @property
    def handlers(self) -> dict[str, Handler]:
        return {
            "hookbase_list_applications": self._list_applications,
            "hookbase_get_application": self._get_application,
            "hookbase_create_application": self._create_application,
            "hookbase_update_application": self._update_application,
            "hookbase_delete_application": self._delete_application,
        }

    async def _list_applications(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        params = {"search": args.get("search"), "limit": args.get("limit"), "cursor": args.get("cursor")}
        set_inverted(params, args, "is_enabled", "isDisabled")

        data = self._unwrap(await self.client.get("/webhook-applications", params))
        return {
            "applications": [a.summary() for a in Application.parse_many(data.get("data"))],
            "pagination": data.get("pagination"),
        }

    async def _get_application(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.get(f"/webhook-applications/{args['application_id']}"))
        application = Application.parse(data.get("data"))
        return {"application": application.detail() if application else None}

    async def _create_application(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        body = {"name": args["name"]}
        body.update(pick(args, {"external_id": "externalId", "metadata": "metadata", **RATE_LIMIT_FIELDS}))

        data = self._unwrap(await self.client.post("/webhook-applications", body))
        return {"message": "Application created successfully", "application": data.get("data")}

    async def _update_application(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        body = pick(args, {
            "name": "name",
            "metadata": "metadata",
            **RATE_LIMIT_FIELDS,
            "disabled_reason": "disabledReason",
        })
        set_inverted(body, args, "is_enabled", "isDisabled")

        data = self._unwrap(await self.client.patch(f"/webhook-applications/{args['application_id']}", body))
        return {"message": "Application updated successfully", "application": data.get("data")}

    async def _delete_application(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        self._unwrap(await self.client.delete(f"/webhook-applications/{args['application_id']}"))
        return {"message": "Application deleted successfully"}
