"""Webhook subscriptions - which event types an endpoint receives."""

from typing import Any, Optional

from hookbase_domains.base import (
    CamelRecord,
    Handler,
    HookbaseAdapter,
    boolean,
    choice,
    flag,
    limit_and_cursor,
    pick,
    string,
)
from hookbase_shared.models import ExecutionContext, ExecutionType

LABEL_FILTER_MODES = ["all", "any"]

LABEL_FILTERS_DESCRIPTION = (
    'Label filters to match against event labels (e.g., {"environment": "production"} '
    'or {"region": ["us-east", "us-west"]})'
)


def label_filters(description: str, nullable: bool = False) -> dict[str, Any]:
    """Schema for a map of label name to one value or a list of values."""
    return {
        "type": ["object", "null"] if nullable else "object",
        "additionalProperties": {
            "anyOf": [
                {"type": "string"},
                {"type": "array", "items": {"type": "string"}},
            ],
        },
        "description": description,
    }


class Subscription(CamelRecord):
    id: str
    endpoint_id: Optional[str] = None
    event_type_id: Optional[str] = None
    filter_expression: Optional[str] = None
    label_filters: Optional[Any] = None
    label_filter_mode: Optional[str] = None
    transform_id: Optional[str] = None
    is_enabled: Optional[Any] = None
    endpoint_url: Optional[str] = None
    event_type_name: Optional[str] = None
    event_type_display_name: Optional[str] = None
    application_id: Optional[str] = None
    application_name: Optional[str] = None
    endpoint: Optional[Any] = None
    event_type: Optional[Any] = None
    application: Optional[Any] = None
    created_at: Optional[str] = None
    created_by: Optional[str] = None

    def _base(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "endpointId": self.endpoint_id,
            "eventTypeId": self.event_type_id,
            "filterExpression": self.filter_expression,
            "labelFilters": self.label_filters,
            "labelFilterMode": self.label_filter_mode,
            "transformId": self.transform_id,
            "isEnabled": flag(self.is_enabled),
        }

    def summary(self) -> dict[str, Any]:
        return {
            **self._base(),
            "endpointUrl": self.endpoint_url,
            "eventTypeName": self.event_type_name,
            "eventTypeDisplayName": self.event_type_display_name,
            "applicationId": self.application_id,
            "applicationName": self.application_name,
            "createdAt": self.created_at,
        }

    def detail(self) -> dict[str, Any]:
        return {
            **self._base(),
            "endpoint": self.endpoint,
            "eventType": self.event_type,
            "application": self.application,
            "createdAt": self.created_at,
            "createdBy": self.created_by,
        }


class SubscriptionsAdapter(HookbaseAdapter):
    """Outbound event type subscriptions."""

    domain = "subscriptions"

    def _define_tools(self) -> None:
        self._tool(
            "hookbase_list_subscriptions",
            "List webhook subscriptions. Subscriptions connect endpoints to event types they should receive.",
            {
                "endpoint_id": string("Filter by endpoint ID"),
                "event_type_id": string("Filter by event type ID"),
                "application_id": string("Filter by application ID"),
                "is_enabled": boolean("Filter by enabled status"),
                **limit_and_cursor(),
            },
        )

        self._tool(
            "hookbase_get_subscription",
            "Get detailed information about a webhook subscription.",
            {"subscription_id": string("The ID of the subscription")},
            required=["subscription_id"],
        )

        self._tool(
            "hookbase_create_subscription",
            "Create a subscription to connect an endpoint to an event type. The endpoint will receive "
            "events of this type. Use label_filters to only receive events with matching labels.",
            {
                "endpoint_id": string("The endpoint ID to subscribe"),
                "event_type_id": string("The event type ID to subscribe to"),
                "filter_expression": string("JSONata expression to filter events"),
                "label_filters": label_filters(LABEL_FILTERS_DESCRIPTION),
                "label_filter_mode": choice(
                    LABEL_FILTER_MODES,
                    'Filter mode: "all" requires all filters to match (AND), "any" requires at least '
                    'one filter to match (OR). Default: "all"',
                ),
                "transform_id": string("Transform ID to modify payload before delivery"),
                "is_enabled": boolean("Enable the subscription (default true)"),
            },
            required=["endpoint_id", "event_type_id"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_update_subscription",
            "Update a webhook subscription.",
            {
                "subscription_id": string("The ID of the subscription to update"),
                "filter_expression": string("New filter expression"),
                "label_filters": label_filters(
                    "Label filters to match against event labels (null to remove)", nullable=True
                ),
                "label_filter_mode": choice(
                    LABEL_FILTER_MODES, 'Filter mode: "all" (AND) or "any" (OR)', nullable=True
                ),
                "transform_id": string("New transform ID"),
                "is_enabled": boolean("Enable or disable the subscription"),
            },
            required=["subscription_id"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_delete_subscription",
            "Delete a webhook subscription. The endpoint will no longer receive events of this type.",
            {"subscription_id": string("The ID of the subscription to delete")},
            required=["subscription_id"],
            execution_type=ExecutionType.WRITE,
        )

    @property
    def handlers(self) -> dict[str, Handler]:
        return {
            "hookbase_list_subscriptions": self._list_subscriptions,
            "hookbase_get_subscription": self._get_subscription,
            "hookbase_create_subscription": self._create_subscription,
            "hookbase_update_subscription": self._update_subscription,
            "hookbase_delete_subscription": self._delete_subscription,
        }

    async def _list_subscriptions(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        params = {
            "endpointId": args.get("endpoint_id"),
            "eventTypeId": args.get("event_type_id"),
            "applicationId": args.get("application_id"),
            "isEnabled": args.get("is_enabled"),
            "limit": args.get("limit"),
            "cursor": args.get("cursor"),
        }
        data = self._unwrap(await self.client.get("/webhook-subscriptions", params))
        return {
            "subscriptions": [s.summary() for s in Subscription.parse_many(data.get("data"))],
            "pagination": data.get("pagination"),
        }

    async def _get_subscription(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.get(f"/webhook-subscriptions/{args['subscription_id']}"))
        subscription = Subscription.parse(data.get("data"))
        return {"subscription": subscription.detail() if subscription else None}

    async def _create_subscription(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        body = {"endpointId": args["endpoint_id"], "eventTypeId": args["event_type_id"]}
        body.update(pick(args, {
            "filter_expression": "filterExpression",
            "label_filters": "labelFilters",
            "label_filter_mode": "labelFilterMode",
            "transform_id": "transformId",
            "is_enabled": "isEnabled",
        }))

        data = self._unwrap(await self.client.post("/webhook-subscriptions", body))
        return {"message": "Subscription created successfully", "subscription": data.get("data")}

    async def _update_subscription(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        body = pick(args, {
            "filter_expression": "filterExpression",
            "label_filters": "labelFilters",
            "label_filter_mode": "labelFilterMode",
            "transform_id": "transformId",
            "is_enabled": "isEnabled",
        })
        data = self._unwrap(await self.client.patch(f"/webhook-subscriptions/{args['subscription_id']}", body))
        return {"message": "Subscription updated successfully", "subscription": data.get("data")}

    async def _delete_subscription(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        self._unwrap(await self.client.delete(f"/webhook-subscriptions/{args['subscription_id']}"))
        return {"message": "Subscription deleted successfully"}
