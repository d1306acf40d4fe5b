"""Event types - the kinds of events that can be sent via outbound webhooks."""

from typing import Any, Optional

from pydantic import Field

from hookbase_domains.base import (
    CamelRecord,
    Handler,
    HookbaseAdapter,
    boolean,
    flag,
    limit_and_cursor,
    pick,
    string,
)
from hookbase_shared.models import ExecutionContext, ExecutionType


class EventType(CamelRecord):
    id: str
    name: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    schema_: Optional[Any] = Field(default=None, alias="schema")
    schema_version: Optional[Any] = None
    example_payload: Optional[Any] = None
    documentation_url: Optional[str] = None
    is_enabled: Optional[Any] = None
    is_deprecated: Optional[Any] = None
    deprecated_at: Optional[str] = None
    deprecated_message: Optional[str] = None
    subscription_count: Optional[Any] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "displayName": self.display_name,
            "description": self.description,
            "category": self.category,
            "isEnabled": flag(self.is_enabled),
            "isDeprecated": flag(self.is_deprecated),
            "subscriptionCount": self.subscription_count,
            "createdAt": self.created_at,
        }

    def detail(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "displayName": self.display_name,
            "description": self.description,
            "category": self.category,
            "schema": self.schema_,
            "schemaVersion": self.schema_version,
            "examplePayload": self.example_payload,
            "documentationUrl": self.documentation_url,
            "isEnabled": flag(self.is_enabled),
            "isDeprecated": flag(self.is_deprecated),
            "deprecatedAt": self.deprecated_at,
            "deprecatedMessage": self.deprecated_message,
            "subscriptionCount": self.subscription_count,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


EVENT_TYPE_FIELDS = {
    "display_name": "displayName",
    "description": "description",
    "category": "category",
    "schema": "schema",
    "example_payload": "examplePayload",
    "documentation_url": "documentationUrl",
    "is_enabled": "isEnabled",
}


class EventTypesAdapter(HookbaseAdapter):
    """Outbound event type catalogue."""

    domain = "event_types"

    def _define_tools(self) -> None:
        self._tool(
            "hookbase_list_event_types",
            "List event types defined in the organization. Event types define the different kinds "
            "of webhook events that can be sent.",
            {
                "category": string("Filter by category"),
                "is_enabled": boolean("Filter by enabled status"),
                "search": string("Search by event type name"),
                **limit_and_cursor(),
            },
        )

        self._tool(
            "hookbase_get_event_type",
            "Get detailed information about an event type, including its JSON schema and example payload.",
            {"event_type_id": string("The ID of the event type")},
            required=["event_type_id"],
        )

        self._tool(
            "hookbase_create_event_type",
            "Create a new event type. Event types define the structure and meaning of webhook events.",
            {
                "name": string('Event type name (lowercase, dot-separated, e.g., "order.created")'),
                "display_name": string("Human-readable name"),
                "description": string("Description of when this event is triggered"),
                "category": string('Category for grouping (e.g., "orders", "users")'),
                "schema": string("JSON Schema for payload validation"),
                "example_payload": string("Example payload as JSON string"),
                "documentation_url": string("URL to event documentation"),
                "is_enabled": boolean("Enable the event type (default true)"),
            },
            required=["name"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_update_event_type",
            "Update an event type. Use is_deprecated to mark an event type as deprecated.",
            {
                "event_type_id": string("The ID of the event type to update"),
                "display_name": string("New human-readable name"),
                "description": string("New description"),
                "category": string("New category (null to remove)", nullable=True),
                "schema": string("New JSON Schema (null to remove)", nullable=True),
                "example_payload": string("New example payload (null to remove)", nullable=True),
                "documentation_url": string("New documentation URL (null to remove)", nullable=True),
                "is_enabled": boolean("Enable or disable the event type"),
                "is_deprecated": boolean("Mark as deprecated"),
                "deprecated_message": string("Message explaining deprecation"),
            },
            required=["event_type_id"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_delete_event_type",
            "Delete an event type. This also removes all subscriptions to this event type.",
            {"event_type_id": string("The ID of the event type to delete")},
            required=["event_type_id"],
            execution_type=ExecutionType.WRITE,
        )

    @property
    def handlers(self) -> dict[str, Handler]:
        return {
            "hookbase_list_event_types": self._list_event_types,
            "hookbase_get_event_type": self._get_event_type,
            "hookbase_create_event_type": self._create_event_type,
            "hookbase_update_event_type": self._update_event_type,
            "hookbase_delete_event_type": self._delete_event_type,
        }

    async def _list_event_types(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        params = {
            "category": args.get("category"),
            "isEnabled": args.get("is_enabled"),
            "search": args.get("search"),
            "limit": args.get("limit"),
            "cursor": args.get("cursor"),
        }
        data = self._unwrap(await self.client.get("/event-types", params))
        return {
            "eventTypes": [et.summary() for et in EventType.parse_many(data.get("data"))],
            "pagination": data.get("pagination"),
        }

    async def _get_event_type(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.get(f"/event-types/{args['event_type_id']}"))
        event_type = EventType.parse(data.get("data"))
        return {"eventType": event_type.detail() if event_type else None}

    async def _create_event_type(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        body = {"name": args["name"]}
        body.update(pick(args, EVENT_TYPE_FIELDS))

        data = self._unwrap(await self.client.post("/event-types", body))
        return {"message": "Event type created successfully", "eventType": data.get("data")}

    async def _update_event_type(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        body = pick(args, {
            **EVENT_TYPE_FIELDS,
            "is_deprecated": "isDeprecated",
            "deprecated_message": "deprecatedMessage",
        })
        data = self._unwrap(await self.client.patch(f"/event-types/{args['event_type_id']}", body))
        return {"message": "Event type updated successfully", "eventType": data.get("data")}

    async def _delete_event_type(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        self._unwrap(await self.client.delete(f"/event-types/{args['event_type_id']}"))
        return {"message": "Event type deleted successfully"}
