"""Routes - connect sources to destinations, optionally filtered."""

from typing import Any, Optional

from hookbase_domains.base import (
    Handler,
    HookbaseAdapter,
    RemoteRecord,
    boolean,
    flag,
    number,
    pick,
    string,
)
from hookbase_shared.models import ExecutionContext, ExecutionType

FILTER_OPERATORS = [
    "equals",
    "not_equals",
    "contains",
    "starts_with",
    "ends_with",
    "exists",
    "not_exists",
    "greater_than",
    "less_than",
    "regex",
]

FILTER_CONDITIONS_SCHEMA = {
    "type": "object",
    "description": "Inline filter conditions (alternative to filter_id)",
    "properties": {
        "logic": {
            "type": "string",
            "enum": ["AND", "OR"],
            "description": "How to combine conditions",
        },
        "conditions": {
            "type": "array",
            "description": "Filter conditions to evaluate",
            "items": {
                "type": "object",
                "properties": {
                    "field": string('JSON path to the field (e.g., "body.event", "headers.x-event-type")'),
                    "operator": {
                        "type": "string",
                        "enum": FILTER_OPERATORS,
                        "description": "Comparison operator for the filter condition",
                    },
                    "value": string("Value to compare against (not needed for exists/not_exists)"),
                },
                "required": ["field", "operator"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["logic", "conditions"],
    "additionalProperties": False,
}


class Route(RemoteRecord):
    id: str
    name: Optional[str] = None
    source_id: Optional[str] = None
    source_name: Optional[str] = None
    destination_id: Optional[str] = None
    destination_name: Optional[str] = None
    filter_id: Optional[str] = None
    transform_id: Optional[str] = None
    schema_id: Optional[str] = None
    priority: Optional[Any] = None
    is_active: Optional[Any] = None
    delivery_count: Optional[Any] = None
    created_at: Optional[str] = None

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "sourceId": self.source_id,
            "sourceName": self.source_name,
            "destinationId": self.destination_id,
            "destinationName": self.destination_name,
            "filterId": self.filter_id,
            "transformId": self.transform_id,
            "priority": self.priority,
            "isActive": flag(self.is_active),
            "deliveryCount": self.delivery_count or 0,
            "createdAt": self.created_at,
        }

    def detail(self) -> dict[str, Any]:
        output = self.summary()
        output["schemaId"] = self.schema_id
        return output


ROUTE_FIELDS = {
    "name": "name",
    "source_id": "sourceId",
    "destination_id": "destinationId",
    "filter_id": "filterId",
    "transform_id": "transformId",
    "priority": "priority",
    "is_active": "isActive",
}


class RoutesAdapter(HookbaseAdapter):
    """Inbound routing rules."""

    domain = "routes"

    def _define_tools(self) -> None:
        self._tool(
            "hookbase_list_routes",
            "List all routes in the organization. Routes connect sources to destinations and define "
            "how webhooks are processed.",
        )

        self._tool(
            "hookbase_get_route",
            "Get detailed information about a specific route, including filter and transform configuration.",
            {"route_id": string("The ID of the route to retrieve")},
            required=["route_id"],
        )

        self._tool(
            "hookbase_create_route",
            "Create a new route connecting a source to a destination. Optionally add filters to "
            "control which webhooks are forwarded.",
            {
                "name": string("Display name for the route"),
                "source_id": string("ID of the source to receive webhooks from"),
                "destination_id": string("ID of the destination to forward webhooks to"),
                "filter_id": string("ID of an existing filter to apply"),
                "filter_conditions": FILTER_CONDITIONS_SCHEMA,
                "transform_id": string("ID of a transform to apply to the payload"),
                "priority": number("Route priority (lower = higher priority, default: 0)"),
                "is_active": boolean("Whether the route is active (default: true)"),
            },
            required=["name", "source_id", "destination_id"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_update_route",
            "Update an existing route configuration.",
            {
                "route_id": string("The ID of the route to update"),
                "name": string("New display name"),
                "source_id": string("New source ID"),
                "destination_id": string("New destination ID"),
                "filter_id": string("Filter ID (set to null to remove)", nullable=True),
                "transform_id": string("Transform ID (set to null to remove)", nullable=True),
                "priority": number("Route priority"),
                "is_active": boolean("Enable or disable the route"),
            },
            required=["route_id"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_delete_route",
            "Delete a route.",
            {"route_id": string("The ID of the route to delete")},
            required=["route_id"],
            execution_type=ExecutionType.WRITE,
        )

    @property
    def handlers(self) -> dict[str, Handler]:
        return {
            "hookbase_list_routes": self._list_routes,
            "hookbase_get_route": self._get_route,
            "hookbase_create_route": self._create_route,
            "hookbase_update_route": self._update_route,
            "hookbase_delete_route": self._delete_route,
        }

    async def _list_routes(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.get("/routes"))
        return {"routes": [r.summary() for r in Route.parse_many(data.get("routes"))]}

    async def _get_route(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.get(f"/routes/{args['route_id']}"))
        route = Route.parse(data.get("route"))
        return {"route": route.detail() if route else None}

    async def _create_route(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        body = {
            "name": args["name"],
            "sourceId": args["source_id"],
            "destinationId": args["destination_id"],
            "filterId": args.get("filter_id"),
            "filterConditions": args.get("filter_conditions"),
            "transformId": args.get("transform_id"),
            "priority": args.get("priority", 0),
            "isActive": args.get("is_active", True),
        }
        body = {k: v for k, v in body.items() if v is not None}

        data = self._unwrap(await self.client.post("/routes", body))
        route = Route.parse(data.get("route"))
        return {
            "message": "Route created successfully",
            "route": {
                "id": route.id,
                "name": route.name,
                "sourceId": route.source_id,
                "destinationId": route.destination_id,
            } if route else None,
        }

    async def _update_route(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        body = pick(args, ROUTE_FIELDS)
        data = self._unwrap(await self.client.patch(f"/routes/{args['route_id']}", body))
        return {"message": "Route updated successfully", "route": data.get("route")}

    async def _delete_route(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        self._unwrap(await self.client.delete(f"/routes/{args['route_id']}"))
        return {"message": "Route deleted successfully"}
