"""Deliveries - attempts to forward an event to a destination."""

from typing import Any, Optional

from hookbase_domains.base import (
    Handler,
    HookbaseAdapter,
    RemoteRecord,
    choice,
    number,
    string,
)
from hookbase_shared.models import ExecutionContext, ExecutionType

DELIVERY_STATUSES = ["pending", "success", "failed", "retrying"]

MAX_BULK_REPLAY = 100


class Delivery(RemoteRecord):
    id: str
    event_id: Optional[str] = None
    route_id: Optional[str] = None
    destination_id: Optional[str] = None
    destination_name: Optional[str] = None
    route_name: Optional[str] = None
    status: Optional[str] = None
    attempt_count: Optional[Any] = None
    max_attempts: Optional[Any] = None
    response_status: Optional[Any] = None
    response_time_ms: Optional[Any] = None
    response_body: Optional[Any] = None
    error_message: Optional[str] = None
    next_retry_at: Optional[str] = None
    completed_at: Optional[str] = None
    created_at: Optional[str] = None

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "eventId": self.event_id,
            "routeId": self.route_id,
            "destinationId": self.destination_id,
            "destinationName": self.destination_name,
            "routeName": self.route_name,
            "status": self.status,
            "attemptCount": self.attempt_count,
            "maxAttempts": self.max_attempts,
            "responseStatus": self.response_status,
            "responseTimeMs": self.response_time_ms,
            "errorMessage": self.error_message,
            "nextRetryAt": self.next_retry_at,
            "completedAt": self.completed_at,
            "createdAt": self.created_at,
        }

    def detail(self) -> dict[str, Any]:
        output = self.summary()
        output["responseBody"] = self.response_body
        return output

    def within_event(self) -> dict[str, Any]:
        """The condensed shape nested under an event."""
        return {
            "id": self.id,
            "destinationName": self.destination_name,
            "status": self.status,
            "attemptCount": self.attempt_count,
            "responseStatus": self.response_status,
            "responseTimeMs": self.response_time_ms,
            "errorMessage": self.error_message,
            "completedAt": self.completed_at,
        }


class DeliveriesAdapter(HookbaseAdapter):
    """Inbound delivery attempts and replays."""

    domain = "deliveries"

    def _define_tools(self) -> None:
        self._tool(
            "hookbase_list_deliveries",
            "Query webhook deliveries with optional filters. Deliveries represent attempts to "
            "forward webhooks to destinations.",
            {
                "limit": number("Maximum number of deliveries to return (default: 20, max: 100)"),
                "offset": number("Number of deliveries to skip for pagination"),
                "event_id": string("Filter by event ID"),
                "destination_id": string("Filter by destination ID"),
                "status": choice(DELIVERY_STATUSES, "Filter by delivery status"),
            },
        )

        self._tool(
            "hookbase_get_delivery",
            "Get detailed information about a specific delivery, including the response body and error details.",
            {"delivery_id": string("The ID of the delivery to retrieve")},
            required=["delivery_id"],
        )

        self._tool(
            "hookbase_replay_delivery",
            "Retry a failed delivery. This will re-send the original webhook payload to the destination.",
            {"delivery_id": string("The ID of the delivery to replay")},
            required=["delivery_id"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_bulk_replay",
            "Retry multiple failed deliveries at once. Useful for recovering from destination outages.",
            {
                "delivery_ids": {
                    "type": "array",
                    "items": {"type": "string"},
                    "minItems": 1,
                    "maxItems": MAX_BULK_REPLAY,
                    "description": "Array of delivery IDs to replay",
                },
            },
            required=["delivery_ids"],
            execution_type=ExecutionType.WRITE,
        )

    @property
    def handlers(self) -> dict[str, Handler]:
        return {
            "hookbase_list_deliveries": self._list_deliveries,
            "hookbase_get_delivery": self._get_delivery,
            "hookbase_replay_delivery": self._replay_delivery,
            "hookbase_bulk_replay": self._bulk_replay,
        }

    async def _list_deliveries(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        params = {
            "limit": args.get("limit"),
            "offset": args.get("offset"),
            "eventId": args.get("event_id"),
            "destinationId": args.get("destination_id"),
            "status": args.get("status"),
        }
        data = self._unwrap(await self.client.get("/deliveries", params))
        return {
            "deliveries": [d.summary() for d in Delivery.parse_many(data.get("deliveries"))],
            "total": data.get("total"),
            "hasMore": data.get("hasMore"),
        }

    async def _get_delivery(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.get(f"/deliveries/{args['delivery_id']}"))
        delivery = Delivery.parse(data.get("delivery"))
        return {"delivery": delivery.detail() if delivery else None}

    async def _replay_delivery(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.post(f"/deliveries/{args['delivery_id']}/replay"))
        delivery = Delivery.parse(data.get("delivery"))
        return {
            "message": "Delivery replayed successfully",
            "delivery": {
                "id": delivery.id,
                "status": delivery.status,
                "attemptCount": delivery.attempt_count,
            } if delivery else None,
        }

    async def _bulk_replay(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.post("/deliveries/bulk-replay", {"deliveryIds": args["delivery_ids"]}))
        return {
            "message": f"Replayed {data.get('replayed')} deliveries",
            "replayed": data.get("replayed"),
            "failed": data.get("failed"),
        }
