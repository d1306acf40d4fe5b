"""Events - incoming webhooks received by sources."""

import json
from typing import Any, Optional

from hookbase_domains.base import (
    Handler,
    HookbaseAdapter,
    RemoteRecord,
    as_object,
    choice,
    number,
    string,
)
from hookbase_domains.inbound.deliveries import Delivery
from hookbase_domains.inbound.sources import Source
from hookbase_shared.errors import HookbaseAPIError
from hookbase_shared.logging import get_logger
from hookbase_shared.models import ExecutionContext

logger = get_logger(__name__)

EVENT_STATUSES = ["delivered", "failed", "pending", "partial", "no_routes"]

REPLAY_NOTE = "This cURL command will replay the event through the ingest endpoint."


class Event(RemoteRecord):
    id: str
    source_id: Optional[str] = None
    source_name: Optional[str] = None
    event_type: Optional[str] = None
    method: Optional[str] = None
    path: Optional[str] = None
    headers: Optional[Any] = None
    payload: Optional[Any] = None
    payload_size: Optional[Any] = None
    signature_valid: Optional[Any] = None
    status: Optional[str] = None
    delivery_count: Optional[Any] = None
    received_at: Optional[str] = None
    deliveries: Optional[Any] = None

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "sourceId": self.source_id,
            "sourceName": self.source_name,
            "eventType": self.event_type,
            "method": self.method,
            "payloadSize": self.payload_size,
            "signatureValid": self.signature_valid,
            "status": self.status,
            "deliveryCount": self.delivery_count or 0,
            "receivedAt": self.received_at,
        }

    def detail(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "sourceId": self.source_id,
            "sourceName": self.source_name,
            "eventType": self.event_type,
            "method": self.method,
            "path": self.path,
            "headers": self.headers,
            "payload": self.payload,
            "payloadSize": self.payload_size,
            "signatureValid": self.signature_valid,
            "status": self.status,
            "deliveryCount": self.delivery_count or 0,
            "receivedAt": self.received_at,
            "deliveries": (
                [d.within_event() for d in Delivery.parse_many(self.deliveries)]
                if isinstance(self.deliveries, list) else None
            ),
        }


def shell_quote(text: str) -> str:
    """Wrap text in single quotes for a POSIX shell."""
    return "'" + text.replace("'", "'\\''") + "'"


def build_replay_curl(api_url: str, source_slug: Optional[str], event: Event) -> str:
    """
    Build a cURL command that re-sends an event through the ingest endpoint.

    Proxy headers (``host`` and ``x-forwarded-*``) are left out; a non-string
    payload is sent as compact JSON.
    """
    command = f"curl -X {event.method or 'POST'} '{api_url}/ingest/{source_slug}'"

    headers = event.headers if isinstance(event.headers, dict) else {}
    for key, value in headers.items():
        lowered = key.lower()
        if lowered == "host" or lowered.startswith("x-forwarded"):
            continue
        command += f" \\\n  -H '{key}: {value}'"

    payload = event.payload
    if payload is not None and payload != "":
        text = payload if isinstance(payload, str) else json.dumps(payload, separators=(",", ":"))
        command += f" \\\n  -d {shell_quote(text)}"

    return command


class EventsAdapter(HookbaseAdapter):
    """Inbound events and replay tooling."""

    domain = "events"

    def _define_tools(self) -> None:
        self._tool(
            "hookbase_list_events",
            "Query webhook events with optional filters. Events represent incoming webhooks received by sources.",
            {
                "limit": number("Maximum number of events to return (default: 20, max: 100)"),
                "offset": number("Number of events to skip for pagination"),
                "source_id": string("Filter by source ID"),
                "status": choice(EVENT_STATUSES, "Filter by delivery status"),
                "from_date": string("Filter events after this date (ISO 8601)"),
                "to_date": string("Filter events before this date (ISO 8601)"),
                "search": string("Search in event payload"),
            },
        )

        self._tool(
            "hookbase_get_event",
            "Get detailed information about a specific event, including the full payload and all delivery attempts.",
            {"event_id": string("The ID of the event to retrieve")},
            required=["event_id"],
        )

        self._tool(
            "hookbase_get_event_debug",
            "Generate a cURL command to replay an event for debugging purposes.",
            {"event_id": string("The ID of the event to generate cURL for")},
            required=["event_id"],
        )

    @property
    def handlers(self) -> dict[str, Handler]:
        return {
            "hookbase_list_events": self._list_events,
            "hookbase_get_event": self._get_event,
            "hookbase_get_event_debug": self._get_event_debug,
        }

    async def _fetch_event(self, event_id: str) -> Optional[Event]:
        data = self._unwrap(await self.client.get(f"/events/{event_id}"))
        return Event.parse(data.get("event"))

    async def _list_events(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        params = {
            "limit": args.get("limit"),
            "offset": args.get("offset"),
            "sourceId": args.get("source_id"),
            "status": args.get("status"),
            "fromDate": args.get("from_date"),
            "toDate": args.get("to_date"),
            "search": args.get("search"),
        }
        data = self._unwrap(await self.client.get("/events", params))
        return {
            "events": [e.summary() for e in Event.parse_many(data.get("events"))],
            "total": data.get("total"),
            "hasMore": data.get("hasMore"),
        }

    async def _get_event(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        event = await self._fetch_event(args["event_id"])
        return {"event": event.detail() if event else None}

    async def _get_event_debug(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        event = await self._fetch_event(args["event_id"])
        if event is None:
            raise HookbaseAPIError("Event not found", 404)

        response = await self.client.get(f"/sources/{event.source_id}")
        if not response.ok:
            raise HookbaseAPIError(f"Failed to fetch source: {response.error}", response.status)

        source = Source.parse(as_object(response.data).get("source"))
        if source is None:
            raise HookbaseAPIError("Source not found", 404)

        logger.debug("Building replay command", event_id=event.id, source_slug=source.slug)

        return {
            "eventId": event.id,
            "sourceName": event.source_name,
            "curl": build_replay_curl(self.client.api_url, source.slug, event),
            "note": REPLAY_NOTE,
        }
