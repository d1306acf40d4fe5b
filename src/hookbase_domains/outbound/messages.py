"""Outbound messages - sending events and tracking their delivery."""

from typing import Any, Optional

from hookbase_domains.base import (
    CamelRecord,
    Handler,
    HookbaseAdapter,
    any_map,
    as_object,
    choice,
    limit_and_cursor,
    pick,
    string,
    string_map,
)
from hookbase_shared.models import ExecutionContext, ExecutionType

MESSAGE_STATUSES = ["pending", "processing", "success", "failed", "exhausted"]


class OutboundMessage(CamelRecord):
    id: str
    event_id: Optional[str] = None
    event_type: Optional[str] = None
    application_id: Optional[str] = None
    application_name: Optional[str] = None
    endpoint_id: Optional[str] = None
    endpoint_url: Optional[str] = None
    status: Optional[str] = None
    attempts: Optional[Any] = None
    max_attempts: Optional[Any] = None
    last_response_status: Optional[Any] = None
    last_error_message: Optional[str] = None
    created_at: Optional[str] = None
    completed_at: Optional[str] = None

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "eventId": self.event_id,
            "eventType": self.event_type,
            "applicationId": self.application_id,
            "applicationName": self.application_name,
            "endpointId": self.endpoint_id,
            "endpointUrl": self.endpoint_url,
            "status": self.status,
            "attempts": self.attempts,
            "maxAttempts": self.max_attempts,
            "lastResponseStatus": self.last_response_status,
            "lastErrorMessage": self.last_error_message,
            "createdAt": self.created_at,
            "completedAt": self.completed_at,
        }


class Attempt(CamelRecord):
    id: str
    attempt_number: Optional[Any] = None
    status: Optional[str] = None
    response_status: Optional[Any] = None
    response_time_ms: Optional[Any] = None
    response_body: Optional[Any] = None
    error_message: Optional[str] = None
    created_at: Optional[str] = None

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "attemptNumber": self.attempt_number,
            "status": self.status,
            "responseStatus": self.response_status,
            "responseTimeMs": self.response_time_ms,
            "responseBody": self.response_body,
            "errorMessage": self.error_message,
            "createdAt": self.created_at,
        }


class MessagesAdapter(HookbaseAdapter):
    """Outbound event sending and message tracking."""

    domain = "messages"

    def _define_tools(self) -> None:
        self._tool(
            "hookbase_send_event",
            "Send a webhook event to all subscribed endpoints. The event is queued for delivery to "
            "matching subscriptions. Use labels for filtering which subscriptions receive the event.",
            {
                "event_type": string('Event type name (e.g., "order.created")'),
                "payload": {"description": "Event payload (any JSON-serializable data)"},
                "application_id": string("Target a specific application only"),
                "endpoint_id": string("Target a specific endpoint only"),
                "idempotency_key": string("Unique key to prevent duplicate delivery"),
                "labels": string_map(
                    'Labels for filtering subscriptions (e.g., {"environment": "production", "region": "us-east"})'
                ),
                "metadata": any_map("Additional metadata for the event"),
            },
            required=["event_type", "payload"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_list_outbound_messages",
            "List outbound message delivery records. Messages track the delivery status of each "
            "event to each endpoint.",
            {
                "status": choice(MESSAGE_STATUSES, "Filter by delivery status"),
                "event_type": string("Filter by event type name"),
                "application_id": string("Filter by application ID"),
                "endpoint_id": string("Filter by endpoint ID"),
                **limit_and_cursor(),
            },
        )

        self._tool(
            "hookbase_get_outbound_message",
            "Get detailed information about an outbound message delivery.",
            {"message_id": string("The ID of the message")},
            required=["message_id"],
        )

        self._tool(
            "hookbase_get_message_attempts",
            "Get the delivery attempt history for an outbound message. Shows each attempt with response details.",
            {"message_id": string("The ID of the message")},
            required=["message_id"],
        )

        self._tool(
            "hookbase_replay_message",
            "Replay a failed or exhausted message. Creates a new delivery attempt for the original event payload.",
            {"message_id": string("The ID of the message to replay")},
            required=["message_id"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_get_outbound_stats",
            "Get delivery statistics for outbound webhooks. Shows counts by status (pending, success, failed, etc.).",
        )

    @property
    def handlers(self) -> dict[str, Handler]:
        return {
            "hookbase_send_event": self._send_event,
            "hookbase_list_outbound_messages": self._list_outbound_messages,
            "hookbase_get_outbound_message": self._get_outbound_message,
            "hookbase_get_message_attempts": self._get_message_attempts,
            "hookbase_replay_message": self._replay_message,
            "hookbase_get_outbound_stats": self._get_outbound_stats,
        }

    async def _send_event(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        body = {"eventType": args["event_type"], "payload": args["payload"]}
        body.update(pick(args, {
            "application_id": "applicationId",
            "endpoint_id": "endpointId",
            "idempotency_key": "idempotencyKey",
            "labels": "labels",
            "metadata": "metadata",
        }))

        data = self._unwrap(await self.client.post("/send-event", body))
        sent = as_object(data.get("data"))
        return {
            "message": "Event sent successfully",
            "eventId": sent.get("eventId"),
            "messagesQueued": sent.get("messagesQueued"),
            "endpoints": sent.get("endpoints"),
        }

    async def _list_outbound_messages(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        params = {
            "status": args.get("status"),
            "eventType": args.get("event_type"),
            "applicationId": args.get("application_id"),
            "endpointId": args.get("endpoint_id"),
            "limit": args.get("limit"),
            "cursor": args.get("cursor"),
        }
        data = self._unwrap(await self.client.get("/outbound-messages", params))
        return {
            "messages": [m.summary() for m in OutboundMessage.parse_many(data.get("data"))],
            "pagination": data.get("pagination"),
        }

    async def _get_outbound_message(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.get(f"/outbound-messages/{args['message_id']}"))
        return {"outboundMessage": data.get("data")}

    async def _get_message_attempts(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.get(f"/outbound-messages/{args['message_id']}/attempts"))
        return {"attempts": [a.summary() for a in Attempt.parse_many(data.get("data"))]}

    async def _replay_message(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.post(f"/outbound-messages/{args['message_id']}/replay"))
        replay = as_object(data.get("data"))
        return {
            "message": "Message queued for replay",
            "originalMessageId": replay.get("originalMessageId"),
            "newMessageId": replay.get("newMessageId"),
            "status": replay.get("status"),
        }

    async def _get_outbound_stats(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.get("/outbound-messages/stats/summary"))
        return {"stats": data.get("data")}
