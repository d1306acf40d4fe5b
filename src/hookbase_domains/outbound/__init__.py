"""Outbound domains - sending webhooks to customer endpoints.

Applications own endpoints, endpoints subscribe to event types, and each
sent event fans out into one message per subscribed endpoint.
"""

from typing import TYPE_CHECKING, Optional

from hookbase_client.client import HookbaseClient
from hookbase_domains.base import register_domain
from hookbase_domains.outbound.applications import ApplicationsAdapter
from hookbase_domains.outbound.endpoints import EndpointsAdapter
from hookbase_domains.outbound.event_types import EventTypesAdapter
from hookbase_domains.outbound.messages import MessagesAdapter
from hookbase_domains.outbound.subscriptions import SubscriptionsAdapter

if TYPE_CHECKING:
    from hookbase_mcp.router import ToolRouter

OUTBOUND_ADAPTERS = [
    ApplicationsAdapter,
    EndpointsAdapter,
    SubscriptionsAdapter,
    EventTypesAdapter,
    MessagesAdapter,
]


def register_outbound_domains(
    router: "ToolRouter",
    client: Optional[HookbaseClient],
    unavailable_reason: Optional[str] = None
) -> None:
    """Register the outbound domains with the MCP server."""
    for adapter_cls in OUTBOUND_ADAPTERS:
        register_domain(router, adapter_cls(client, unavailable_reason))


__all__ = [
    "OUTBOUND_ADAPTERS",
    "register_outbound_domains",
    "ApplicationsAdapter",
    "EndpointsAdapter",
    "SubscriptionsAdapter",
    "EventTypesAdapter",
    "MessagesAdapter",
]
