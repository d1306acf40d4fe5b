"""Inbound domains - receiving webhooks and forwarding them.

Sources receive webhooks, routes connect them to destinations, and every
received webhook is recorded as an event with one delivery per route.
"""

from typing import TYPE_CHECKING, Optional

from hookbase_client.client import HookbaseClient
from hookbase_domains.base import register_domain
from hookbase_domains.inbound.deliveries import DeliveriesAdapter
from hookbase_domains.inbound.destinations import DestinationsAdapter
from hookbase_domains.inbound.events import EventsAdapter
from hookbase_domains.inbound.routes import RoutesAdapter
from hookbase_domains.inbound.sources import SourcesAdapter

if TYPE_CHECKING:
    from hookbase_mcp.router import ToolRouter

INBOUND_ADAPTERS = [
    SourcesAdapter,
    DestinationsAdapter,
    RoutesAdapter,
    EventsAdapter,
    DeliveriesAdapter,
]


def register_inbound_domains(
    router: "ToolRouter",
    client: Optional[HookbaseClient],
    unavailable_reason: Optional[str] = None
) -> None:
    """Register the inbound domains with the MCP server."""
    for adapter_cls in INBOUND_ADAPTERS:
        register_domain(router, adapter_cls(client, unavailable_reason))


__all__ = [
    "INBOUND_ADAPTERS",
    "register_inbound_domains",
    "SourcesAdapter",
    "DestinationsAdapter",
    "RoutesAdapter",
    "EventsAdapter",
    "DeliveriesAdapter",
]
