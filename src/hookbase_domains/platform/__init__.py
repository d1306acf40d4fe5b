"""Platform domains - tunnels, scheduled jobs and analytics."""

from typing import TYPE_CHECKING, Optional

from hookbase_client.client import HookbaseClient
from hookbase_domains.base import register_domain
from hookbase_domains.platform.analytics import AnalyticsAdapter
from hookbase_domains.platform.cron import CronAdapter
from hookbase_domains.platform.tunnels import TunnelsAdapter

if TYPE_CHECKING:
    from hookbase_mcp.router import ToolRouter

PLATFORM_ADAPTERS = [
    TunnelsAdapter,
    CronAdapter,
    AnalyticsAdapter,
]


def register_platform_domains(
    router: "ToolRouter",
    client: Optional[HookbaseClient],
    unavailable_reason: Optional[str] = None
) -> None:
    """Register the platform domains with the MCP server."""
    for adapter_cls in PLATFORM_ADAPTERS:
        register_domain(router, adapter_cls(client, unavailable_reason))


__all__ = [
    "PLATFORM_ADAPTERS",
    "register_platform_domains",
    "TunnelsAdapter",
    "CronAdapter",
    "AnalyticsAdapter",
]
