"""Hookbase tool domains.

Each domain contains:
- Tool definitions with closed input schemas
- An adapter that calls the Hookbase API through the injected client
- Typed remote records and their output shapes

Domains hold no state beyond the injected client.
"""

from typing import TYPE_CHECKING, Optional

from hookbase_client.client import HookbaseClient

if TYPE_CHECKING:
    from hookbase_mcp.router import ToolRouter


def load_all_domains(
    router: "ToolRouter",
    client: Optional[HookbaseClient],
    unavailable_reason: Optional[str] = None
) -> None:
    """
    Load and register all Hookbase domains.

    This is called at MCP Server startup. ``client`` is None when
    configuration could not be resolved; the tools are still registered and
    report ``unavailable_reason`` when called.
    """
    from hookbase_domains.inbound import register_inbound_domains
    from hookbase_domains.outbound import register_outbound_domains
    from hookbase_domains.platform import register_platform_domains

    register_inbound_domains(router, client, unavailable_reason)
    register_platform_domains(router, client, unavailable_reason)
    register_outbound_domains(router, client, unavailable_reason)


__all__ = ["load_all_domains"]
