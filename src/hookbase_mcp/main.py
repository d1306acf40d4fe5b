"""Hookbase MCP Server - stdio entry point.

Exposes the Hookbase tools and prompts to an MCP host over stdio. Startup
resolves configuration once, builds the API client and registers every
domain with the router; the protocol handlers only translate between MCP
messages and router calls.
"""

import asyncio
import json
import uuid
from typing import Any, Optional

import httpx
from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from hookbase_client.client import HookbaseClient
from hookbase_client.resolver import ConfigurationResolver, get_resolver
from hookbase_domains import load_all_domains
from hookbase_mcp.audit import AuditLogger
from hookbase_mcp.prompts import PromptCatalog
from hookbase_mcp.router import ToolRouter
from hookbase_shared.config import HookbaseSettings, StartupMode, get_settings
from hookbase_shared.errors import ConfigurationNotInitializedError
from hookbase_shared.logging import clear_context, get_logger, setup_logging
from hookbase_shared.models import ExecutionContext, HookbaseConfig, ToolCall

logger = get_logger(__name__)

SERVER_NAME = "hookbase"


def _text(payload: Any) -> types.TextContent:
    return types.TextContent(type="text", text=json.dumps(payload, indent=2, default=str))


class HookbaseMCPServer:
    """
    Hookbase MCP Server.

    Wraps the low-level MCP ``Server``. Tool failures are returned as
    ``{"error": ...}`` results with ``isError`` set; they never become
    protocol faults.
    """

    def __init__(
        self,
        router: ToolRouter,
        prompts: Optional[PromptCatalog] = None,
        client: Optional[HookbaseClient] = None,
        unavailable_reason: Optional[str] = None,
        startup_mode: StartupMode = StartupMode.DEFERRED
    ) -> None:
        self.router = router
        self.prompts = prompts or PromptCatalog()
        self.client = client
        self.unavailable_reason = unavailable_reason
        self.startup_mode = startup_mode
        self.server = Server(SERVER_NAME)
        self._setup_handlers()

    @property
    def tools_disabled(self) -> bool:
        """True when strict startup failed and no tools are offered."""
        return self.startup_mode == StartupMode.STRICT and self.unavailable_reason is not None

    def _setup_handlers(self) -> None:
        """Set up MCP request handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[types.Tool]:
            return self.list_tools()

        @self.server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: dict[str, Any]) -> types.CallToolResult:
            return await self.call_tool(name, arguments)

        @self.server.list_prompts()
        async def list_prompts() -> list[types.Prompt]:
            return self.list_prompts()

        @self.server.get_prompt()
        async def get_prompt(name: str, arguments: dict[str, str] | None) -> types.GetPromptResult:
            return self.get_prompt(name, arguments)

    def list_tools(self) -> list[types.Tool]:
        """List the advertised tools."""
        if self.tools_disabled:
            return []
        return [
            types.Tool(
                name=tool["name"],
                description=tool["description"],
                inputSchema=tool["inputSchema"],
            )
            for tool in self.router.registry.get_tools_for_mcp()
        ]

    async def call_tool(self, name: str, arguments: Optional[dict[str, Any]]) -> types.CallToolResult:
        """Execute a tool and serialise its result."""
        if self.tools_disabled:
            message = str(ConfigurationNotInitializedError(self.unavailable_reason))
            return types.CallToolResult(content=[_text({"error": message})], isError=True)

        call = ToolCall(
            tool_name=name,
            parameters=arguments or {},
            context=ExecutionContext(request_id=str(uuid.uuid4())),
        )

        try:
            result = await self.router.execute(call)
        finally:
            clear_context()

        if result.is_error:
            return types.CallToolResult(content=[_text({"error": result.error})], isError=True)

        return types.CallToolResult(content=[_text(result.data)], isError=False)

    def list_prompts(self) -> list[types.Prompt]:
        """List the static prompts."""
        return [
            types.Prompt(
                name=prompt.name,
                description=prompt.description,
                arguments=[
                    types.PromptArgument(
                        name=arg.name,
                        description=arg.description,
                        required=arg.required,
                    )
                    for arg in prompt.arguments
                ],
            )
            for prompt in self.prompts.list_prompts()
        ]

    def get_prompt(self, name: str, arguments: Optional[dict[str, str]]) -> types.GetPromptResult:
        """
        Render a prompt.

        Raises:
            PromptError: Unknown prompt or invalid arguments; the SDK reports
                it to the host as a request error
        """
        text = self.prompts.render(name, arguments)
        prompt = self.prompts.get(name)

        return types.GetPromptResult(
            description=prompt.description if prompt else None,
            messages=[
                types.PromptMessage(
                    role="user",
                    content=types.TextContent(type="text", text=text),
                )
            ],
        )

    async def run_stdio(self) -> None:
        """Run the MCP server with stdio transport."""
        logger.info("Starting Hookbase MCP Server (stdio)")
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )

    async def shutdown(self) -> None:
        """Release the HTTP client and flush pending audit entries."""
        if self.client is not None:
            await self.client.close()
        await self.router.audit_logger.flush()
        logger.info("Hookbase MCP Server stopped")


async def create_server(
    settings: Optional[HookbaseSettings] = None,
    resolver: Optional[ConfigurationResolver] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> HookbaseMCPServer:
    """
    Resolve configuration and assemble the server.

    Resolution failure never aborts startup: it is logged and, depending on
    the startup mode, tools either report the diagnosis per call or are not
    advertised at all.

    Args:
        settings: Environment settings (defaults to the cached settings)
        resolver: Configuration resolver (defaults to the global one)
        transport: Optional httpx transport (used by tests)
    """
    settings = settings or get_settings()
    resolver = resolver or get_resolver()

    outcome = await resolver.resolve(settings)

    client: Optional[HookbaseClient] = None
    unavailable_reason: Optional[str] = None
    if isinstance(outcome, HookbaseConfig):
        client = HookbaseClient.from_config(outcome, transport=transport)
    else:
        unavailable_reason = outcome.message
        logger.warning(
            "Starting without a valid configuration",
            kind=outcome.kind.value,
            startup_mode=settings.startup_mode.value,
        )

    audit_logger = AuditLogger(
        log_path=settings.audit_log_path,
        enabled=settings.enable_audit,
    )
    router = ToolRouter(audit_logger=audit_logger)
    load_all_domains(router, client, unavailable_reason)

    server = HookbaseMCPServer(
        router,
        client=client,
        unavailable_reason=unavailable_reason,
        startup_mode=settings.startup_mode,
    )

    logger.info(
        "MCP Server started",
        domains=router.registry.list_domains(),
        tool_count=sum(router.registry.get_tool_count().values()),
        tools_advertised=not server.tools_disabled,
    )

    return server


async def main() -> None:
    """Main entry point for the MCP server."""
    settings = get_settings()
    setup_logging(settings.effective_log_level, settings.json_logs)

    server = await create_server(settings)
    try:
        await server.run_stdio()
    finally:
        await server.shutdown()


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
