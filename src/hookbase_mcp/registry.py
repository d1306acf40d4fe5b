"""Tool Registry for the Hookbase MCP Server.

Manages registration, discovery, and lookup of tools from all domains.
Tools are registered by the domain adapters at startup.
"""

from typing import Any, Optional

from hookbase_shared.logging import get_logger
from hookbase_shared.models import ToolDefinition
from hookbase_shared.schema import validate_schema

logger = get_logger(__name__)


class ToolRegistry:
    """
    Central registry for all MCP tools.

    Responsibilities:
    - Register tools from domains
    - Discover available tools
    - Lookup tools by name
    - Validate tool input against the tool's closed schema
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        self._domains: set[str] = set()

    def register(self, tool: ToolDefinition) -> None:
        """
        Register a tool in the registry.

        Args:
            tool: Tool definition to register

        Raises:
            ValueError: If tool name is already registered
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")

        self._tools[tool.name] = tool
        self._domains.add(tool.domain)

        logger.debug(
            "Tool registered",
            tool=tool.name,
            domain=tool.domain,
            execution_type=tool.execution_type.value
        )

    def register_many(self, tools: list[ToolDefinition]) -> None:
        """Register multiple tools at once."""
        for tool in tools:
            self.register(tool)

    def get(self, tool_name: str) -> Optional[ToolDefinition]:
        """
        Get a tool by its external name.

        Args:
            tool_name: Tool name (e.g. ``hookbase_list_sources``)

        Returns:
            ToolDefinition if found, None otherwise
        """
        return self._tools.get(tool_name)

    def list_tools(self, domain: Optional[str] = None) -> list[ToolDefinition]:
        """
        List all registered tools, optionally filtered by domain.

        Args:
            domain: Filter by domain name

        Returns:
            List of tool definitions in registration order
        """
        tools = list(self._tools.values())

        if domain:
            tools = [t for t in tools if t.domain == domain]

        return tools

    def list_domains(self) -> list[str]:
        """List all registered domains."""
        return sorted(self._domains)

    def validate_input(
        self,
        tool_name: str,
        parameters: dict[str, Any]
    ) -> tuple[bool, list[str]]:
        """
        Validate input parameters against tool's input schema.

        Args:
            tool_name: Tool name
            parameters: Input parameters to validate

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        tool = self.get(tool_name)
        if not tool:
            return False, [f"Tool '{tool_name}' not found"]

        return validate_schema(parameters, tool.input_schema)

    def get_tools_for_mcp(self) -> list[dict[str, Any]]:
        """
        Get tool definitions in the shape announced over MCP.

        Returns:
            List of ``{name, description, inputSchema}`` dictionaries
        """
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "inputSchema": tool.input_schema,
            }
            for tool in self.list_tools()
        ]

    def get_tool_count(self) -> dict[str, int]:
        """Get count of tools per domain."""
        counts: dict[str, int] = {}
        for tool in self._tools.values():
            counts[tool.domain] = counts.get(tool.domain, 0) + 1
        return counts
