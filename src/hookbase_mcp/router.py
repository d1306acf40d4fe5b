"""Tool Router for the Hookbase MCP Server.

Routes tool calls to the owning domain adapter.
Handles lookup, validation, execution, timing and auditing.
"""

import time
from typing import Any, Awaitable, Callable, Optional

from hookbase_mcp.audit import AuditLogger
from hookbase_mcp.registry import ToolRegistry
from hookbase_shared.logging import bind_context, get_logger
from hookbase_shared.models import (
    ExecutionContext,
    ToolCall,
    ToolResult,
    ToolResultStatus,
)

logger = get_logger(__name__)


# Type alias for adapter execute functions
AdapterExecutor = Callable[[str, dict[str, Any], ExecutionContext], Awaitable[ToolResult]]


class ToolRouter:
    """
    Routes tool calls to domain adapters.

    Responsibilities:
    - Validate tool calls against schemas
    - Route to the adapter registered for the tool's domain
    - Contain every failure as a ToolResult
    - Audit all executions
    """

    def __init__(
        self,
        registry: Optional[ToolRegistry] = None,
        audit_logger: Optional[AuditLogger] = None
    ) -> None:
        self.registry = registry or ToolRegistry()
        self.audit_logger = audit_logger or AuditLogger(enabled=False)
        self._adapters: dict[str, AdapterExecutor] = {}

    def register_adapter(self, domain: str, executor: AdapterExecutor) -> None:
        """
        Register a domain adapter.

        Args:
            domain: Domain name
            executor: Coroutine function that executes tools for this domain
        """
        self._adapters[domain] = executor
        logger.debug("Adapter registered", domain=domain)

    async def execute(self, call: ToolCall) -> ToolResult:
        """
        Execute a tool call.

        This is the main entry point for tool execution. It never raises:
        every failure is returned as a non-success ToolResult.

        Args:
            call: Tool call request

        Returns:
            Tool execution result
        """
        start_time = time.time()
        tool_name = call.tool_name

        bind_context(request_id=call.context.request_id, tool=tool_name)
        logger.debug("Executing tool")

        # Look up tool
        tool = self.registry.get(tool_name)
        if not tool:
            return ToolResult(
                tool_name=tool_name,
                status=ToolResultStatus.NOT_FOUND,
                error=f"Tool '{tool_name}' not found",
                error_code="TOOL_NOT_FOUND"
            )

        # Validate input
        is_valid, errors = self.registry.validate_input(tool_name, call.parameters)
        if not is_valid:
            result = ToolResult(
                tool_name=tool_name,
                status=ToolResultStatus.VALIDATION_ERROR,
                error=f"Validation failed: {'; '.join(errors)}",
                error_code="VALIDATION_ERROR"
            )
            await self.audit_logger.log(tool, call, result)
            return result

        # Get adapter
        adapter = self._adapters.get(tool.domain)
        if not adapter:
            result = ToolResult(
                tool_name=tool_name,
                status=ToolResultStatus.ERROR,
                error=f"No adapter registered for domain '{tool.domain}'",
                error_code="NO_ADAPTER"
            )
            await self.audit_logger.log(tool, call, result)
            return result

        # Execute via adapter
        try:
            result = await adapter(tool.name, call.parameters, call.context)
        except Exception as e:
            logger.error(
                "Tool execution failed",
                error=str(e),
                exc_info=True
            )
            result = ToolResult(
                tool_name=tool_name,
                status=ToolResultStatus.ERROR,
                error=str(e) or e.__class__.__name__,
                error_code="EXECUTION_ERROR"
            )

        # Calculate execution time
        result.execution_time_ms = (time.time() - start_time) * 1000

        if result.is_error:
            logger.info(
                "Tool returned error",
                status=result.status.value,
                error=result.error,
                execution_time_ms=result.execution_time_ms
            )

        # Audit the execution
        await self.audit_logger.log(tool, call, result)

        return result
