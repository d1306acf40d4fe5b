"""Audit logging for the Hookbase MCP Server.

Logs tool executions as JSON lines for compliance and debugging.
Captures: tool, parameters (redacted), timestamp, result, remote status.
"""

import asyncio
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

import aiofiles

from hookbase_shared.logging import get_logger
from hookbase_shared.models import (
    AuditEntry,
    ToolCall,
    ToolDefinition,
    ToolResult,
)

logger = get_logger(__name__)

REDACTED = "[REDACTED]"


class AuditLogger:
    """
    Audit logger for MCP tool executions.

    All tool executions are logged with:
    - Tool name and domain
    - Parameters (with sensitive data redaction)
    - Timestamp and request id
    - Result status and remote HTTP status
    """

    # Parameters that should be redacted in audit logs
    SENSITIVE_PARAMS = {
        "password",
        "token",
        "secret",
        "api_key",
        "apikey",
        "credential",
        "auth_config",
        "headers",
        "signing_secret",
    }

    def __init__(
        self,
        log_path: str = "logs/audit.log",
        enabled: bool = True,
        buffer_size: int = 100
    ) -> None:
        self.log_path = Path(log_path)
        self.enabled = enabled
        self.buffer_size = buffer_size
        self._buffer: list[AuditEntry] = []
        self._lock = asyncio.Lock()

        if self.enabled:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)

    def _redact_sensitive(self, value: Any) -> Any:
        """Redact sensitive parameters, descending into nested objects and lists."""
        if isinstance(value, dict):
            return {
                key: REDACTED if key.lower() in self.SENSITIVE_PARAMS else self._redact_sensitive(item)
                for key, item in value.items()
            }
        if isinstance(value, list):
            return [self._redact_sensitive(item) for item in value]
        return value

    def create_entry(
        self,
        tool: ToolDefinition,
        call: ToolCall,
        result: ToolResult
    ) -> AuditEntry:
        """
        Create an audit entry from tool execution data.

        Args:
            tool: Tool definition
            call: Tool call request
            result: Tool execution result

        Returns:
            Audit entry
        """
        return AuditEntry(
            id=str(uuid.uuid4()),
            timestamp=datetime.utcnow(),
            tool_name=tool.name,
            domain=tool.domain,
            execution_type=tool.execution_type,
            parameters=self._redact_sensitive(call.parameters),
            status=result.status,
            error=result.error,
            http_status=result.metadata.get("http_status"),
            execution_time_ms=result.execution_time_ms,
            request_id=call.context.request_id,
        )

    async def log(
        self,
        tool: ToolDefinition,
        call: ToolCall,
        result: ToolResult
    ) -> None:
        """
        Log a tool execution.

        Args:
            tool: Tool definition
            call: Tool call request
            result: Tool execution result
        """
        if not self.enabled:
            return

        entry = self.create_entry(tool, call, result)

        logger.info(
            "Tool executed",
            audit_id=entry.id,
            tool=entry.tool_name,
            domain=entry.domain,
            status=entry.status.value,
            execution_time_ms=entry.execution_time_ms
        )

        # Buffer for batch file writing
        async with self._lock:
            self._buffer.append(entry)

            if len(self._buffer) >= self.buffer_size:
                await self._flush()

    async def _flush(self) -> None:
        """Flush buffered entries to file."""
        if not self._buffer:
            return

        entries_to_write = self._buffer.copy()
        self._buffer.clear()

        try:
            async with aiofiles.open(self.log_path, "a") as f:
                for entry in entries_to_write:
                    await f.write(entry.model_dump_json() + "\n")
        except OSError as e:
            logger.error("Failed to write audit log", error=str(e))
            # Re-add entries to buffer for retry
            self._buffer.extend(entries_to_write)

    async def flush(self) -> None:
        """Public method to flush audit buffer."""
        async with self._lock:
            await self._flush()
