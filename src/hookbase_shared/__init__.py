"""Shared models, settings and utilities for the Hookbase MCP server."""

from hookbase_shared.models import (
    ApiResponse,
    ConfigError,
    ConfigErrorKind,
    HookbaseConfig,
    ToolDefinition,
    ToolCall,
    ToolResult,
    ExecutionContext,
    AuditEntry,
)
from hookbase_shared.config import HookbaseSettings, get_settings
from hookbase_shared.errors import ConfigurationNotInitializedError, HookbaseAPIError
from hookbase_shared.logging import get_logger, setup_logging

__all__ = [
    "ApiResponse",
    "ConfigError",
    "ConfigErrorKind",
    "HookbaseConfig",
    "ToolDefinition",
    "ToolCall",
    "ToolResult",
    "ExecutionContext",
    "AuditEntry",
    "HookbaseSettings",
    "get_settings",
    "ConfigurationNotInitializedError",
    "HookbaseAPIError",
    "get_logger",
    "setup_logging",
]
