"""Hookbase MCP Server - tool registry, routing, prompts and auditing.

The server registers the Hookbase tools, validates and routes calls to the
domain adapters, serves the prompt catalogue and audits every execution.
"""

from hookbase_mcp.audit import AuditLogger
from hookbase_mcp.prompts import PromptCatalog
from hookbase_mcp.registry import ToolRegistry
from hookbase_mcp.router import ToolRouter

__all__ = [
    "ToolRegistry",
    "ToolRouter",
    "PromptCatalog",
    "AuditLogger",
]
