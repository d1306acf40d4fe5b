"""Hookbase API client: transport dispatcher and configuration resolver."""

from hookbase_client.client import HookbaseClient
from hookbase_client.resolver import ConfigurationResolver, get_resolver

__all__ = [
    "HookbaseClient",
    "ConfigurationResolver",
    "get_resolver",
]
