"""Configuration management for the Hookbase MCP server.

All settings come from environment variables (optionally a local ``.env``
file). Settings are loaded once and cached for the lifetime of the process.
"""

from enum import Enum
from functools import lru_cache
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://api.hookbase.app"
API_KEY_PREFIX = "whr_"


class StartupMode(str, Enum):
    """What the server does when configuration resolution fails."""
    DEFERRED = "deferred"
    STRICT = "strict"


class HookbaseSettings(BaseSettings):
    """Raw process environment for the adapter."""
    api_key: Optional[str] = Field(default=None, description="Hookbase API key (whr_...)")
    api_url: str = Field(default=DEFAULT_API_URL, description="Hookbase API base URL")
    org_id: Optional[str] = Field(default=None, description="Explicit organization override")

    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=False)

    startup_mode: StartupMode = Field(default=StartupMode.DEFERRED)

    # Audit
    enable_audit: bool = Field(default=False)
    audit_log_path: str = Field(default="logs/audit.log")

    model_config = SettingsConfigDict(
        env_prefix="HOOKBASE_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore"
    )

    @field_validator("debug", "json_logs", "enable_audit", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any) -> bool:
        # Only "1" and "true" switch a flag on
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in ("1", "true")

    @field_validator("startup_mode", mode="before")
    @classmethod
    def _parse_startup_mode(cls, value: Any) -> Any:
        if isinstance(value, StartupMode):
            return value
        try:
            return StartupMode(str(value).strip().lower())
        except ValueError:
            return StartupMode.DEFERRED

    @property
    def effective_log_level(self) -> str:
        """Log level after applying the debug flag."""
        return "DEBUG" if self.debug else self.log_level.upper()

    @property
    def base_url(self) -> str:
        """API URL without a trailing slash, or the default when blank."""
        return (self.api_url or DEFAULT_API_URL).rstrip("/")


@lru_cache
def get_settings() -> HookbaseSettings:
    """Get cached application settings."""
    return HookbaseSettings()
