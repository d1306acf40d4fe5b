"""Exception types shared across the Hookbase MCP packages."""

from typing import Optional


class HookbaseError(Exception):
    """Base exception for Hookbase adapter errors."""
    pass


class HookbaseAPIError(HookbaseError):
    """A remote call completed with an error envelope.

    ``status`` is the HTTP status code, or ``0`` when the request never
    produced a response (DNS failure, refused connection, timeout, bad body).
    """

    def __init__(self, message: str, status: int = 0) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class ConfigurationNotInitializedError(RuntimeError):
    """Raised when organization-scoped work is attempted without a resolved config."""

    def __init__(self, reason: Optional[str] = None) -> None:
        self.reason = reason
        if reason:
            message = f"Configuration error: {reason}"
        else:
            message = "Configuration not initialized. Resolve configuration before calling tools."
        super().__init__(message)


class PromptError(HookbaseError):
    """An unknown prompt was requested or its arguments are invalid."""
    pass
