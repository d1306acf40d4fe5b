"""Base classes and helpers for Hookbase resource domains.

Each domain adapter:
- Declares the tools for one remote resource (sources, endpoints, ...)
- Maps declared snake_case arguments onto the API's request vocabulary
- Calls the transport dispatcher
- Reshapes the response into the tool's stable output shape
- Holds no state other than the injected client
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from hookbase_client.client import HookbaseClient
from hookbase_shared.errors import ConfigurationNotInitializedError, HookbaseAPIError
from hookbase_shared.logging import get_logger
from hookbase_shared.models import (
    ApiResponse,
    ExecutionContext,
    ExecutionType,
    ToolDefinition,
    ToolResult,
    ToolResultStatus,
)
from hookbase_shared.schema import strict_object

if TYPE_CHECKING:
    from hookbase_mcp.router import ToolRouter

logger = get_logger(__name__)

Handler = Callable[[dict[str, Any], ExecutionContext], Awaitable[Any]]

HTTP_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


# ---------------------------------------------------------------------------
# Remote records
# ---------------------------------------------------------------------------

class RemoteRecord(BaseModel):
    """A record returned by the API. Unknown fields are ignored."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    @classmethod
    def parse(cls, raw: Any) -> Optional["RemoteRecord"]:
        """Parse a raw JSON object, or return None for a missing record."""
        if not isinstance(raw, dict):
            return None
        return cls.model_validate(raw)

    @classmethod
    def parse_many(cls, raw: Any) -> list:
        if not isinstance(raw, list):
            return []
        return [cls.model_validate(item) for item in raw if isinstance(item, dict)]


class CamelRecord(RemoteRecord):
    """A record whose remote field names are camelCase."""
    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
        alias_generator=to_camel,
    )


def flag(value: Any) -> bool:
    """Normalise an integer-or-boolean API flag (``1``/``True``) to a bool."""
    return value is True or (not isinstance(value, bool) and value == 1)


def as_object(data: Any) -> dict[str, Any]:
    """Treat a response body that is not a JSON object as an empty one."""
    return data if isinstance(data, dict) else {}


def first_present(*values: Any, default: Any = None) -> Any:
    """Return the first value that is not None."""
    for value in values:
        if value is not None:
            return value
    return default


def pick(arguments: dict[str, Any], mapping: dict[str, str]) -> dict[str, Any]:
    """
    Rename the supplied arguments to their API field names.

    Only keys the caller actually supplied are copied, so an explicit
    ``None`` (clear this field) is sent while omitted fields are not.
    """
    return {
        remote: arguments[local]
        for local, remote in mapping.items()
        if local in arguments
    }


def set_inverted(body: dict[str, Any], arguments: dict[str, Any], local: str, remote: str) -> None:
    """Copy an ``is_enabled`` style argument as its negated ``isDisabled`` field."""
    if arguments.get(local) is not None:
        body[remote] = not arguments[local]


def percent(rate: Optional[float]) -> Optional[str]:
    """Render a 0..1 rate as ``"97.5%"``."""
    if rate is None:
        return None
    return f"{rate * 100:.1f}%"


# ---------------------------------------------------------------------------
# Schema property helpers
# ---------------------------------------------------------------------------

def string(description: str, nullable: bool = False, **extra: Any) -> dict[str, Any]:
    return {"type": ["string", "null"] if nullable else "string", "description": description, **extra}


def url(description: str) -> dict[str, Any]:
    return string(description, format="uri")


def number(description: str) -> dict[str, Any]:
    return {"type": "number", "description": description}


def boolean(description: str) -> dict[str, Any]:
    return {"type": "boolean", "description": description}


def choice(values: list[str], description: str, nullable: bool = False) -> dict[str, Any]:
    if nullable:
        return {"type": ["string", "null"], "enum": [*values, None], "description": description}
    return {"type": "string", "enum": values, "description": description}


def string_map(description: str) -> dict[str, Any]:
    return {
        "type": "object",
        "additionalProperties": {"type": "string"},
        "description": description,
    }


def any_map(description: str) -> dict[str, Any]:
    return {"type": "object", "description": description}


def limit_and_cursor() -> dict[str, Any]:
    return {
        "limit": number("Maximum number of results (default 50, max 100)"),
        "cursor": string("Pagination cursor for next page"),
    }


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------

class HookbaseAdapter(ABC):
    """
    Base class for Hookbase domain adapters.

    The client is injected at construction. When configuration could not be
    resolved the adapter is built without one and every call reports the
    startup diagnosis instead of reaching the API.
    """

    domain: str = ""

    def __init__(
        self,
        client: Optional[HookbaseClient],
        unavailable_reason: Optional[str] = None
    ) -> None:
        self._client = client
        self._unavailable_reason = unavailable_reason
        self._tools: dict[str, ToolDefinition] = {}
        self._define_tools()

    @property
    def client(self) -> HookbaseClient:
        """The injected API client."""
        if self._client is None:
            raise ConfigurationNotInitializedError(self._unavailable_reason)
        return self._client

    @property
    def tools(self) -> list[ToolDefinition]:
        """Return all tool definitions for this domain."""
        return list(self._tools.values())

    def _unwrap(self, response: ApiResponse) -> dict[str, Any]:
        """Return the response body as an object, raising on an error envelope."""
        return as_object(response.unwrap())

    @abstractmethod
    def _define_tools(self) -> None:
        """Populate ``self._tools``."""

    @property
    @abstractmethod
    def handlers(self) -> dict[str, Handler]:
        """Map tool names to handler coroutines."""

    def _tool(
        self,
        name: str,
        description: str,
        properties: Optional[dict[str, Any]] = None,
        required: Optional[list[str]] = None,
        execution_type: ExecutionType = ExecutionType.READ
    ) -> None:
        """Declare a tool with a closed input schema."""
        self._tools[name] = ToolDefinition(
            name=name,
            domain=self.domain,
            description=description,
            input_schema=strict_object(properties, required),
            execution_type=execution_type,
        )

    async def execute(
        self,
        action: str,
        parameters: dict[str, Any],
        context: ExecutionContext
    ) -> ToolResult:
        """
        Execute a tool.

        Args:
            action: External tool name
            parameters: Validated tool arguments
            context: Execution context

        Returns:
            Tool execution result
        """
        logger.debug("Hookbase action", domain=self.domain, action=action)

        handler = self.handlers.get(action)
        if not handler:
            return self._not_found(action)

        try:
            data = await handler(parameters, context)
        except HookbaseAPIError as e:
            return ToolResult(
                tool_name=action,
                status=ToolResultStatus.ERROR,
                error=e.message,
                error_code="API_ERROR",
                metadata={"http_status": e.status},
            )
        except ConfigurationNotInitializedError as e:
            return ToolResult(
                tool_name=action,
                status=ToolResultStatus.UNAVAILABLE,
                error=str(e),
                error_code="CONFIG_UNAVAILABLE",
            )

        return ToolResult(
            tool_name=action,
            status=ToolResultStatus.SUCCESS,
            data=data
        )

    def _not_found(self, action: str) -> ToolResult:
        """Create a not found result."""
        return ToolResult(
            tool_name=action,
            status=ToolResultStatus.NOT_FOUND,
            error=f"Action '{action}' not found in domain '{self.domain}'",
            error_code="ACTION_NOT_FOUND"
        )


def register_domain(router: "ToolRouter", adapter: HookbaseAdapter) -> None:
    """Register an adapter's tools and executor with the router."""
    router.registry.register_many(adapter.tools)
    router.register_adapter(adapter.domain, adapter.execute)
    logger.debug("Domain registered", domain=adapter.domain, tool_count=len(adapter.tools))
