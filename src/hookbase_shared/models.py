"""Core data models for the Hookbase MCP server.

This module defines the shared data structures used across the adapter:
the resolved configuration, the request/response envelope, configuration
failures, and the tool/prompt/audit models used by the server.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from hookbase_shared.errors import HookbaseAPIError


class HookbaseConfig(BaseModel):
    """
    Resolved process-wide configuration.

    Created once by the configuration resolver and injected into the
    transport client. Immutable after construction.
    """
    model_config = ConfigDict(frozen=True)

    api_url: str
    api_key: str
    org_id: str


class OrganizationRef(BaseModel):
    """An organization returned by the identity lookup."""
    id: str
    name: str = ""
    slug: Optional[str] = None


class ConfigErrorKind(str, Enum):
    """Why configuration resolution failed."""
    MISSING_CREDENTIAL = "MissingCredential"
    INVALID_CREDENTIAL_FORMAT = "InvalidCredentialFormat"
    AUTHENTICATION_FAILED = "AuthenticationFailed"
    NO_ORGANIZATION = "NoOrganization"
    AMBIGUOUS_ORGANIZATION = "AmbiguousOrganization"
    NETWORK_ERROR = "NetworkError"


class ConfigError(BaseModel):
    """A tagged configuration resolution failure."""
    kind: ConfigErrorKind
    message: str
    candidates: list[OrganizationRef] = Field(default_factory=list)


ConfigResolution = Union[HookbaseConfig, ConfigError]


class ApiResponse(BaseModel):
    """
    Outcome of one HTTP round-trip.

    Carries exactly one of ``data`` or ``error``. ``status`` is always
    present; ``0`` means the request failed before a response arrived.
    """
    status: int
    data: Optional[Any] = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> "ApiResponse":
        if (self.data is None) == (self.error is None):
            raise ValueError("ApiResponse must carry exactly one of data or error")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the payload or raise the error as ``HookbaseAPIError``."""
        if self.error is not None:
            raise HookbaseAPIError(self.error, self.status)
        return self.data


class ExecutionType(str, Enum):
    """Type of tool execution - read operations vs write operations."""
    READ = "read"
    WRITE = "write"


class ToolDefinition(BaseModel):
    """
    Complete definition of an MCP tool.

    ``name`` is the external operation name announced to the host
    (e.g. ``hookbase_list_sources``). ``domain`` groups tools by the remote
    resource they operate on and selects the adapter that executes them.
    """
    name: str = Field(..., description="External operation name")
    domain: str = Field(..., description="Resource domain")
    description: str = Field(..., description="Clear description for LLM usage")

    input_schema: dict[str, Any] = Field(
        default_factory=dict,
        description="Closed JSON Schema for input validation"
    )

    execution_type: ExecutionType = Field(default=ExecutionType.READ)


class ExecutionContext(BaseModel):
    """Per-invocation metadata."""
    request_id: str = Field(..., description="Unique request identifier")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    source: str = Field(default="stdio", description="Request source")


class ToolCall(BaseModel):
    """A request to execute a specific tool."""
    tool_name: str = Field(..., description="External operation name")
    parameters: dict[str, Any] = Field(default_factory=dict)
    context: ExecutionContext


class ToolResultStatus(str, Enum):
    """Status of tool execution."""
    SUCCESS = "success"
    ERROR = "error"
    NOT_FOUND = "not_found"
    VALIDATION_ERROR = "validation_error"
    UNAVAILABLE = "unavailable"


class ToolResult(BaseModel):
    """
    Result of a tool execution.

    Contains the output data, status, and any error information.
    """
    tool_name: str
    status: ToolResultStatus
    data: Optional[Any] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    execution_time_ms: float = 0
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.status != ToolResultStatus.SUCCESS


class AuditEntry(BaseModel):
    """Audit log entry for one tool execution."""
    id: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    tool_name: str
    domain: str
    execution_type: ExecutionType

    parameters: dict[str, Any] = Field(default_factory=dict)

    status: ToolResultStatus
    error: Optional[str] = None
    http_status: Optional[int] = None
    execution_time_ms: float = 0

    request_id: str


class PromptArgument(BaseModel):
    """A single prompt argument (always a string on the wire)."""
    name: str
    description: str
    required: bool = False
    enum: Optional[list[str]] = None


class PromptDefinition(BaseModel):
    """A static prompt template exposed to the host."""
    name: str
    description: str
    arguments: list[PromptArgument] = Field(default_factory=list)
