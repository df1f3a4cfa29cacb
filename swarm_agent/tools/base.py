"""Base types for tools, native capabilities and runtime errors."""

from abc import ABC, abstractmethod
from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ToolOrigin(str, Enum):
    """Where a stored tool came from."""

    LOCAL = "local"  # Created by this agent
    REMOTE = "remote"  # Shared by a peer and approved


class RiskLevel(IntEnum):
    """Ordered risk levels assigned by the safety classifier."""

    SAFE = 0  # Pure computation
    LOW_RISK = 1  # Introspection and messaging
    MEDIUM_RISK = 2  # Reads files or the web
    HIGH_RISK = 3  # Writes, clones, or escapes the capability set

    @property
    def label(self) -> str:
        """Wire/display name, e.g. ``medium_risk``."""
        return self.name.lower()


class ToolRecord(BaseModel):
    """A stored tool: its name, source text and origin."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Unique tool name, also the function name")
    source: str = Field(..., description="Python source defining the tool function")
    origin: ToolOrigin = Field(default=ToolOrigin.LOCAL)
    sender_id: str | None = Field(default=None, description="Peer that shared the tool")


class CapabilityDefinition(BaseModel):
    """Definition of a native capability for registration."""

    name: str = Field(..., description="Unique capability name")
    description: str = Field(..., description="Human-readable description")
    input_schema: dict[str, Any] = Field(
        ..., description="JSON Schema for the arguments; property order is positional order"
    )
    timeout_seconds: int = Field(default=30, ge=1, le=300, description="Execution timeout")

    @property
    def parameters(self) -> list[str]:
        """Argument names in positional order."""
        return list(self.input_schema.get("properties", {}))


class Capability(ABC):
    """Abstract base class for native capabilities.

    Capabilities are bound by name into every tool namespace and can also be
    called directly by the runtime's callers.
    """

    @property
    @abstractmethod
    def definition(self) -> CapabilityDefinition:
        """Return the capability definition."""
        ...

    @abstractmethod
    def execute(self, **kwargs: Any) -> Any:
        """Run the capability with validated inputs.

        Raises:
            ToolRuntimeError: A subclass describing the failure
        """
        ...

    @property
    def name(self) -> str:
        """Get capability name."""
        return self.definition.name

    @property
    def description(self) -> str:
        """Get capability description."""
        return self.definition.description

    @property
    def input_schema(self) -> dict[str, Any]:
        """Get input JSON Schema."""
        return self.definition.input_schema

    def bind_arguments(self, args: tuple[Any, ...]) -> dict[str, Any]:
        """Map positional arguments onto schema property names.

        Raises:
            ArityMismatchError: If too many or too few arguments are given
        """
        params = self.definition.parameters
        required = self.input_schema.get("required", [])
        if len(args) > len(params):
            raise ArityMismatchError(
                message=f"takes at most {len(params)} argument(s), got {len(args)}",
                tool_name=self.name,
                errors=[f"unexpected argument at position {len(params)}"],
            )
        if len(args) < len(required):
            raise ArityMismatchError(
                message=f"takes at least {len(required)} argument(s), got {len(args)}",
                tool_name=self.name,
                errors=[f"missing argument '{p}'" for p in required[len(args):]],
            )
        return dict(zip(params, args))


class ToolRuntimeError(Exception):
    """Base class for every error the runtime reports to its callers."""

    def __init__(self, message: str, tool_name: str | None = None):
        self.message = message
        self.tool_name = tool_name
        if tool_name:
            super().__init__(f"Tool '{tool_name}': {message}")
        else:
            super().__init__(message)


class CompileError(ToolRuntimeError):
    """Tool source failed to parse or does not have the required shape."""

    def __init__(self, message: str, tool_name: str | None = None, location: str | None = None):
        self.location = location
        if location:
            message = f"{message} (at {location})"
        super().__init__(message, tool_name)


class ToolNotFoundError(ToolRuntimeError):
    """No tool, capability or pending proposal with the requested name."""


class ToolValidationError(ToolRuntimeError):
    """Error validating the arguments of a call."""

    def __init__(self, message: str, tool_name: str, errors: list[str]):
        self.errors = errors
        super().__init__(f"validation failed: {message}", tool_name)


class ArityMismatchError(ToolValidationError):
    """Call shape rejected before invocation."""


class AlreadyQueuedError(ToolRuntimeError):
    """A proposal with the same name from the same sender is pending."""


class ToolIOError(ToolRuntimeError):
    """Filesystem failure."""


class NetworkError(ToolRuntimeError):
    """Outbound HTTP or peer channel failure."""


class ToolTimeoutError(ToolRuntimeError):
    """A network or IO-backed operation exceeded its timeout."""


class ParseError(ToolRuntimeError):
    """Fetched content could not be interpreted."""


class ToolExecutionError(ToolRuntimeError):
    """The tool's own logic raised while running."""

    def __init__(self, message: str, tool_name: str, details: dict[str, Any] | None = None):
        self.details = details or {}
        super().__init__(f"failed: {message}", tool_name)
