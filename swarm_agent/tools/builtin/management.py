"""Tool management capabilities - list, inspect and remove tools."""

from typing import TYPE_CHECKING, Any

from swarm_agent.tools.base import Capability, CapabilityDefinition

if TYPE_CHECKING:
    from swarm_agent.runtime import ToolRuntime

_NAME_SCHEMA = {
    "type": "object",
    "properties": {"name": {"type": "string", "minLength": 1, "description": "Tool name"}},
    "required": ["name"],
    "additionalProperties": False,
}


class ListToolsCapability(Capability):
    """Capability that lists the currently published tools."""

    def __init__(self, runtime: "ToolRuntime"):
        self._runtime = runtime

    @property
    def definition(self) -> CapabilityDefinition:
        return CapabilityDefinition(
            name="list_tools",
            description="List available tool names in lexicographic order",
            input_schema={"type": "object", "properties": {}, "additionalProperties": False},
            timeout_seconds=5,
        )

    def execute(self, **kwargs: Any) -> list[str]:
        return self._runtime.list_tools()


class InspectToolCapability(Capability):
    """Capability that returns a tool's source text."""

    def __init__(self, runtime: "ToolRuntime"):
        self._runtime = runtime

    @property
    def definition(self) -> CapabilityDefinition:
        return CapabilityDefinition(
            name="inspect_tool",
            description="Return the source code of a tool",
            input_schema=_NAME_SCHEMA,
            timeout_seconds=5,
        )

    def execute(self, **kwargs: Any) -> str:
        return self._runtime.inspect_tool(kwargs["name"])


class RemoveToolCapability(Capability):
    """Capability that deletes a tool and rebuilds the namespace.

    The removed source cannot be recovered.
    """

    def __init__(self, runtime: "ToolRuntime"):
        self._runtime = runtime

    @property
    def definition(self) -> CapabilityDefinition:
        return CapabilityDefinition(
            name="remove_tool",
            description="Delete a tool permanently",
            input_schema=_NAME_SCHEMA,
            timeout_seconds=30,
        )

    def execute(self, **kwargs: Any) -> None:
        self._runtime.remove_tool(kwargs["name"])
