"""Namespace registry: publishes tool namespaces and executes tools."""

import inspect
from collections.abc import Callable, Sequence
from typing import Any

from jsonschema import Draft7Validator

from swarm_agent.core.logging import get_logger
from swarm_agent.tools.base import ArityMismatchError, ToolExecutionError, ToolNotFoundError
from swarm_agent.tools.compiler import EMPTY_NAMESPACE, Namespace

logger = get_logger("tools.registry")

# A tool call takes zero or one positional string argument
CALL_SHAPE_SCHEMA: dict[str, Any] = {
    "type": "array",
    "maxItems": 1,
    "items": {"type": "string"},
}

_call_shape_validator = Draft7Validator(CALL_SHAPE_SCHEMA)


def validate_call_shape(name: str, args: Any) -> list[str]:
    """Validate the argument list of a tool call.

    Args:
        name: Tool being called (for error reporting)
        args: Positional arguments as given by the caller

    Returns:
        The arguments as a list

    Raises:
        ArityMismatchError: If the call shape is not zero or one string
    """
    if not isinstance(args, (list, tuple)):
        raise ArityMismatchError(
            message="arguments must be a sequence",
            tool_name=name,
            errors=[f"(root): {type(args).__name__} is not a list"],
        )

    args = list(args)
    errors: list[str] = []
    for error in _call_shape_validator.iter_errors(args):
        path = ".".join(str(p) for p in error.absolute_path) or "(root)"
        errors.append(f"{path}: {error.message}")

    if errors:
        raise ArityMismatchError(
            message=f"a tool takes zero or one string argument ({len(errors)} error(s))",
            tool_name=name,
            errors=errors,
        )
    return args


class NamespaceRegistry:
    """Holds the current tool Namespace and runs tools against it.

    Exactly one Namespace is current. ``publish`` replaces it with a single
    reference assignment, so a reader that fetched the snapshot keeps a
    complete, consistent view for the whole call even if a rebuild is
    published meanwhile. Writers are serialized by the runtime.
    """

    def __init__(self, namespace: Namespace = EMPTY_NAMESPACE):
        """Initialize with an initial (usually empty) namespace."""
        self._current = namespace

    @property
    def current(self) -> Namespace:
        """The currently published namespace."""
        return self._current

    @property
    def generation(self) -> int:
        """Generation number of the current namespace."""
        return self._current.generation

    def publish(self, namespace: Namespace) -> None:
        """Atomically make ``namespace`` the current one."""
        previous = self._current
        self._current = namespace
        logger.info(
            f"Published namespace generation {namespace.generation} "
            f"({len(namespace)} tools, was {len(previous)})"
        )

    def get(self, name: str) -> Callable[..., Any] | None:
        """Get a tool function by name.

        Returns:
            Tool function or None if not found
        """
        return self._current.get(name)

    def get_or_raise(self, name: str) -> Callable[..., Any]:
        """Get a tool function by name, raising if not found.

        Raises:
            ToolNotFoundError: If tool not found
        """
        fn = self.get(name)
        if fn is None:
            raise ToolNotFoundError(f"Tool '{name}' not found")
        return fn

    def execute(self, name: str, args: Sequence[str] = ()) -> Any:
        """Run a tool.

        Args:
            name: Tool name
            args: Zero or one positional string argument

        Returns:
            Whatever the tool function returns

        Raises:
            ToolNotFoundError: If no tool has this name
            ArityMismatchError: If the call shape is rejected
            ToolExecutionError: If the tool function raises
        """
        snapshot = self._current
        fn = snapshot.get(name)
        if fn is None:
            raise ToolNotFoundError(f"Tool '{name}' not found")

        call_args = validate_call_shape(name, args)
        try:
            inspect.signature(fn).bind(*call_args)
        except TypeError as e:
            raise ArityMismatchError(
                message=f"called with {len(call_args)} argument(s)",
                tool_name=name,
                errors=[str(e)],
            ) from e

        logger.debug(f"Executing tool {name} (generation {snapshot.generation})")
        try:
            return fn(*call_args)
        except Exception as e:
            logger.warning(f"Tool {name} raised {type(e).__name__}: {e}")
            raise ToolExecutionError(
                message=f"{type(e).__name__}: {e}",
                tool_name=name,
                details={"exception": type(e).__name__},
            ) from e

    def list_tools(self) -> list[str]:
        """List tool names in lexicographic order."""
        return self._current.tool_names

    def __len__(self) -> int:
        """Get number of published tools."""
        return len(self._current)

    def __contains__(self, name: str) -> bool:
        """Check if a tool is published."""
        return name in self._current
