"""Compile tool source and rebuild the shared tool namespace."""

import ast
import builtins
import keyword
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import CodeType, MappingProxyType
from typing import Any

from swarm_agent.core.logging import get_logger
from swarm_agent.tools.base import CompileError, ToolRecord

logger = get_logger("tools.compiler")


@dataclass(frozen=True)
class CompiledUnit:
    """One tool's compiled module code. Only meaningful inside a Namespace."""

    name: str
    code: CodeType


@dataclass(frozen=True)
class Namespace:
    """A complete, immutable snapshot of callable tools.

    All tool functions of one generation share ``_globals``, so a tool
    calling another tool by name resolves inside the same snapshot.
    """

    generation: int
    functions: Mapping[str, Callable[..., Any]]
    _globals: dict[str, Any] = field(repr=False, compare=False)

    @property
    def tool_names(self) -> list[str]:
        """Tool names in lexicographic order."""
        return sorted(self.functions)

    def get(self, name: str) -> Callable[..., Any] | None:
        """Look up a tool function."""
        return self.functions.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.functions

    def __len__(self) -> int:
        return len(self.functions)


EMPTY_NAMESPACE = Namespace(generation=0, functions=MappingProxyType({}), _globals={})


def validate_tool_name(name: str, reserved: Iterable[str] = ()) -> None:
    """Check that ``name`` can be a tool (and function) name.

    Raises:
        CompileError: If the name is not a usable identifier or is reserved
    """
    if not isinstance(name, str) or not name.isidentifier():
        raise CompileError(f"'{name}' is not a valid Python identifier", tool_name=str(name))
    if keyword.iskeyword(name) or keyword.issoftkeyword(name):
        raise CompileError(f"'{name}' is a Python keyword", tool_name=name)
    if name.startswith("_"):
        raise CompileError("tool names may not start with an underscore", tool_name=name)
    if name in reserved:
        raise CompileError("name is reserved by a native capability", tool_name=name)


def _location(node: ast.AST) -> str:
    return f"line {getattr(node, 'lineno', '?')}"


def _is_literal(node: ast.expr) -> bool:
    if isinstance(node, ast.Constant):
        return True
    return (
        isinstance(node, ast.UnaryOp)
        and isinstance(node.op, (ast.USub, ast.UAdd))
        and isinstance(node.operand, ast.Constant)
    )


def _check_definition_time(name: str, fn: ast.FunctionDef) -> None:
    """Reject anything ``def`` evaluates when executed.

    Decorators, defaults and annotations run during every rebuild, so they
    are limited to literals and plain names.
    """
    if fn.decorator_list:
        raise CompileError(
            "tool functions may not be decorated", tool_name=name, location=_location(fn.decorator_list[0])
        )

    args = fn.args
    defaults = [*args.defaults, *(d for d in args.kw_defaults if d is not None)]
    for default in defaults:
        if not _is_literal(default):
            raise CompileError(
                "default argument values must be literals", tool_name=name, location=_location(default)
            )

    params = [*args.posonlyargs, *args.args, *args.kwonlyargs, args.vararg, args.kwarg]
    annotations = [p.annotation for p in params if p is not None and p.annotation is not None]
    if fn.returns is not None:
        annotations.append(fn.returns)
    for annotation in annotations:
        if not isinstance(annotation, (ast.Constant, ast.Name)):
            raise CompileError(
                "annotations must be plain names or strings", tool_name=name, location=_location(annotation)
            )


def _check_shape(name: str, tree: ast.Module) -> None:
    """Enforce one top-level ``def <name>`` plus optional docstring and imports.

    Rebuilding executes every module body, so nothing else may run there.
    """
    defs = []
    for index, node in enumerate(tree.body):
        if isinstance(node, ast.FunctionDef):
            defs.append(node)
        elif isinstance(node, (ast.Import, ast.ImportFrom)):
            continue
        elif (
            index == 0
            and isinstance(node, ast.Expr)
            and isinstance(node.value, ast.Constant)
            and isinstance(node.value.value, str)
        ):
            continue
        elif isinstance(node, ast.AsyncFunctionDef):
            raise CompileError(
                "async tool functions are not supported", tool_name=name, location=_location(node)
            )
        else:
            raise CompileError(
                f"only a single function definition is allowed at top level, "
                f"found {type(node).__name__}",
                tool_name=name,
                location=_location(node),
            )

    if not defs:
        raise CompileError(f"source must define a function named '{name}'", tool_name=name)
    if len(defs) > 1:
        raise CompileError(
            f"source defines {len(defs)} functions, expected exactly one",
            tool_name=name,
            location=_location(defs[1]),
        )
    if defs[0].name != name:
        raise CompileError(
            f"function is named '{defs[0].name}' but the tool is named '{name}'",
            tool_name=name,
            location=_location(defs[0]),
        )
    _check_definition_time(name, defs[0])


def compile_tool(name: str, source: str) -> CompiledUnit:
    """Compile one tool's source.

    Args:
        name: Tool name; the source must define a function with this name
        source: Python source text

    Returns:
        CompiledUnit ready to be merged into a Namespace

    Raises:
        CompileError: On syntax errors or a source of the wrong shape
    """
    filename = f"<tool:{name}>"
    try:
        source.encode("utf-8")
    except UnicodeEncodeError as e:
        raise CompileError(f"source is not valid UTF-8 text: {e.reason}", tool_name=name) from e

    try:
        tree = ast.parse(source, filename=filename)
    except SyntaxError as e:
        location = f"line {e.lineno}, column {e.offset}" if e.lineno else None
        raise CompileError(e.msg, tool_name=name, location=location) from e
    except ValueError as e:
        # Null bytes and similar
        raise CompileError(str(e), tool_name=name) from e

    _check_shape(name, tree)

    try:
        code = compile(tree, filename, "exec")
    except (SyntaxError, ValueError) as e:
        raise CompileError(str(e), tool_name=name) from e

    return CompiledUnit(name=name, code=code)


def rebuild(
    records: Iterable[ToolRecord],
    capabilities: Mapping[str, Callable[..., Any]],
    generation: int = 1,
) -> Namespace:
    """Compile every tool into one fresh namespace.

    Equivalent to compiling the concatenation of all sources: every tool
    function shares one globals dict holding all tools and all native
    capabilities.

    Args:
        records: Every stored tool
        capabilities: Native capability callables, bound by name
        generation: Generation number for the new snapshot

    Returns:
        New Namespace (not yet published)

    Raises:
        CompileError: If any tool fails to compile or load
    """
    units = [compile_tool(r.name, r.source) for r in sorted(records, key=lambda r: r.name)]

    shared: dict[str, Any] = {"__builtins__": builtins, "__name__": "swarm_tools"}
    shared.update(capabilities)

    for unit in units:
        try:
            exec(unit.code, shared)
        except Exception as e:
            # Import statements are the only thing that can fail here
            raise CompileError(f"loading failed: {type(e).__name__}: {e}", tool_name=unit.name) from e

    functions = {}
    for unit in units:
        fn = shared.get(unit.name)
        if not callable(fn):
            raise CompileError("tool name is not bound to a function after loading", tool_name=unit.name)
        functions[unit.name] = fn

    # A hand-edited store can hold a file named after a capability
    for name in capabilities:
        if name in functions:
            raise CompileError("tool shadows a native capability", tool_name=name)

    logger.debug(f"Rebuilt namespace generation {generation} with {len(functions)} tools")
    return Namespace(
        generation=generation,
        functions=MappingProxyType(functions),
        _globals=shared,
    )
