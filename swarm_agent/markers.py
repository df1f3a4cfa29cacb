"""Parse tool markers out of free text produced by a conversational loop.

Two forms are recognized:

- ``[TOOL: square(7)]`` asks for a tool to be run with one argument.
- A fenced ``python`` block whose lines include ``# filename: <name>``
  defines a tool to create.
"""

import re
from dataclasses import dataclass

INVOCATION_PATTERN = re.compile(r"\[TOOL:\s*([A-Za-z_][A-Za-z0-9_]*)\s*\((.*?)\)\s*\]", re.DOTALL)
DEFINITION_PATTERN = re.compile(r"```python[^\n]*\n(.*?)```", re.DOTALL)
FILENAME_PATTERN = re.compile(r"^\s*#\s*filename:\s*(\S+)\s*$", re.MULTILINE)

_QUOTES = ("'", '"')


@dataclass(frozen=True)
class ToolInvocation:
    """One ``[TOOL: name(arg)]`` marker."""

    name: str
    argument: str | None = None

    @property
    def args(self) -> list[str]:
        """Argument list in the shape ``ToolRuntime.execute`` takes."""
        return [] if self.argument is None else [self.argument]


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
        return value[1:-1]
    return value


def parse_tool_invocations(text: str) -> list[ToolInvocation]:
    """Find every tool invocation marker in ``text``, in order."""
    invocations = []
    for match in INVOCATION_PATTERN.finditer(text):
        raw = match.group(2).strip()
        invocations.append(
            ToolInvocation(name=match.group(1), argument=_strip_quotes(raw) if raw else None)
        )
    return invocations


def extract_tool_definitions(text: str) -> list[tuple[str, str]]:
    """Find tool definitions in fenced python blocks.

    Returns:
        (name, source) pairs in order; blocks without a filename line are skipped
    """
    definitions = []
    for match in DEFINITION_PATTERN.finditer(text):
        code = match.group(1)
        filename = FILENAME_PATTERN.search(code)
        if filename is None:
            continue
        name = filename.group(1)
        if name.endswith(".py"):
            name = name[: -len(".py")]
        definitions.append((name, code))
    return definitions
