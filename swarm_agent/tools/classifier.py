"""Static risk classification of tool source.

This is a lexical filter feeding a human approval step, not a sandbox. It
looks for references to native capabilities and to the Python features that
reach past them. Indirection it cannot see (names assembled at runtime,
attribute chains on objects handed in by other tools) goes unnoticed.
"""

import ast

from swarm_agent.tools.base import RiskLevel

# Capabilities with a known risk level
CAPABILITY_RISK: dict[str, RiskLevel] = {
    "list_tools": RiskLevel.LOW_RISK,
    "inspect_tool": RiskLevel.LOW_RISK,
    "send_message": RiskLevel.LOW_RISK,
    "read_file": RiskLevel.MEDIUM_RISK,
    "scrape_url": RiskLevel.MEDIUM_RISK,
    "write_file": RiskLevel.HIGH_RISK,
}

# Native capabilities outside the known table; referencing them is HIGH_RISK
UNRANKED_CAPABILITIES = frozenset({"remove_tool", "search", "clone_agent", "start_server"})

# Builtins that bypass the capability set entirely
ESCAPE_HATCHES = frozenset({
    "open",
    "exec",
    "eval",
    "compile",
    "__import__",
    "getattr",
    "setattr",
    "delattr",
    "globals",
    "locals",
    "vars",
    "breakpoint",
    "input",
})

IMPORT_MARKER = "<import>"
DUNDER_MARKER = "<dunder>"


def _referenced_names(tree: ast.AST) -> set[str]:
    """Collect every identifier a parsed source could use to reach a capability."""
    names: set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Name):
            names.add(node.id)
        elif isinstance(node, ast.Attribute):
            names.add(node.attr)
            if node.attr.startswith("__") and node.attr.endswith("__"):
                names.add(DUNDER_MARKER)
        elif isinstance(node, ast.Constant) and isinstance(node.value, str):
            # globals()["write_file"] style lookups
            if node.value in CAPABILITY_RISK or node.value in UNRANKED_CAPABILITIES:
                names.add(node.value)
        elif isinstance(node, (ast.Import, ast.ImportFrom)):
            names.add(IMPORT_MARKER)
    return names


def _risk_of(name: str) -> RiskLevel | None:
    if name in CAPABILITY_RISK:
        return CAPABILITY_RISK[name]
    if name in UNRANKED_CAPABILITIES or name in ESCAPE_HATCHES:
        return RiskLevel.HIGH_RISK
    if name in (IMPORT_MARKER, DUNDER_MARKER):
        return RiskLevel.HIGH_RISK
    return None


def explain(source: str) -> dict[str, RiskLevel]:
    """Return each risky reference found in ``source`` with its level.

    Unparseable source yields ``{"<unparseable>": HIGH_RISK}``.
    """
    try:
        tree = ast.parse(source)
    except (SyntaxError, ValueError):
        return {"<unparseable>": RiskLevel.HIGH_RISK}

    findings = {}
    for name in sorted(_referenced_names(tree)):
        level = _risk_of(name)
        if level is not None:
            findings[name] = level
    return findings


def classify(source: str) -> RiskLevel:
    """Classify tool source by the most dangerous thing it references."""
    return max(explain(source).values(), default=RiskLevel.SAFE)
