# Tools module - store, compiler, namespace registry, classifier and capabilities

from swarm_agent.tools.approval import ApprovalQueue, PendingProposal
from swarm_agent.tools.base import (
    AlreadyQueuedError,
    ArityMismatchError,
    Capability,
    CapabilityDefinition,
    CompileError,
    NetworkError,
    ParseError,
    RiskLevel,
    ToolExecutionError,
    ToolIOError,
    ToolNotFoundError,
    ToolOrigin,
    ToolRecord,
    ToolRuntimeError,
    ToolTimeoutError,
    ToolValidationError,
)
from swarm_agent.tools.classifier import classify, explain
from swarm_agent.tools.compiler import Namespace, compile_tool, rebuild, validate_tool_name
from swarm_agent.tools.executor import CapabilityExecutor
from swarm_agent.tools.registry import NamespaceRegistry
from swarm_agent.tools.store import ToolStore

__all__ = [
    "ApprovalQueue",
    "Capability",
    "CapabilityDefinition",
    "CapabilityExecutor",
    "Namespace",
    "NamespaceRegistry",
    "PendingProposal",
    "RiskLevel",
    "ToolOrigin",
    "ToolRecord",
    "ToolStore",
    "classify",
    "compile_tool",
    "explain",
    "rebuild",
    "validate_tool_name",
    "AlreadyQueuedError",
    "ArityMismatchError",
    "CompileError",
    "NetworkError",
    "ParseError",
    "ToolExecutionError",
    "ToolIOError",
    "ToolNotFoundError",
    "ToolRuntimeError",
    "ToolTimeoutError",
    "ToolValidationError",
]
