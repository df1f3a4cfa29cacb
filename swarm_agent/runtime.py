"""Tool runtime: the single entry point for creating, sharing and running tools."""

import threading
from collections.abc import Iterable, Sequence
from typing import Any

import httpx

from swarm_agent.core.config import Settings, get_settings
from swarm_agent.core.logging import get_logger
from swarm_agent.gateway.server import PeerGateway
from swarm_agent.tools.approval import ApprovalQueue, PendingProposal
from swarm_agent.tools.base import ToolNotFoundError, ToolOrigin, ToolRecord
from swarm_agent.tools.builtin import register_builtin_capabilities
from swarm_agent.tools.compiler import Namespace, compile_tool, rebuild, validate_tool_name
from swarm_agent.tools.executor import CapabilityExecutor
from swarm_agent.tools.registry import NamespaceRegistry, validate_call_shape
from swarm_agent.tools.store import ToolStore

logger = get_logger("runtime")


class ToolRuntime:
    """Owns the Tool Store, the published namespace and everything around them.

    All writes (create, remove, enqueue, approve, reject) are serialized by
    one re-entrant lock. Every write that changes the tool set follows the
    same order: compile the whole candidate set, write the Store, publish.
    A failure at any step before publishing leaves the Store and the
    current namespace as they were. Reads never take the lock.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        scrape_transport: httpx.BaseTransport | None = None,
        peer_transport: httpx.BaseTransport | None = None,
    ):
        """Initialize runtime.

        The namespace starts empty; call ``load`` to compile the Store.

        Args:
            settings: Runtime settings (uses global if not provided)
            scrape_transport: Optional httpx transport for scrape_url
            peer_transport: Optional httpx transport for outbound peer calls
        """
        self.settings = settings or get_settings()
        self._write_lock = threading.RLock()

        self.store = ToolStore(self.settings.tools_dir)
        self.registry = NamespaceRegistry()
        self.capabilities = CapabilityExecutor(settings=self.settings)
        self.gateway = PeerGateway(self, self.settings, transport=peer_transport)
        self.approvals = ApprovalQueue(
            install=self._install_remote,
            lock=self._write_lock,
            reserved_names=self.capabilities.names,
        )

        register_builtin_capabilities(self, scrape_transport=scrape_transport)

    def _build(self, records: Iterable[ToolRecord]) -> Namespace:
        return rebuild(
            records,
            self.capabilities.bindings(),
            generation=self.registry.generation + 1,
        )

    def load(self) -> list[str]:
        """Compile every stored tool and publish the result.

        Returns:
            Names of the loaded tools

        Raises:
            CompileError: If a stored tool does not compile; nothing is published
            ToolIOError: If the Store cannot be read
        """
        with self._write_lock:
            namespace = self._build(self.store.load_all())
            self.registry.publish(namespace)
        logger.info(f"Loaded {len(namespace)} tools from {self.store.tools_dir}")
        return namespace.tool_names

    def install_tool(
        self,
        name: str,
        source: str,
        origin: ToolOrigin = ToolOrigin.LOCAL,
        sender_id: str | None = None,
    ) -> ToolRecord:
        """Add or replace a tool.

        Overwriting discards the previous source.

        Raises:
            CompileError: If the name is invalid or the new tool set does not compile
            ToolIOError: If the Store write fails
        """
        with self._write_lock:
            validate_tool_name(name, reserved=self.capabilities.names())
            compile_tool(name, source)

            candidate = ToolRecord(name=name, source=source, origin=origin, sender_id=sender_id)
            records = [r for r in self.store.load_all() if r.name != name]
            namespace = self._build([*records, candidate])

            record = self.store.save(name, source, origin=origin, sender_id=sender_id)
            self.registry.publish(namespace)

        logger.info(
            f"Installed tool {name} ({origin.value}"
            + (f" from {sender_id})" if sender_id else ")")
        )
        return record

    def create_tool(self, name: str, source: str) -> ToolRecord:
        """Create or overwrite a local tool.

        Raises:
            CompileError: If the source does not compile
            ToolIOError: If the Store write fails
        """
        return self.install_tool(name, source, origin=ToolOrigin.LOCAL)

    def _install_remote(self, name: str, source: str, sender_id: str) -> ToolRecord:
        return self.install_tool(name, source, origin=ToolOrigin.REMOTE, sender_id=sender_id)

    def remove_tool(self, name: str) -> None:
        """Delete a tool from the Store and the namespace.

        Raises:
            ToolNotFoundError: If the tool does not exist
            CompileError: If the remaining tools no longer compile (a tool
                that called the removed one still compiles; it fails when run)
            ToolIOError: If the file cannot be deleted
        """
        with self._write_lock:
            if not self.store.exists(name):
                raise ToolNotFoundError(f"Tool '{name}' not found")

            records = [r for r in self.store.load_all() if r.name != name]
            namespace = self._build(records)

            self.store.delete(name)
            self.registry.publish(namespace)

        logger.info(f"Removed tool {name}")

    def execute(self, name: str, args: Sequence[str] = ()) -> Any:
        """Run a tool, or a native capability when no tool has that name.

        Args:
            name: Tool or capability name
            args: Zero or one positional string argument

        Raises:
            ToolNotFoundError: If neither a tool nor a capability has this name
            ArityMismatchError: If the call shape is rejected
            ToolExecutionError: If the tool raises
            ToolRuntimeError: Whatever a capability raises
        """
        try:
            return self.registry.execute(name, args)
        except ToolNotFoundError:
            if name not in self.capabilities:
                raise

        call_args = validate_call_shape(name, args)
        return self.capabilities.call(name, *call_args)

    def call_capability(self, name: str, *args: Any) -> Any:
        """Call a native capability directly with positional arguments.

        Raises:
            ToolNotFoundError: If no capability has this name
            ToolValidationError: If the arguments do not match its schema
            ToolTimeoutError: If the call exceeds its timeout
        """
        return self.capabilities.call(name, *args)

    def list_tools(self) -> list[str]:
        """Names of the published tools, lexicographic."""
        return self.registry.list_tools()

    def inspect_tool(self, name: str) -> str:
        """Source text of a stored tool.

        Raises:
            ToolNotFoundError: If the tool does not exist
        """
        return self.store.get(name).source

    def list_pending(self) -> list[PendingProposal]:
        """Peer proposals awaiting a decision, in arrival order."""
        return self.approvals.list_pending()

    def approve(self, name: str, sender_id: str | None = None) -> ToolRecord:
        """Install a pending proposal.

        Raises:
            ToolNotFoundError: If no matching proposal is pending
            CompileError: If the proposal does not compile; it stays pending
        """
        return self.approvals.approve(name, sender_id)

    def reject(self, name: str, sender_id: str | None = None) -> PendingProposal:
        """Discard a pending proposal.

        Raises:
            ToolNotFoundError: If no matching proposal is pending
        """
        return self.approvals.reject(name, sender_id)

    def close(self) -> None:
        """Stop the gateway server and the capability worker pool."""
        self.gateway.stop()
        self.capabilities.shutdown()
        logger.info("Runtime closed")

    def __enter__(self) -> "ToolRuntime":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
