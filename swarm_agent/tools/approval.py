"""Approval queue for tools proposed by peers.

Proposals are classified once on arrival and wait here until a caller
approves or rejects them. Nothing in the queue is visible to the Tool Store
or the namespace until ``approve`` installs it.
"""

import threading
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from swarm_agent.core.logging import get_logger
from swarm_agent.tools import classifier
from swarm_agent.tools.base import AlreadyQueuedError, RiskLevel, ToolNotFoundError, ToolRecord
from swarm_agent.tools.compiler import validate_tool_name

logger = get_logger("tools.approval")

Installer = Callable[[str, str, str], ToolRecord]


class PendingProposal(BaseModel):
    """A peer-proposed tool awaiting a decision. Immutable once queued."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Proposed tool name")
    source: str = Field(..., description="Proposed tool source")
    sender_id: str = Field(..., description="Address of the proposing peer")
    risk_level: RiskLevel = Field(..., description="Risk computed at intake")
    risk_reasons: tuple[str, ...] = Field(default=(), description="References that set the risk")
    received_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def key(self) -> tuple[str, str]:
        """Queue key: (name, sender_id)."""
        return (self.name, self.sender_id)


class ApprovalQueue:
    """Arrival-ordered staging area for peer tool proposals.

    Mutations run under the runtime's write lock, the same lock that guards
    Store writes and namespace publication. Readers get an immutable tuple
    snapshot that is replaced after every mutation.
    """

    def __init__(
        self,
        install: Installer,
        lock: "threading.RLock | None" = None,
        reserved_names: Callable[[], Iterable[str]] = lambda: (),
    ):
        """Initialize queue.

        Args:
            install: Writes an approved tool through to Store and namespace;
                called as ``install(name, source, sender_id)``
            lock: Write lock shared with the runtime
            reserved_names: Names a tool may not take (native capabilities)
        """
        self._install = install
        self._lock = lock or threading.RLock()
        self._reserved_names = reserved_names
        self._pending: dict[tuple[str, str], PendingProposal] = {}
        self._snapshot: tuple[PendingProposal, ...] = ()

    def _publish(self) -> None:
        self._snapshot = tuple(self._pending.values())

    def enqueue(self, name: str, source: str, sender_id: str) -> PendingProposal:
        """Classify and queue a proposal.

        Raises:
            CompileError: If the name cannot be a tool name
            AlreadyQueuedError: If (name, sender_id) is already pending
        """
        validate_tool_name(name, reserved=set(self._reserved_names()))
        findings = classifier.explain(source)
        risk = max(findings.values(), default=RiskLevel.SAFE)

        with self._lock:
            if (name, sender_id) in self._pending:
                raise AlreadyQueuedError(
                    f"A proposal from {sender_id} is already pending", tool_name=name
                )
            proposal = PendingProposal(
                name=name,
                source=source,
                sender_id=sender_id,
                risk_level=risk,
                risk_reasons=tuple(findings),
            )
            self._pending[proposal.key] = proposal
            self._publish()

        logger.info(
            f"Queued tool {name} from {sender_id} as {risk.label}"
            + (f" ({', '.join(findings)})" if findings else "")
        )
        return proposal

    def list_pending(self) -> list[PendingProposal]:
        """Pending proposals in arrival order."""
        return list(self._snapshot)

    def _find(self, name: str, sender_id: str | None) -> PendingProposal:
        for proposal in self._snapshot:
            if proposal.name == name and (sender_id is None or proposal.sender_id == sender_id):
                return proposal
        if sender_id is None:
            raise ToolNotFoundError(f"No pending proposal named '{name}'")
        raise ToolNotFoundError(f"No pending proposal named '{name}' from {sender_id}")

    def get(self, name: str, sender_id: str | None = None) -> PendingProposal:
        """Find a pending proposal; without ``sender_id`` the earliest match.

        Raises:
            ToolNotFoundError: If nothing matches
        """
        return self._find(name, sender_id)

    def approve(self, name: str, sender_id: str | None = None) -> ToolRecord:
        """Install a pending proposal and remove it from the queue.

        Without ``sender_id`` the earliest proposal with that name is used.
        If installation fails the proposal stays queued.

        Raises:
            ToolNotFoundError: If nothing matches
            CompileError: If the proposed source does not compile
            ToolIOError: If the Store write fails
        """
        with self._lock:
            proposal = self._find(name, sender_id)
            record = self._install(proposal.name, proposal.source, proposal.sender_id)
            del self._pending[proposal.key]
            self._publish()

        logger.info(f"Approved tool {proposal.name} from {proposal.sender_id} ({proposal.risk_level.label})")
        return record

    def reject(self, name: str, sender_id: str | None = None) -> PendingProposal:
        """Discard a pending proposal without touching Store or namespace.

        Raises:
            ToolNotFoundError: If nothing matches
        """
        with self._lock:
            proposal = self._find(name, sender_id)
            del self._pending[proposal.key]
            self._publish()

        logger.info(f"Rejected tool {proposal.name} from {proposal.sender_id}")
        return proposal

    def __len__(self) -> int:
        return len(self._snapshot)

    def __contains__(self, name: str) -> bool:
        return any(p.name == name for p in self._snapshot)
