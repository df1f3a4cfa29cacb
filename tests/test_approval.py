"""Tests for the approval queue."""

import threading

import pytest

from swarm_agent.tools.approval import ApprovalQueue
from swarm_agent.tools.base import (
    AlreadyQueuedError,
    CompileError,
    RiskLevel,
    ToolNotFoundError,
    ToolOrigin,
)

PEER = "10.0.0.2"
OTHER_PEER = "10.0.0.3"
SQUARE = "def square(x):\n    return str(int(x) ** 2)\n"
WRITER = "def writer(x):\n    write_file('out.txt', x)\n    return 'ok'\n"


class TestApprovalQueue:
    """Tests for ApprovalQueue on its own."""

    @pytest.fixture
    def installed(self):
        """Calls made to the install callback."""
        return []

    @pytest.fixture
    def queue(self, installed):
        """Create a queue that records installs."""
        def install(name, source, sender_id):
            installed.append((name, source, sender_id))
            return name

        return ApprovalQueue(install=install, reserved_names=lambda: ["read_file"])

    def test_enqueue_classifies(self, queue):
        """Test that proposals are classified on arrival."""
        proposal = queue.enqueue("writer", WRITER, PEER)

        assert proposal.risk_level == RiskLevel.HIGH_RISK
        assert proposal.risk_reasons == ("write_file",)
        assert queue.list_pending() == [proposal]

    def test_duplicate_rejected(self, queue):
        """Test that the same name from the same sender cannot queue twice."""
        queue.enqueue("square", SQUARE, PEER)

        with pytest.raises(AlreadyQueuedError):
            queue.enqueue("square", SQUARE, PEER)
        assert len(queue) == 1

    def test_same_name_different_senders(self, queue):
        """Test that different peers may propose the same name."""
        queue.enqueue("square", SQUARE, PEER)
        queue.enqueue("square", SQUARE, OTHER_PEER)

        assert [p.sender_id for p in queue.list_pending()] == [PEER, OTHER_PEER]

    def test_invalid_name_rejected(self, queue):
        """Test that invalid or reserved names never enter the queue."""
        with pytest.raises(CompileError):
            queue.enqueue("../evil", SQUARE, PEER)
        with pytest.raises(CompileError):
            queue.enqueue("read_file", SQUARE, PEER)
        assert queue.list_pending() == []

    def test_arrival_order(self, queue):
        """Test that pending proposals keep arrival order."""
        queue.enqueue("zeta", SQUARE, PEER)
        queue.enqueue("alpha", SQUARE, PEER)

        assert [p.name for p in queue.list_pending()] == ["zeta", "alpha"]

    def test_approve_installs_and_removes(self, queue, installed):
        """Test approving a proposal."""
        queue.enqueue("square", SQUARE, PEER)
        queue.approve("square", PEER)

        assert installed == [("square", SQUARE, PEER)]
        assert queue.list_pending() == []

    def test_approve_without_sender_takes_earliest(self, queue, installed):
        """Test that the earliest proposal wins when no sender is given."""
        queue.enqueue("square", SQUARE, PEER)
        queue.enqueue("square", SQUARE, OTHER_PEER)
        queue.approve("square")

        assert installed[0][2] == PEER
        assert [p.sender_id for p in queue.list_pending()] == [OTHER_PEER]

    def test_second_approve_not_found(self, queue):
        """Test that a proposal can only be approved once."""
        queue.enqueue("square", SQUARE, PEER)
        queue.approve("square", PEER)

        with pytest.raises(ToolNotFoundError):
            queue.approve("square", PEER)

    def test_reject(self, queue, installed):
        """Test rejecting discards without installing."""
        queue.enqueue("square", SQUARE, PEER)
        rejected = queue.reject("square", PEER)

        assert rejected.name == "square"
        assert installed == []
        with pytest.raises(ToolNotFoundError):
            queue.reject("square", PEER)

    def test_shared_lock(self, installed):
        """Test that the queue accepts a lock shared with its owner."""
        lock = threading.RLock()
        queue = ApprovalQueue(install=lambda *args: installed.append(args), lock=lock)
        queue.enqueue("square", SQUARE, PEER)

        with lock:
            queue.approve("square")
        assert installed == [("square", SQUARE, PEER)]

    def test_failed_install_keeps_proposal(self):
        """Test that a proposal stays queued if installing it fails."""
        def install(name, source, sender_id):
            raise CompileError("broken", tool_name=name)

        queue = ApprovalQueue(install=install)
        queue.enqueue("square", SQUARE, PEER)

        with pytest.raises(CompileError):
            queue.approve("square")
        assert "square" in queue


class TestApprovalFlow:
    """End-to-end approval through the runtime."""

    def test_full_flow(self, runtime):
        """Test enqueue, list, approve, run and a second approve."""
        runtime.approvals.enqueue("square", SQUARE, PEER)

        pending = runtime.list_pending()
        assert [(p.name, p.sender_id, p.risk_level) for p in pending] == [
            ("square", PEER, RiskLevel.SAFE)
        ]
        # Not visible before approval
        assert runtime.list_tools() == []
        with pytest.raises(ToolNotFoundError):
            runtime.inspect_tool("square")

        record = runtime.approve("square", PEER)
        assert record.origin == ToolOrigin.REMOTE
        assert record.sender_id == PEER
        assert runtime.execute("square", ["4"]) == "16"
        assert runtime.list_pending() == []
        assert runtime.store.get("square").sender_id == PEER

        with pytest.raises(ToolNotFoundError):
            runtime.approve("square", PEER)

    def test_reject_leaves_store_untouched(self, runtime):
        """Test that rejection never writes anything."""
        runtime.approvals.enqueue("square", SQUARE, PEER)
        runtime.reject("square", PEER)

        assert runtime.store.names() == []
        assert runtime.list_tools() == []

    def test_broken_proposal_stays_pending(self, runtime):
        """Test that a proposal which does not compile cannot be approved."""
        runtime.approvals.enqueue("broken", "def broken(:\n", PEER)

        with pytest.raises(CompileError):
            runtime.approve("broken")
        assert [p.name for p in runtime.list_pending()] == ["broken"]
        assert runtime.store.names() == []
