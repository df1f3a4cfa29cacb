# Native capabilities bound into every tool namespace

from typing import TYPE_CHECKING

import httpx

from swarm_agent.tools.builtin.clone import CloneAgentCapability
from swarm_agent.tools.builtin.files import ReadFileCapability, WriteFileCapability
from swarm_agent.tools.builtin.management import (
    InspectToolCapability,
    ListToolsCapability,
    RemoveToolCapability,
)
from swarm_agent.tools.builtin.messaging import SendMessageCapability, StartServerCapability
from swarm_agent.tools.builtin.web import ScrapeUrlCapability, SearchCapability

if TYPE_CHECKING:
    from swarm_agent.runtime import ToolRuntime

__all__ = [
    "CloneAgentCapability",
    "InspectToolCapability",
    "ListToolsCapability",
    "ReadFileCapability",
    "RemoveToolCapability",
    "ScrapeUrlCapability",
    "SearchCapability",
    "SendMessageCapability",
    "StartServerCapability",
    "WriteFileCapability",
]


def register_builtin_capabilities(
    runtime: "ToolRuntime", scrape_transport: httpx.BaseTransport | None = None
) -> None:
    """Register all native capabilities with the runtime's executor.

    Args:
        runtime: Runtime owning the executor, store and gateway
        scrape_transport: Optional httpx transport for scrape_url, used by tests
    """
    executor = runtime.capabilities
    executor.register(ListToolsCapability(runtime))
    executor.register(InspectToolCapability(runtime))
    executor.register(RemoveToolCapability(runtime))
    executor.register(ReadFileCapability(executor))
    executor.register(WriteFileCapability(executor))
    executor.register(SearchCapability())
    executor.register(ScrapeUrlCapability(runtime.settings, transport=scrape_transport))
    executor.register(CloneAgentCapability(runtime.settings))
    executor.register(SendMessageCapability(runtime.gateway))
    executor.register(StartServerCapability(runtime.gateway))
