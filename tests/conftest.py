"""Shared fixtures: isolated settings and runtimes on temporary directories."""

import tempfile
from pathlib import Path

import pytest

from swarm_agent.core.config import Settings
from swarm_agent.runtime import ToolRuntime


@pytest.fixture
def tmp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def settings(tmp_dir):
    """Settings with every path inside the temporary directory."""
    return Settings(
        tools_dir=tmp_dir / "tools",
        config_file=tmp_dir / ".env",
        capability_timeout=5,
        network_timeout=2.0,
        rate_limit_enabled=False,
    )


@pytest.fixture
def runtime(settings):
    """A runtime over an empty Tool Store."""
    rt = ToolRuntime(settings=settings)
    rt.load()
    yield rt
    rt.close()
