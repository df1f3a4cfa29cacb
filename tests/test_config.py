"""Tests for settings and logging setup."""

import logging
import sys
from pathlib import Path

from swarm_agent.core.config import Settings
from swarm_agent.core.logging import get_logger, setup_logging


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch):
        """Test local-first defaults."""
        monkeypatch.delenv("PORT", raising=False)
        monkeypatch.delenv("HOST", raising=False)
        settings = Settings(_env_file=None)

        assert settings.host == "127.0.0.1"
        assert settings.port == 8080
        assert settings.tools_dir == Path("tools")
        assert settings.workspace_root is None

    def test_env_override(self, monkeypatch):
        """Test that environment variables are read case-insensitively."""
        monkeypatch.setenv("TOOLS_DIR", "/tmp/swarm-tools")
        monkeypatch.setenv("rate_limit_requests", "5")
        settings = Settings(_env_file=None)

        assert settings.tools_dir == Path("/tmp/swarm-tools")
        assert settings.rate_limit == "5/minute"

    def test_effective_executable_configured(self, tmp_dir):
        """Test that a configured executable wins."""
        settings = Settings(_env_file=None, executable_path=tmp_dir / "bin")
        assert settings.effective_executable == tmp_dir / "bin"

    def test_effective_executable_fallback(self, monkeypatch):
        """Test falling back to the interpreter when argv[0] is not a file."""
        monkeypatch.setattr(sys, "argv", ["-c"])
        settings = Settings(_env_file=None)
        assert settings.effective_executable == Path(sys.executable)


class TestLogging:
    """Tests for logging setup."""

    def test_loggers_are_namespaced(self):
        """Test that module loggers live under the swarm root logger."""
        assert get_logger("tools.store").name == "swarm.tools.store"

    def test_setup_levels(self):
        """Test debug and info levels."""
        setup_logging(debug=True)
        assert logging.getLogger("swarm").level == logging.DEBUG
        setup_logging(debug=False)
        assert logging.getLogger("swarm").level == logging.INFO
        assert len(logging.getLogger("swarm").handlers) == 1
