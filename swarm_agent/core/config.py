"""Runtime configuration with local-first defaults."""

import logging
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("swarm.core.config")


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Peer gateway
    host: str = Field(
        default="127.0.0.1",
        description="Gateway bind host (keep on loopback or a trusted LAN)",
    )
    port: int = Field(default=8080, ge=0, le=65535, description="Gateway port")
    debug: bool = Field(default=False, description="Debug mode")

    # Tool store
    tools_dir: Path = Field(default=Path("tools"), description="Tool Store directory")

    # Native capabilities
    capability_timeout: int = Field(
        default=30, ge=1, le=300, description="Timeout in seconds for a native capability call"
    )
    capability_workers: int = Field(
        default=4, ge=1, le=64, description="Worker threads for blocking capability calls"
    )
    network_timeout: float = Field(
        default=10.0, gt=0, le=120, description="Timeout in seconds for outbound HTTP"
    )
    scrape_word_limit: int = Field(
        default=200, ge=1, le=10000, description="Words kept from a scraped page"
    )
    workspace_root: Path | None = Field(
        default=None,
        description="If set, read_file/write_file are confined to this directory",
    )

    # Self-cloning
    config_file: Path = Field(
        default=Path(".env"), description="Config file copied by clone_agent when present"
    )
    executable_path: Path | None = Field(
        default=None, description="Executable copied by clone_agent (defaults to the launched program)"
    )

    # Rate limiting
    rate_limit_requests: int = Field(
        default=60, ge=1, le=10000, description="Max inbound peer messages per minute per client"
    )
    rate_limit_enabled: bool = Field(default=True, description="Enable rate limiting")

    # Request limits
    max_request_size: int = Field(
        default=1048576,
        ge=1024,
        le=10485760,
        description="Maximum request body size in bytes (1MB default)",
    )

    @property
    def rate_limit(self) -> str:
        """Rate limit expression for the peer message endpoint."""
        return f"{self.rate_limit_requests}/minute"

    @property
    def effective_executable(self) -> Path:
        """Resolve which file clone_agent copies as the running executable."""
        if self.executable_path is not None:
            return self.executable_path

        launched = Path(sys.argv[0]) if sys.argv and sys.argv[0] else None
        if launched is not None and launched.is_file():
            return launched.resolve()

        logger.debug("Launched program is not a file, falling back to the interpreter")
        return Path(sys.executable)


def get_settings() -> Settings:
    """Get runtime settings instance."""
    return Settings()
