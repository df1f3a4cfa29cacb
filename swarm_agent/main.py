"""Swarm Agent - Main entry point with startup initialization."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from swarm_agent.core.config import Settings, get_settings
from swarm_agent.core.logging import get_logger, setup_logging
from swarm_agent.gateway.server import create_gateway_app
from swarm_agent.runtime import ToolRuntime

logger = get_logger("main")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the gateway application around a fresh runtime.

    The Tool Store is compiled at startup; a store that does not compile
    aborts startup.
    """
    settings = settings or get_settings()
    runtime = ToolRuntime(settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler for startup/shutdown."""
        setup_logging(debug=settings.debug)
        logger.info("Starting swarm agent...")

        names = runtime.load()
        logger.info(f"Loaded {len(names)} tools: {', '.join(names) or '(none)'}")
        logger.info(f"Native capabilities: {', '.join(runtime.capabilities.names())}")

        logger.info("Agent startup complete")
        yield

        logger.info("Shutting down swarm agent...")
        runtime.close()
        logger.info("Shutdown complete")

    return create_gateway_app(runtime, settings, lifespan=lifespan)


def main():
    """Start the agent server."""
    settings = get_settings()

    uvicorn.run(
        "swarm_agent.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
