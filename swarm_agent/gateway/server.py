"""Peer gateway application and its background server."""

import socket
import threading
import time
from collections import deque
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import httpx
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from swarm_agent import __version__
from swarm_agent.core.config import Settings
from swarm_agent.core.logging import get_logger
from swarm_agent.gateway.client import PeerClient
from swarm_agent.gateway.routes import create_router
from swarm_agent.tools.base import NetworkError

if TYPE_CHECKING:
    from swarm_agent.runtime import ToolRuntime

logger = get_logger("gateway.server")

INBOX_SIZE = 1000
STARTUP_TIMEOUT = 10.0
SHUTDOWN_TIMEOUT = 5.0


class InboxMessage(BaseModel):
    """A generic message received from a peer."""

    model_config = ConfigDict(frozen=True)

    sender_id: str
    text: str
    received_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


def create_gateway_app(
    runtime: "ToolRuntime",
    settings: Settings,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[None]] | None = None,
) -> FastAPI:
    """Create the FastAPI application serving the peer channel."""
    app = FastAPI(
        title="Swarm Agent Gateway",
        description="Peer messaging and tool sharing between agents",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.runtime = runtime

    # Rate limiting, one limiter per app
    limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.middleware("http")
    async def validate_content_length(request: Request, call_next):
        """Reject oversized peer messages before reading them."""
        content_length = request.headers.get("content-length")
        if content_length:
            try:
                length = int(content_length)
                if length > settings.max_request_size:
                    max_size = settings.max_request_size
                    return JSONResponse(
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                        content={"detail": f"Request too large. Max: {max_size} bytes"},
                    )
            except ValueError:
                return JSONResponse(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    content={"detail": "Invalid Content-Length header"},
                )

        return await call_next(request)

    app.include_router(create_router(limiter, settings))

    return app


class PeerGateway:
    """Runs the gateway server on a background thread and keeps the inbox.

    There is no authentication on the peer channel: anything that can reach
    the bound address can send messages and propose tools. Bind it to
    loopback or a trusted network only.
    """

    def __init__(
        self,
        runtime: "ToolRuntime",
        settings: Settings,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize gateway.

        Args:
            runtime: Runtime whose tools and approval queue the routes use
            settings: Runtime settings
            transport: Optional httpx transport for outbound calls, used by tests
        """
        self._runtime = runtime
        self.settings = settings
        self.client = PeerClient(settings, transport=transport)
        self._inbox: deque[InboxMessage] = deque(maxlen=INBOX_SIZE)
        self._inbox_lock = threading.Lock()
        self._lock = threading.Lock()
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None
        self._address: tuple[str, int] | None = None

    @property
    def running(self) -> bool:
        """Whether the server thread is serving."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def port(self) -> int | None:
        """Bound port, or None when not running."""
        return self._address[1] if self._address else None

    @property
    def address(self) -> str | None:
        """Base URL of the running server, or None."""
        if self._address is None:
            return None
        host, port = self._address
        return f"http://{host}:{port}"

    def _bind(self, host: str, port: int) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
        except (OSError, OverflowError) as e:
            sock.close()
            raise NetworkError(f"Cannot bind {host}:{port}: {e}", tool_name="start_server") from e
        return sock

    def start_server(self, port: int | None = None) -> str:
        """Start serving the peer channel.

        Args:
            port: Port to listen on; 0 picks a free port, None uses settings

        Returns:
            Status line with the bound address

        Raises:
            NetworkError: If the port cannot be bound or the server fails to start
        """
        with self._lock:
            if self.running:
                logger.warning(f"Gateway already listening on {self.address}")
                return f"Server already listening on {self.address}"

            host = self.settings.host
            sock = self._bind(host, self.settings.port if port is None else port)
            bound_port = sock.getsockname()[1]

            config = uvicorn.Config(
                create_gateway_app(self._runtime, self.settings),
                log_level="debug" if self.settings.debug else "warning",
            )
            server = uvicorn.Server(config)
            thread = threading.Thread(
                target=server.run,
                kwargs={"sockets": [sock]},
                name="peer-gateway",
                daemon=True,
            )
            thread.start()

            deadline = time.monotonic() + STARTUP_TIMEOUT
            while not server.started:
                if not thread.is_alive() or time.monotonic() > deadline:
                    server.should_exit = True
                    sock.close()
                    raise NetworkError(
                        f"Gateway failed to start on {host}:{bound_port}", tool_name="start_server"
                    )
                time.sleep(0.01)

            self._server = server
            self._thread = thread
            self._address = (host, bound_port)

        logger.info(f"Gateway listening on {self.address}")
        return f"Server started on {self.address}"

    def stop(self) -> None:
        """Stop the server if it is running."""
        with self._lock:
            if self._server is None:
                return
            self._server.should_exit = True
            if self._thread is not None:
                self._thread.join(timeout=SHUTDOWN_TIMEOUT)
            address = self.address
            self._server = None
            self._thread = None
            self._address = None

        logger.info(f"Gateway on {address} stopped")

    def record_message(self, text: str, sender_id: str) -> InboxMessage:
        """Store an inbound generic message."""
        message = InboxMessage(sender_id=sender_id, text=text)
        with self._inbox_lock:
            self._inbox.append(message)
        logger.info(f"Message from {sender_id}: {text[:200]}")
        return message

    def inbox(self) -> list[InboxMessage]:
        """Received messages, oldest first, without removing them."""
        with self._inbox_lock:
            return list(self._inbox)

    def drain_inbox(self) -> list[InboxMessage]:
        """Received messages, oldest first, emptying the inbox."""
        with self._inbox_lock:
            messages = list(self._inbox)
            self._inbox.clear()
        return messages
