"""HTTP routes of the peer gateway."""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from slowapi import Limiter
from starlette.concurrency import run_in_threadpool

from swarm_agent import __version__
from swarm_agent.core.config import Settings
from swarm_agent.core.logging import get_logger
from swarm_agent.gateway.schemas import (
    ErrorResponse,
    HealthResponse,
    MessageAck,
    MessageKind,
    PeerMessage,
    ToolShareAck,
    ToolSourceResponse,
)
from swarm_agent.tools.base import AlreadyQueuedError, CompileError, ToolNotFoundError

if TYPE_CHECKING:
    from swarm_agent.runtime import ToolRuntime

logger = get_logger("gateway.routes")

def _runtime(request: Request) -> "ToolRuntime":
    return request.app.state.runtime


def _error(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail).model_dump(),
    )



def create_router(limiter: Limiter, settings: Settings) -> APIRouter:
    """Build the gateway routes.

    ``/message`` is rate limited per peer address by ``limiter``, at the
    rate configured in ``settings``. Each app passes its own limiter.
    """
    router = APIRouter()

    @router.get("/health", response_model=HealthResponse)
    async def health_check(request: Request) -> HealthResponse:
        """Health check endpoint."""
        runtime = _runtime(request)
        return HealthResponse(
            status="healthy",
            version=__version__,
            timestamp=datetime.now(UTC),
            tools=len(runtime.registry),
            pending=len(runtime.approvals),
        )

    @router.post(
        "/message",
        responses={
            202: {"model": ToolShareAck, "description": "Tool share queued for approval"},
            404: {"model": ErrorResponse, "description": "Requested tool not found"},
            409: {"model": ErrorResponse, "description": "Same tool already queued from this peer"},
            422: {"model": ErrorResponse, "description": "Malformed message or invalid tool name"},
        },
    )
    @limiter.limit(settings.rate_limit)
    async def receive_message(request: Request) -> JSONResponse:
        """Receive a message from a peer.

        The body is a JSON object of one of three kinds (generic text, tool
        share, tool request). A body that is not JSON is a generic message.
        Peers are not authenticated; the sender is identified by its address.
        """
        runtime = _runtime(request)
        sender_id = request.client.host if request.client else "unknown"

        try:
            message = PeerMessage.from_body(await request.body())
        except ValidationError as e:
            logger.warning(f"Malformed peer message from {sender_id}")
            return _error(
                status.HTTP_422_UNPROCESSABLE_ENTITY,
                "Malformed message",
                "; ".join(err["msg"] for err in e.errors(include_url=False)),
            )

        if message.kind == MessageKind.TOOL_SHARE:
            try:
                proposal = await run_in_threadpool(
                    runtime.approvals.enqueue, message.name, message.source, sender_id
                )
            except AlreadyQueuedError as e:
                return _error(status.HTTP_409_CONFLICT, "Already queued", e.message)
            except CompileError as e:
                return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, "Invalid tool name", e.message)

            ack = ToolShareAck(
                name=proposal.name,
                risk_level=proposal.risk_level.label,
                sender_id=proposal.sender_id,
            )
            return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content=ack.model_dump())

        if message.kind == MessageKind.TOOL_REQUEST:
            name = message.tool_request
            logger.info(f"Peer {sender_id} requested tool {name}")
            try:
                source = await run_in_threadpool(runtime.inspect_tool, name)
            except ToolNotFoundError as e:
                return _error(status.HTTP_404_NOT_FOUND, "Tool not found", e.message)
            return JSONResponse(content=ToolSourceResponse(name=name, source=source).model_dump())

        runtime.gateway.record_message(message.message, sender_id)
        return JSONResponse(content=MessageAck(received=message.message).model_dump())

    return router
