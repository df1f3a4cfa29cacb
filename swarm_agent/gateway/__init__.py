# Gateway module - peer messaging over HTTP

from swarm_agent.gateway.client import PeerClient
from swarm_agent.gateway.routes import create_router
from swarm_agent.gateway.schemas import (
    ErrorResponse,
    HealthResponse,
    MessageAck,
    MessageKind,
    PeerMessage,
    ToolShareAck,
    ToolSourceResponse,
)
from swarm_agent.gateway.server import InboxMessage, PeerGateway, create_gateway_app

__all__ = [
    "create_gateway_app",
    "create_router",
    "InboxMessage",
    "PeerClient",
    "PeerGateway",
    "ErrorResponse",
    "HealthResponse",
    "MessageAck",
    "MessageKind",
    "PeerMessage",
    "ToolShareAck",
    "ToolSourceResponse",
]
