"""Peer messaging capabilities - send messages and start the gateway."""

from typing import TYPE_CHECKING, Any

from swarm_agent.tools.base import Capability, CapabilityDefinition

if TYPE_CHECKING:
    from swarm_agent.gateway.server import PeerGateway


class SendMessageCapability(Capability):
    """Capability that posts a text message to another agent."""

    def __init__(self, gateway: "PeerGateway"):
        self._gateway = gateway

    @property
    def definition(self) -> CapabilityDefinition:
        return CapabilityDefinition(
            name="send_message",
            description="Send a text message to a peer's /message endpoint",
            input_schema={
                "type": "object",
                "properties": {
                    "url": {"type": "string", "pattern": "^https?://", "description": "Peer endpoint"},
                    "body": {"type": "string", "description": "Message text"},
                },
                "required": ["url", "body"],
                "additionalProperties": False,
            },
            timeout_seconds=30,
        )

    def execute(self, **kwargs: Any) -> str:
        return self._gateway.client.send_message(kwargs["url"], kwargs["body"])


class StartServerCapability(Capability):
    """Capability that starts the peer gateway on a port.

    Accepts the port as an integer or a string of digits.
    """

    def __init__(self, gateway: "PeerGateway"):
        self._gateway = gateway

    @property
    def definition(self) -> CapabilityDefinition:
        return CapabilityDefinition(
            name="start_server",
            description="Start listening for peer messages on a port",
            input_schema={
                "type": "object",
                "properties": {
                    "port": {
                        "type": ["integer", "string"],
                        "pattern": "^[0-9]{1,5}$",
                        "minimum": 0,
                        "maximum": 65535,
                        "description": "Port to listen on",
                    },
                },
                "required": ["port"],
                "additionalProperties": False,
            },
            timeout_seconds=15,
        )

    def execute(self, **kwargs: Any) -> str:
        return self._gateway.start_server(int(kwargs["port"]))
