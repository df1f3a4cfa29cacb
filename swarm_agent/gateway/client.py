"""Outbound side of the peer channel."""

from typing import Any

import httpx

from swarm_agent.core.config import Settings
from swarm_agent.core.logging import get_logger
from swarm_agent.tools.base import NetworkError, ToolTimeoutError

logger = get_logger("gateway.client")


class PeerClient:
    """Send messages, tool shares and tool requests to other agents.

    ``url`` is the peer's full message endpoint, e.g.
    ``http://127.0.0.1:8081/message``.
    """

    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None):
        """Initialize client.

        Args:
            settings: Runtime settings (network timeout)
            transport: Optional httpx transport, used by tests
        """
        self._settings = settings
        self._transport = transport

    def _post(self, url: str, payload: dict[str, Any], operation: str) -> httpx.Response:
        try:
            with httpx.Client(transport=self._transport, timeout=self._settings.network_timeout) as client:
                response = client.post(url, json=payload)
        except httpx.TimeoutException as e:
            logger.warning(f"{operation} to {url} timed out")
            raise ToolTimeoutError(f"Timed out contacting {url}", tool_name=operation) from e
        except httpx.HTTPError as e:
            logger.warning(f"{operation} to {url} failed: {e}")
            raise NetworkError(f"Error contacting {url}: {e}", tool_name=operation) from e
        return response

    @staticmethod
    def _raise_for_status(response: httpx.Response, operation: str) -> None:
        if response.is_error:
            raise NetworkError(
                f"Peer answered HTTP {response.status_code}: {response.text}",
                tool_name=operation,
            )

    def send_message(self, url: str, body: str) -> str:
        """Send a generic text message.

        Returns:
            The peer's response body as text

        Raises:
            NetworkError: On transport failure or an HTTP error status
            ToolTimeoutError: If the peer does not answer in time
        """
        response = self._post(url, {"message": body}, "send_message")
        self._raise_for_status(response, "send_message")
        logger.info(f"Sent message to {url} ({len(body)} chars)")
        return response.text

    def share_tool(self, url: str, name: str, source: str) -> dict[str, Any]:
        """Propose a tool to a peer; it lands in the peer's approval queue.

        Returns:
            The peer's acknowledgement (status, name, risk_level, sender_id)

        Raises:
            NetworkError: On transport failure or if the peer refuses the share
            ToolTimeoutError: If the peer does not answer in time
        """
        response = self._post(url, {"name": name, "source": source}, "share_tool")
        self._raise_for_status(response, "share_tool")
        logger.info(f"Shared tool {name} with {url}")
        return response.json()

    def request_tool(self, url: str, name: str) -> str:
        """Ask a peer for a tool's source.

        Returns:
            The tool source

        Raises:
            NetworkError: On transport failure, unknown tool, or a bad reply
            ToolTimeoutError: If the peer does not answer in time
        """
        response = self._post(url, {"tool_request": name}, "request_tool")
        self._raise_for_status(response, "request_tool")
        try:
            source = response.json()["source"]
        except (ValueError, KeyError, TypeError) as e:
            raise NetworkError(f"Unexpected reply from {url}", tool_name="request_tool") from e
        logger.info(f"Received tool {name} from {url}")
        return source
