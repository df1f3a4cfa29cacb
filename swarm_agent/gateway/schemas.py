"""Peer wire message and gateway response schemas."""

import json
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator


class MessageKind(str, Enum):
    """Kind of an inbound peer message."""

    GENERIC = "generic"
    TOOL_SHARE = "tool_share"
    TOOL_REQUEST = "tool_request"


class PeerMessage(BaseModel):
    """Body of POST /message.

    Exactly one of the three shapes must be given:
    ``{"message": text}``, ``{"name": text, "source": text}`` or
    ``{"tool_request": name}``.
    """

    message: str | None = Field(default=None, description="Free-form text")
    name: str | None = Field(default=None, description="Shared tool name")
    source: str | None = Field(default=None, description="Shared tool source")
    tool_request: str | None = Field(default=None, description="Name of a tool to send back")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "hello from a peer"},
                {"name": "square", "source": "def square(x):\n    return str(int(x) ** 2)\n"},
                {"tool_request": "square"},
            ]
        }
    }

    @model_validator(mode="after")
    def _check_kind(self) -> "PeerMessage":
        share = self.name is not None or self.source is not None
        given = sum([self.message is not None, share, self.tool_request is not None])
        if given != 1:
            raise ValueError(
                "expected exactly one of 'message', 'name'+'source' or 'tool_request'"
            )
        if share and (self.name is None or self.source is None):
            raise ValueError("a tool share needs both 'name' and 'source'")
        return self

    @property
    def kind(self) -> MessageKind:
        """Which of the three shapes this message has."""
        if self.tool_request is not None:
            return MessageKind.TOOL_REQUEST
        if self.name is not None:
            return MessageKind.TOOL_SHARE
        return MessageKind.GENERIC

    @classmethod
    def from_body(cls, raw: bytes) -> "PeerMessage":
        """Parse a raw request body.

        A body that is not a JSON object is taken as plain text.

        Raises:
            pydantic.ValidationError: If a JSON object matches no shape
        """
        text = raw.decode("utf-8", errors="replace")
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            return cls(message=text)

        if isinstance(data, dict):
            return cls.model_validate(data)
        if isinstance(data, str):
            return cls(message=data)
        return cls(message=text)


class MessageAck(BaseModel):
    """Response to a generic message."""

    status: str = Field(default="ok")
    received: str = Field(..., description="Echo of the received text")


class ToolShareAck(BaseModel):
    """Response to a tool share (HTTP 202)."""

    status: str = Field(default="queued")
    name: str
    risk_level: str = Field(..., description="Risk level assigned at intake")
    sender_id: str = Field(..., description="Address the proposal is filed under")


class ToolSourceResponse(BaseModel):
    """Response to a tool request."""

    status: str = Field(default="ok")
    name: str
    source: str


class HealthResponse(BaseModel):
    """Response for GET /health."""

    status: str = Field(default="healthy")
    version: str = Field(default="0.1.0")
    timestamp: datetime
    tools: int = Field(default=0, description="Published tool count")
    pending: int = Field(default=0, description="Pending proposal count")


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error message")
    detail: str | None = Field(default=None, description="Additional details")
