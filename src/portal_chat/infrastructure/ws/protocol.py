"""WebSocket message envelope models."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from portal_chat.domain.value_objects.enums import Role


class WsInbound(BaseModel):
    """Client → Server."""

    type: str  # joinRoom | sendMessage | markRead | ping
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str  # receiveMessage | error | pong
    data: dict[str, Any] = {}


class RoomAddress(BaseModel):
    """Payload of ``joinRoom``; sender fields are optional echoes of the token."""

    model_config = ConfigDict(populate_by_name=True)

    sender_id: int | None = Field(None, alias="senderId")
    sender_role: Role | None = Field(None, alias="senderRole")
    recipient_id: int = Field(alias="recipientId")
    recipient_role: Role = Field(alias="recipientRole")


class SendMessageData(RoomAddress):
    content: str | None = None
    # Client clock; the store assigns the authoritative timestamps.
    timestamp: str | None = None


class MarkReadData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sender_id: int = Field(alias="senderId")
    sender_role: Role = Field(alias="senderRole")
