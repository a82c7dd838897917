from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from portal_chat.application.dto.message import EnrichedMessage
from portal_chat.domain.value_objects.enums import Role


class SendMessageRequest(BaseModel):
    receiver_id: int | None = None
    receiver_role: Role | None = None
    content: str | None = None


class MarkReadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sender_id: int = Field(alias="senderId")
    sender_role: Role = Field(alias="senderRole")


class MarkReadResponse(BaseModel):
    success: bool = True
    message: str = "Messages marked as read"
    updated: int = 0


class MessageResponse(BaseModel):
    id: int
    sender_id: int
    sender_role: Role
    receiver_id: int
    receiver_role: Role
    content: str
    timestamp: datetime
    is_read: bool
    created_at: datetime
    updated_at: datetime
    sender_name: str | None = None
    receiver_name: str | None = None

    @classmethod
    def from_enriched(cls, enriched: EnrichedMessage) -> MessageResponse:
        return cls.model_validate(enriched.to_payload())
