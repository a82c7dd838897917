from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from portal_chat.domain.value_objects.enums import Role


class ConversationResponse(BaseModel):
    counterpart_id: int
    counterpart_name: str | None
    counterpart_email: str | None
    counterpart_role: Role
    last_message: str
    last_message_time: datetime
    unread_count: int

    model_config = {"from_attributes": True}


class ContactResponse(BaseModel):
    id: int
    name: str
    email: str | None
    role: Role
    branch: str | None = None
    status: str

    model_config = {"from_attributes": True}
