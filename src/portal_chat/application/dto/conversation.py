from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from portal_chat.domain.value_objects.enums import Role


@dataclass(frozen=True, slots=True)
class ConversationView:
    counterpart_id: int
    counterpart_role: Role
    counterpart_name: str | None
    counterpart_email: str | None
    last_message: str
    last_message_time: datetime
    unread_count: int


@dataclass(frozen=True, slots=True)
class ContactView:
    id: int
    role: Role
    name: str
    email: str | None
    branch: str | None
    status: str = "offline"
