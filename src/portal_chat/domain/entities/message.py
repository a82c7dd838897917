from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from portal_chat.domain.value_objects.identity import Identity


@dataclass(frozen=True, slots=True)
class Message:
    id: int
    sender: Identity
    receiver: Identity
    content: str
    created_at: datetime
    updated_at: datetime
    is_read: bool = False
