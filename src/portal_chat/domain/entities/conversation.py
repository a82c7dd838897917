from __future__ import annotations

from dataclasses import dataclass

from portal_chat.domain.entities.message import Message
from portal_chat.domain.value_objects.identity import Identity


@dataclass(frozen=True, slots=True)
class ConversationSummary:
    """Derived view of one conversation from a participant's side."""

    counterpart: Identity
    last_message: Message
    unread_count: int
