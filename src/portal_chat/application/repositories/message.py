from __future__ import annotations

from typing import Protocol

from portal_chat.domain.entities.conversation import ConversationSummary
from portal_chat.domain.entities.message import Message
from portal_chat.domain.value_objects.identity import Identity


class MessageReader(Protocol):
    async def get_by_id(self, message_id: int) -> Message | None: ...

    async def fetch_history(self, a: Identity, b: Identity) -> list[Message]:
        """Both directions of the pair, oldest first (created_at, then id)."""
        ...

    async def list_by_participant(self, identity: Identity) -> list[ConversationSummary]:
        """One summary per distinct counterpart of ``identity``."""
        ...


class MessageWriter(Protocol):
    async def append(self, sender: Identity, receiver: Identity, content: str) -> Message:
        """Insert an unread message; the store assigns id and timestamps."""
        ...

    async def mark_read(self, receiver: Identity, sender: Identity) -> int:
        """Flip unread messages sender -> receiver. Returns rows changed."""
        ...
