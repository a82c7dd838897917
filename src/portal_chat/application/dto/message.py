from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from portal_chat.domain.entities.message import Message
from portal_chat.domain.value_objects.identity import Identity


@dataclass(frozen=True, slots=True)
class EnrichedMessage:
    """A stored message plus the display names resolved at delivery time."""

    message: Message
    sender_name: str | None = None
    receiver_name: str | None = None

    @property
    def id(self) -> int:
        return self.message.id

    @property
    def sender(self) -> Identity:
        return self.message.sender

    @property
    def receiver(self) -> Identity:
        return self.message.receiver

    def to_payload(self) -> dict[str, object]:
        """Wire shape shared by the REST response and ``receiveMessage``."""
        m = self.message
        return {
            "id": m.id,
            "sender_id": m.sender.id,
            "sender_role": str(m.sender.role),
            "receiver_id": m.receiver.id,
            "receiver_role": str(m.receiver.role),
            "content": m.content,
            "timestamp": _iso(m.created_at),
            "is_read": m.is_read,
            "created_at": _iso(m.created_at),
            "updated_at": _iso(m.updated_at),
            "sender_name": self.sender_name,
            "receiver_name": self.receiver_name,
        }


def _iso(ts: datetime) -> str:
    return ts.isoformat()
