from __future__ import annotations

from portal_chat.domain.entities.message import Message
from portal_chat.domain.value_objects.enums import Role
from portal_chat.domain.value_objects.identity import Identity
from portal_chat.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        sender=Identity(model.sender_id, Role(model.sender_role)),
        receiver=Identity(model.receiver_id, Role(model.receiver_role)),
        content=model.content,
        created_at=model.created_at,
        updated_at=model.updated_at,
        is_read=model.is_read,
    )
