from __future__ import annotations

import logging

from portal_chat.application.dto.message import EnrichedMessage
from portal_chat.application.dto.principal import Principal
from portal_chat.application.exceptions import PersistenceError, ValidationError
from portal_chat.application.uow import UnitOfWork
from portal_chat.domain.value_objects.enums import Role
from portal_chat.domain.value_objects.identity import Identity
from portal_chat.services.broadcaster import Broadcaster

logger = logging.getLogger(__name__)

_MISSING_FIELDS = "Receiver ID, receiver role, and message content are required"


async def send_message(
    principal: Principal,
    receiver_id: int | None,
    receiver_role: Role | None,
    content: str | None,
    uow: UnitOfWork,
    broadcaster: Broadcaster,
) -> EnrichedMessage:
    """Store a message from the caller and fan it out live.

    Shared by the HTTP and WebSocket ingress paths. Validation and store
    failures raise; nothing after the commit does.
    """
    if receiver_id is None or receiver_role is None:
        raise ValidationError(_MISSING_FIELDS)
    if content is None or not content.strip():
        raise ValidationError(_MISSING_FIELDS)

    sender = principal.identity
    receiver = Identity(receiver_id, receiver_role)
    try:
        msg = await uow.messages_w.append(sender, receiver, content)
        await uow.commit()
    except PersistenceError:
        await uow.rollback()
        logger.warning("Send %s -> %s failed, message not stored", sender, receiver)
        raise

    logger.info("Stored message %d %s -> %s", msg.id, sender, receiver)
    return await broadcaster.deliver(msg, uow.profiles)
