"""Read side of the chat: history, conversation list and read receipts."""
from __future__ import annotations

import logging

from portal_chat.application.dto.conversation import ConversationView
from portal_chat.application.dto.message import EnrichedMessage
from portal_chat.application.dto.principal import Principal
from portal_chat.application.exceptions import PersistenceError
from portal_chat.application.uow import UnitOfWork
from portal_chat.domain.value_objects.identity import Identity

logger = logging.getLogger(__name__)


async def get_history(
    principal: Principal,
    counterpart: Identity,
    uow: UnitOfWork,
) -> list[EnrichedMessage]:
    """Return the whole thread and acknowledge what the caller received.

    The returned list is the snapshot read before the acknowledgement, so
    messages flipped by this call still show ``is_read=False``. Nothing is
    acknowledged unless the whole thread could be built.
    """
    caller = principal.identity
    history = await uow.messages.fetch_history(caller, counterpart)
    profiles = await uow.profiles.get_many((caller, counterpart))
    names = {identity: p.name for identity, p in profiles.items()}

    if any(m.receiver == caller and not m.is_read for m in history):
        updated = await uow.messages_w.mark_read(caller, counterpart)
        await uow.commit()
        logger.debug("Marked %d message(s) from %s read for %s", updated, counterpart, caller)

    return [
        EnrichedMessage(m, sender_name=names.get(m.sender), receiver_name=names.get(m.receiver))
        for m in history
    ]


async def list_conversations(
    principal: Principal,
    uow: UnitOfWork,
) -> list[ConversationView]:
    """Most recent conversation first. A store outage yields an empty list."""
    caller = principal.identity
    try:
        summaries = await uow.messages.list_by_participant(caller)
        profiles = await uow.profiles.get_many(s.counterpart for s in summaries)
    except PersistenceError:
        logger.warning("Conversation list unavailable for %s, returning none", caller)
        return []

    summaries.sort(
        key=lambda s: (s.last_message.created_at, s.last_message.id),
        reverse=True,
    )
    views: list[ConversationView] = []
    for summary in summaries:
        profile = profiles.get(summary.counterpart)
        views.append(
            ConversationView(
                counterpart_id=summary.counterpart.id,
                counterpart_role=summary.counterpart.role,
                counterpart_name=profile.name if profile else None,
                counterpart_email=profile.email if profile else None,
                last_message=summary.last_message.content,
                last_message_time=summary.last_message.created_at,
                unread_count=summary.unread_count,
            )
        )
    return views


async def mark_read(
    principal: Principal,
    counterpart: Identity,
    uow: UnitOfWork,
) -> int:
    """Acknowledge everything ``counterpart`` sent the caller. Idempotent."""
    updated = await uow.messages_w.mark_read(principal.identity, counterpart)
    await uow.commit()
    return updated
