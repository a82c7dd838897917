"""Enrichment and live fanout of stored messages."""
from __future__ import annotations

import logging

from portal_chat.application.dto.message import EnrichedMessage
from portal_chat.application.exceptions import BroadcastError
from portal_chat.application.ports.bus import EventPublisher
from portal_chat.application.repositories.profile import ProfileReader
from portal_chat.domain.entities.message import Message
from portal_chat.domain.value_objects.conversation_key import conversation_key
from portal_chat.domain.value_objects.enums import ConversationKeyMode

logger = logging.getLogger(__name__)

RECEIVE_MESSAGE = "receiveMessage"


class Broadcaster:
    """Pushes each stored message to everyone watching its conversation.

    Delivery runs after the store commit. Failures here are logged and
    swallowed: the message is already durable and shows up on the next
    history fetch. The sending connection is not excluded; clients drop
    duplicates by message id.
    """

    def __init__(
        self,
        publisher: EventPublisher,
        channel: str,
        *,
        key_mode: ConversationKeyMode = ConversationKeyMode.ROLE_QUALIFIED,
    ) -> None:
        self._publisher = publisher
        self._channel = channel
        self._key_mode = key_mode

    async def deliver(self, message: Message, profiles: ProfileReader) -> EnrichedMessage:
        try:
            enriched = await self.enrich(message, profiles)
        except BroadcastError:
            logger.warning("Live delivery skipped for message %d", message.id, exc_info=True)
            return EnrichedMessage(message)

        try:
            await self.fanout(enriched)
        except BroadcastError:
            logger.warning("Live delivery failed for message %d", message.id, exc_info=True)
        return enriched

    async def enrich(self, message: Message, profiles: ProfileReader) -> EnrichedMessage:
        try:
            found = await profiles.get_many((message.sender, message.receiver))
        except Exception as exc:
            raise BroadcastError(f"Enrichment failed for message {message.id}") from exc

        sender = found.get(message.sender)
        receiver = found.get(message.receiver)
        return EnrichedMessage(
            message,
            sender_name=sender.name if sender else None,
            receiver_name=receiver.name if receiver else None,
        )

    async def fanout(self, enriched: EnrichedMessage) -> None:
        key = conversation_key(enriched.sender, enriched.receiver, mode=self._key_mode)
        payload = {
            "event_type": RECEIVE_MESSAGE,
            "conversation_key": key,
            "message": enriched.to_payload(),
        }
        try:
            await self._publisher.publish(self._channel, payload)
        except Exception as exc:
            raise BroadcastError(f"Fanout to {key} failed") from exc
