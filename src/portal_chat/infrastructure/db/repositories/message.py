from __future__ import annotations

from sqlalchemy import and_, case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from portal_chat.application.ports.clock import Clock, SystemClock
from portal_chat.domain.entities.conversation import ConversationSummary
from portal_chat.domain.entities.message import Message
from portal_chat.domain.value_objects.enums import Role
from portal_chat.domain.value_objects.identity import Identity
from portal_chat.infrastructure.db.mappers import message as mapper
from portal_chat.infrastructure.db.models.message import MessageModel
from portal_chat.infrastructure.db.repositories._errors import storage_errors


def _is_sender(identity: Identity) -> ColumnElement[bool]:
    return and_(
        MessageModel.sender_id == identity.id,
        MessageModel.sender_role == identity.role,
    )


def _is_receiver(identity: Identity) -> ColumnElement[bool]:
    return and_(
        MessageModel.receiver_id == identity.id,
        MessageModel.receiver_role == identity.role,
    )


def _between(sender: Identity, receiver: Identity) -> ColumnElement[bool]:
    return and_(_is_sender(sender), _is_receiver(receiver))


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, message_id: int) -> Message | None:
        async with storage_errors("get_by_id"):
            model = await self._session.get(
                MessageModel, message_id, populate_existing=True,
            )
        return mapper.model_to_entity(model) if model else None

    async def fetch_history(self, a: Identity, b: Identity) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(or_(_between(a, b), _between(b, a)))
            .order_by(MessageModel.created_at.asc(), MessageModel.id.asc())
        )
        async with storage_errors("fetch_history"):
            result = await self._session.execute(stmt)
            models = result.scalars().all()
        return [mapper.model_to_entity(m) for m in models]

    async def list_by_participant(self, identity: Identity) -> list[ConversationSummary]:
        sent = _is_sender(identity)
        counterpart_id = case((sent, MessageModel.receiver_id), else_=MessageModel.sender_id)
        counterpart_role = case((sent, MessageModel.receiver_role), else_=MessageModel.sender_role)
        unread = case(
            (and_(_is_receiver(identity), MessageModel.is_read.is_(False)), 1),
            else_=0,
        )
        partition = (counterpart_id, counterpart_role)

        ranked = (
            select(
                MessageModel.id.label("message_id"),
                counterpart_id.label("counterpart_id"),
                counterpart_role.label("counterpart_role"),
                func.row_number()
                .over(
                    partition_by=partition,
                    order_by=(MessageModel.created_at.desc(), MessageModel.id.desc()),
                )
                .label("rn"),
                func.sum(unread).over(partition_by=partition).label("unread_count"),
            )
            .where(or_(sent, _is_receiver(identity)))
            .subquery()
        )
        stmt = (
            select(
                MessageModel,
                ranked.c.counterpart_id,
                ranked.c.counterpart_role,
                ranked.c.unread_count,
            )
            .join(ranked, MessageModel.id == ranked.c.message_id)
            .where(ranked.c.rn == 1)
            .order_by(MessageModel.created_at.desc(), MessageModel.id.desc())
        )
        async with storage_errors("list_by_participant"):
            result = await self._session.execute(stmt)
            rows = result.all()
        return [
            ConversationSummary(
                counterpart=Identity(int(cp_id), Role(cp_role)),
                last_message=mapper.model_to_entity(model),
                unread_count=int(unread_count or 0),
            )
            for model, cp_id, cp_role, unread_count in rows
        ]


class MessageWriterRepo:
    def __init__(self, session: AsyncSession, clock: Clock | None = None) -> None:
        self._session = session
        self._clock = clock or SystemClock()

    async def append(self, sender: Identity, receiver: Identity, content: str) -> Message:
        now = self._clock.now()
        model = MessageModel(
            sender_id=sender.id,
            sender_role=sender.role,
            receiver_id=receiver.id,
            receiver_role=receiver.role,
            content=content,
            timestamp=now,
            is_read=False,
            created_at=now,
            updated_at=now,
        )
        async with storage_errors("append"):
            self._session.add(model)
            await self._session.flush()
        return mapper.model_to_entity(model)

    async def mark_read(self, receiver: Identity, sender: Identity) -> int:
        stmt = (
            update(MessageModel)
            .where(_between(sender, receiver), MessageModel.is_read.is_(False))
            .values(is_read=True, updated_at=self._clock.now())
            .execution_options(synchronize_session=False)
        )
        async with storage_errors("mark_read"):
            result = await self._session.execute(stmt)
        return result.rowcount or 0
