from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, Enum, Index, Integer, Text, text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from portal_chat.domain.value_objects.enums import Role
from portal_chat.infrastructure.db.base import Base

RoleColumn = Enum(
    Role,
    name="participant_role",
    values_callable=lambda roles: [r.value for r in roles],
)


class MessageModel(Base):
    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    sender_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    sender_role: Mapped[Role] = mapped_column(RoleColumn, nullable=False)
    receiver_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    receiver_role: Mapped[Role] = mapped_column(RoleColumn, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    # Legacy column kept in step with created_at for older readers.
    timestamp: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    is_read: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )

    __table_args__ = (
        Index("ix_messages_sender", "sender_id", "sender_role"),
        Index("ix_messages_receiver", "receiver_id", "receiver_role"),
        Index("ix_messages_created_at", "created_at"),
        Index(
            "ix_messages_conversation",
            "sender_id",
            "receiver_id",
            "sender_role",
            "receiver_role",
        ),
    )
