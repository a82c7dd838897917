"""Seed development data: chat schema, two profiles and a short thread."""
from __future__ import annotations

import asyncio
import logging

from sqlalchemy.dialects.postgresql import insert as pg_insert

from portal_chat.config import settings
from portal_chat.domain.value_objects.enums import Role
from portal_chat.domain.value_objects.identity import Identity
from portal_chat.infrastructure.db.base import Base
from portal_chat.infrastructure.db.models import FacultyModel, StudentModel
from portal_chat.infrastructure.db.session import AsyncSessionLocal, engine
from portal_chat.infrastructure.db.uow import SqlAlchemyUoW
from portal_chat.logging_setup import configure_logging

logger = logging.getLogger(__name__)

STUDENT = Identity(1, Role.STUDENT)
FACULTY = Identity(2, Role.FACULTY)


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        await session.execute(
            pg_insert(StudentModel)
            .values(id=STUDENT.id, name="Asha Rao", email="asha@example.edu", branch="CSE")
            .on_conflict_do_nothing(index_elements=["id"])
        )
        await session.execute(
            pg_insert(FacultyModel)
            .values(id=FACULTY.id, name="Dr. Menon", email="menon@example.edu", branch="CSE")
            .on_conflict_do_nothing(index_elements=["id"])
        )

        uow = SqlAlchemyUoW(session)
        thread = [
            (STUDENT, FACULTY, "Hello"),
            (FACULTY, STUDENT, "Hi Asha, how can I help?"),
            (STUDENT, FACULTY, "Could we move Thursday's review?"),
        ]
        for sender, receiver, content in thread:
            await uow.messages_w.append(sender, receiver, content)

        await uow.commit()
        logger.info("Seeded %d messages between %s and %s", len(thread), STUDENT, FACULTY)


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
