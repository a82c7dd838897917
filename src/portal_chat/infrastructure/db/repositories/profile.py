from __future__ import annotations

from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal_chat.domain.entities.profile import Profile
from portal_chat.domain.value_objects.enums import Role
from portal_chat.domain.value_objects.identity import Identity
from portal_chat.infrastructure.db.mappers import profile as mapper
from portal_chat.infrastructure.db.repositories._errors import storage_errors


class ProfileReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_many(self, identities: Iterable[Identity]) -> dict[Identity, Profile]:
        ids_by_role: dict[Role, set[int]] = {}
        for identity in identities:
            ids_by_role.setdefault(identity.role, set()).add(identity.id)

        found: dict[Identity, Profile] = {}
        for role, ids in ids_by_role.items():
            model_cls = mapper.MODEL_BY_ROLE[role]
            stmt = select(model_cls).where(model_cls.id.in_(ids))
            async with storage_errors("profiles.get_many"):
                result = await self._session.execute(stmt)
                models = result.scalars().all()
            for model in models:
                profile = mapper.model_to_entity(model, role)
                found[profile.identity] = profile
        return found

    async def list_by_role(self, role: Role) -> list[Profile]:
        model_cls = mapper.MODEL_BY_ROLE[role]
        stmt = select(model_cls).order_by(model_cls.name, model_cls.id)
        async with storage_errors("profiles.list_by_role"):
            result = await self._session.execute(stmt)
            models = result.scalars().all()
        return [mapper.model_to_entity(m, role) for m in models]
