from __future__ import annotations

from typing import Iterable, Protocol

from portal_chat.domain.entities.profile import Profile
from portal_chat.domain.value_objects.enums import Role
from portal_chat.domain.value_objects.identity import Identity


class ProfileReader(Protocol):
    async def get_many(self, identities: Iterable[Identity]) -> dict[Identity, Profile]:
        """Resolve display data; unknown identities are left out."""
        ...

    async def list_by_role(self, role: Role) -> list[Profile]: ...
