from __future__ import annotations

from portal_chat.application.dto.conversation import ContactView
from portal_chat.application.dto.principal import Principal
from portal_chat.application.policies.permissions import assert_directory_access
from portal_chat.application.ports.presence import PresenceView
from portal_chat.application.uow import UnitOfWork
from portal_chat.domain.value_objects.enums import Role


async def list_contacts(
    principal: Principal,
    role: Role,
    uow: UnitOfWork,
    presence: PresenceView | None = None,
) -> list[ContactView]:
    """People of ``role`` the caller may start a conversation with."""
    assert_directory_access(principal, role)
    profiles = await uow.profiles.list_by_role(role)
    return [
        ContactView(
            id=p.identity.id,
            role=p.identity.role,
            name=p.name,
            email=p.email,
            branch=p.branch,
            status="online" if presence and presence.is_online(p.identity) else "offline",
        )
        for p in profiles
    ]
