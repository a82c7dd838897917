from __future__ import annotations

from portal_chat.application.dto.principal import Principal
from portal_chat.application.exceptions import ForbiddenError, ValidationError
from portal_chat.domain.value_objects.enums import Role
from portal_chat.domain.value_objects.identity import Identity, default_counterpart_role

# Which directory each role may browse to start a conversation.
_DIRECTORY_ACCESS: dict[Role, frozenset[Role]] = {
    Role.STUDENT: frozenset({Role.FACULTY}),
    Role.FACULTY: frozenset({Role.STUDENT}),
    Role.ADMIN: frozenset(Role),
}


def assert_directory_access(principal: Principal, role: Role) -> None:
    if role not in _DIRECTORY_ACCESS[principal.role]:
        raise ForbiddenError("Access denied")


def resolve_counterpart(
    principal: Principal,
    counterpart_id: int,
    counterpart_role: Role | None,
) -> Identity:
    """Build the counterpart identity, filling in the role when implied."""
    role = counterpart_role or default_counterpart_role(principal.role)
    if role is None:
        raise ValidationError("Counterpart role is required")
    return Identity(counterpart_id, role)
