from __future__ import annotations

from dataclasses import dataclass

from portal_chat.domain.value_objects.enums import Role


@dataclass(frozen=True, slots=True, order=True)
class Identity:
    """A participant: numeric ids are only unique within a role."""

    id: int
    role: Role

    def __str__(self) -> str:
        return f"{self.role}:{self.id}"


_OPPOSITE_ROLE: dict[Role, Role] = {
    Role.STUDENT: Role.FACULTY,
    Role.FACULTY: Role.STUDENT,
}


def default_counterpart_role(role: Role) -> Role | None:
    """Role assumed for a counterpart addressed by id only (None for admins)."""
    return _OPPOSITE_ROLE.get(role)
