from __future__ import annotations

from dataclasses import dataclass

from portal_chat.domain.value_objects.enums import Role
from portal_chat.domain.value_objects.identity import Identity


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity extracted from JWT."""

    role: Role
    subject_id: int

    @property
    def identity(self) -> Identity:
        return Identity(self.subject_id, self.role)

    @property
    def principal_key(self) -> str:
        """Unique key for WS connection registry."""
        return str(self.identity)
