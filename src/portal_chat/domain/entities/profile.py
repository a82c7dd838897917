from __future__ import annotations

from dataclasses import dataclass

from portal_chat.domain.value_objects.identity import Identity


@dataclass(frozen=True, slots=True)
class Profile:
    """Display data owned by the portal's student/faculty/admin records."""

    identity: Identity
    name: str
    email: str | None = None
    branch: str | None = None
