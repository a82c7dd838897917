from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    STUDENT = "student"
    FACULTY = "faculty"
    ADMIN = "admin"


class ConversationKeyMode(StrEnum):
    ROLE_QUALIFIED = "role_qualified"
    LEGACY = "legacy"
