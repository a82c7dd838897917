"""Shared test fixtures."""
from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

import pytest

from portal_chat.application.dto.principal import Principal
from portal_chat.application.exceptions import PersistenceError
from portal_chat.domain.entities.conversation import ConversationSummary
from portal_chat.domain.entities.message import Message
from portal_chat.domain.entities.profile import Profile
from portal_chat.domain.value_objects.enums import Role
from portal_chat.domain.value_objects.identity import Identity

STUDENT_1 = Identity(1, Role.STUDENT)
FACULTY_2 = Identity(2, Role.FACULTY)
FACULTY_3 = Identity(3, Role.FACULTY)
ADMIN_1 = Identity(1, Role.ADMIN)


@pytest.fixture
def student_principal() -> Principal:
    return Principal(role=Role.STUDENT, subject_id=1)


@pytest.fixture
def faculty_principal() -> Principal:
    return Principal(role=Role.FACULTY, subject_id=2)


@pytest.fixture
def admin_principal() -> Principal:
    return Principal(role=Role.ADMIN, subject_id=1)


def make_profiles() -> dict[Identity, Profile]:
    return {
        STUDENT_1: Profile(STUDENT_1, "Asha Rao", "asha@example.edu", "CSE"),
        FACULTY_2: Profile(FACULTY_2, "Dr. Menon", "menon@example.edu", "CSE"),
        FACULTY_3: Profile(FACULTY_3, "Dr. Iyer", "iyer@example.edu", "ECE"),
        ADMIN_1: Profile(ADMIN_1, "Registrar", "registrar@example.edu"),
    }


@dataclass
class FakeClock:
    """Ticks one second per call so store order is always strict."""

    current: datetime = field(
        default_factory=lambda: datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
    )

    def now(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@dataclass
class FakeMessageReader:
    _messages: list[Message] = field(default_factory=list)
    fail: bool = False

    def _check(self) -> None:
        if self.fail:
            raise PersistenceError("Message store unavailable (fake)")

    async def get_by_id(self, message_id: int) -> Message | None:
        self._check()
        return next((m for m in self._messages if m.id == message_id), None)

    async def fetch_history(self, a: Identity, b: Identity) -> list[Message]:
        self._check()
        pair = {a, b}
        thread = [m for m in self._messages if {m.sender, m.receiver} == pair]
        return sorted(thread, key=lambda m: (m.created_at, m.id))

    async def list_by_participant(self, identity: Identity) -> list[ConversationSummary]:
        self._check()
        threads: dict[Identity, list[Message]] = {}
        for m in self._messages:
            if m.sender == identity:
                threads.setdefault(m.receiver, []).append(m)
            elif m.receiver == identity:
                threads.setdefault(m.sender, []).append(m)
        return [
            ConversationSummary(
                counterpart=counterpart,
                last_message=max(msgs, key=lambda m: (m.created_at, m.id)),
                unread_count=sum(
                    1 for m in msgs if m.receiver == identity and not m.is_read
                ),
            )
            for counterpart, msgs in threads.items()
        ]


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader
    _clock: FakeClock = field(default_factory=FakeClock)
    fail: bool = False

    async def append(self, sender: Identity, receiver: Identity, content: str) -> Message:
        if self.fail:
            raise PersistenceError("Message store unavailable (append)")
        now = self._clock.now()
        message = Message(
            id=len(self._reader._messages) + 1,
            sender=sender,
            receiver=receiver,
            content=content,
            created_at=now,
            updated_at=now,
        )
        self._reader._messages.append(message)
        return message

    async def mark_read(self, receiver: Identity, sender: Identity) -> int:
        if self.fail:
            raise PersistenceError("Message store unavailable (mark_read)")
        now = self._clock.now()
        updated = 0
        for i, m in enumerate(self._reader._messages):
            if m.sender == sender and m.receiver == receiver and not m.is_read:
                self._reader._messages[i] = replace(m, is_read=True, updated_at=now)
                updated += 1
        return updated


@dataclass
class FakeProfileReader:
    _profiles: dict[Identity, Profile] = field(default_factory=make_profiles)
    fail: bool = False

    async def get_many(self, identities: Iterable[Identity]) -> dict[Identity, Profile]:
        if self.fail:
            raise PersistenceError("Profile lookup unavailable (fake)")
        return {i: self._profiles[i] for i in identities if i in self._profiles}

    async def list_by_role(self, role: Role) -> list[Profile]:
        return sorted(
            (p for p in self._profiles.values() if p.identity.role == role),
            key=lambda p: p.name,
        )


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    profiles: FakeProfileReader = field(default_factory=FakeProfileReader)
    _committed: bool = False
    _rolled_back: bool = False

    def __post_init__(self) -> None:
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    async def commit(self) -> None:
        self._committed = True

    async def rollback(self) -> None:
        self._rolled_back = True


@dataclass
class RecordingPublisher:
    """EventPublisher double that keeps what it was asked to publish."""

    published: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    fail: bool = False

    async def publish(self, channel: str, payload: dict[str, Any]) -> None:
        if self.fail:
            raise ConnectionError("broker down")
        self.published.append((channel, payload))


class FakeWebSocket:
    def __init__(self, *, broken: bool = False) -> None:
        self.sent: list[str] = []
        self.accepted = False
        self.broken = broken

    async def accept(self) -> None:
        self.accepted = True

    async def send_text(self, raw: str) -> None:
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(raw)

    def events(self, event_type: str | None = None) -> list[dict[str, Any]]:
        decoded = [json.loads(raw) for raw in self.sent]
        if event_type is None:
            return decoded
        return [e for e in decoded if e["type"] == event_type]
