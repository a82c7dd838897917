from __future__ import annotations

from typing import Protocol

from portal_chat.domain.value_objects.identity import Identity


class PresenceView(Protocol):
    def is_online(self, identity: Identity) -> bool: ...
