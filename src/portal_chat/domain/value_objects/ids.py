from __future__ import annotations

from typing import NewType

ConversationKey = NewType("ConversationKey", str)
