"""Symmetric addressing for one-to-one conversations.

Role-qualified keys look like ``faculty:2|student:1``. Legacy keys reproduce
the room names of the old socket server: the two numeric ids sorted as
strings and joined with ``-`` (``"10-9"``, not ``"9-10"``), with roles
ignored, so a student and a faculty member sharing an id land in the same
room as every other pair using that id.
"""
from __future__ import annotations

from portal_chat.domain.value_objects.enums import ConversationKeyMode
from portal_chat.domain.value_objects.identity import Identity
from portal_chat.domain.value_objects.ids import ConversationKey


def conversation_key(
    a: Identity,
    b: Identity,
    *,
    mode: ConversationKeyMode = ConversationKeyMode.ROLE_QUALIFIED,
) -> ConversationKey:
    if mode == ConversationKeyMode.LEGACY:
        return ConversationKey("-".join(sorted((str(a.id), str(b.id)))))
    return ConversationKey("|".join(sorted((str(a), str(b)))))
