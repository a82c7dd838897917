from __future__ import annotations

from typing import Any

from portal_chat.application.dto.principal import Principal
from portal_chat.application.exceptions import AuthenticationError
from portal_chat.domain.value_objects.enums import Role


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    """Map portal token claims (``id``/``sub`` + ``role``) to a Principal."""
    raw_id = payload.get("id", payload.get("sub"))
    raw_role = payload.get("role")
    if raw_id is None or raw_role is None:
        raise AuthenticationError("Token is missing id or role")
    try:
        return Principal(role=Role(raw_role), subject_id=int(raw_id))
    except ValueError as exc:
        raise AuthenticationError(f"Invalid identity claims: {exc}") from exc
