"""Wire format of fanout events crossing the Redis channel."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class FanoutEnvelope(BaseModel):
    event: str
    data: dict[str, Any]


def serialize_event(event_type: str, payload: dict[str, Any]) -> str:
    return FanoutEnvelope(event=event_type, data=payload).model_dump_json()


def deserialize_event(raw: str | bytes) -> tuple[str, dict[str, Any]]:
    envelope = FanoutEnvelope.model_validate_json(raw)
    return envelope.event, envelope.data
