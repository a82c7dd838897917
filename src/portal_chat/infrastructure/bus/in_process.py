"""Single-process fanout: publishes straight into the local registry."""
from __future__ import annotations

from typing import Any

from portal_chat.infrastructure.bus.redis_pubsub import OnEventCallback


class InProcessPublisher:
    """Implements application.ports.bus.EventPublisher without a broker."""

    def __init__(self, callback: OnEventCallback) -> None:
        self._callback = callback

    async def publish(self, channel: str, payload: dict[str, Any]) -> None:
        await self._callback(payload.get("event_type", "unknown"), payload)
