"""In-process registry of live connections and their conversation keys."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket

from portal_chat.application.dto.principal import Principal
from portal_chat.domain.value_objects.identity import Identity
from portal_chat.infrastructure.ws.protocol import WsOutbound

logger = logging.getLogger(__name__)


class Connection:
    """One live socket, the verified principal behind it and its joined keys."""

    __slots__ = ("websocket", "principal", "keys")

    def __init__(self, websocket: WebSocket, principal: Principal) -> None:
        self.websocket = websocket
        self.principal = principal
        self.keys: set[str] = set()

    @property
    def identity(self) -> Identity:
        return self.principal.identity

    async def send(self, event_type: str, data: dict[str, Any]) -> None:
        await self.send_raw(WsOutbound(type=event_type, data=data).model_dump_json())

    async def send_raw(self, raw: str) -> None:
        await self.websocket.send_text(raw)

    def __repr__(self) -> str:
        return f"<Connection {self.principal.principal_key} keys={sorted(self.keys)}>"


class ConnectionRegistry:
    """Tracks live connections per identity and per conversation key."""

    def __init__(self) -> None:
        self._connections: dict[Identity, set[Connection]] = {}
        self._subscribers: dict[str, set[Connection]] = {}

    async def connect(self, connection: Connection) -> None:
        await connection.websocket.accept()
        self._connections.setdefault(connection.identity, set()).add(connection)
        logger.debug("WS connected: %s (identities=%d)", connection.identity, len(self._connections))

    def disconnect(self, connection: Connection) -> None:
        self.unsubscribe(connection)
        conns = self._connections.get(connection.identity)
        if conns:
            conns.discard(connection)
            if not conns:
                del self._connections[connection.identity]
        logger.debug("WS disconnected: %s", connection.identity)

    def subscribe(self, connection: Connection, key: str) -> None:
        self._subscribers.setdefault(key, set()).add(connection)
        connection.keys.add(key)

    def unsubscribe(self, connection: Connection) -> None:
        """Drop the connection from every key it joined."""
        for key in connection.keys:
            subs = self._subscribers.get(key)
            if subs is None:
                continue
            subs.discard(connection)
            if not subs:
                del self._subscribers[key]
        connection.keys.clear()

    def subscribers_of(self, key: str) -> set[Connection]:
        return set(self._subscribers.get(key, ()))

    def is_online(self, identity: Identity) -> bool:
        return bool(self._connections.get(identity))

    async def broadcast(self, key: str, event_type: str, data: dict[str, Any]) -> int:
        """Send one envelope to every subscriber of ``key``; returns deliveries."""
        raw = WsOutbound(type=event_type, data=data).model_dump_json()
        delivered = 0
        dead: list[Connection] = []
        for connection in self.subscribers_of(key):
            try:
                await connection.send_raw(raw)
                delivered += 1
            except Exception:
                dead.append(connection)
        for connection in dead:
            logger.info("Dropping dead connection %r from %s", connection, key)
            self.disconnect(connection)
        return delivered

    async def dispatch_event(self, event_type: str, data: dict[str, Any]) -> None:
        """Fanout callback: route a published event to local subscribers."""
        key = data.get("conversation_key")
        message = data.get("message")
        if not key or message is None:
            logger.debug("Ignoring fanout event %s without key or message", event_type)
            return
        delivered = await self.broadcast(key, event_type, message)
        logger.debug("Fanout %s to %s reached %d connection(s)", event_type, key, delivered)
