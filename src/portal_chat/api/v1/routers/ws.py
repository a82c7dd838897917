from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PayloadError

from portal_chat.api.deps import (
    BroadcasterDep,
    RegistryDep,
    UoWFactory,
    UoWFactoryDep,
    get_verifier,
)
from portal_chat.application.dto.principal import Principal
from portal_chat.application.exceptions import AppError, AuthenticationError
from portal_chat.config import settings
from portal_chat.domain.value_objects.conversation_key import conversation_key
from portal_chat.domain.value_objects.identity import Identity
from portal_chat.infrastructure.ws.protocol import (
    MarkReadData,
    RoomAddress,
    SendMessageData,
    WsInbound,
)
from portal_chat.infrastructure.ws.registry import Connection, ConnectionRegistry
from portal_chat.services import history_service, message_service
from portal_chat.services.broadcaster import Broadcaster

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

AUTH_FAILED_CLOSE_CODE = 4001


async def _authenticate(token: str) -> Principal | None:
    try:
        return await get_verifier().verify(token)
    except AuthenticationError:
        logger.debug("WS auth failed", exc_info=True)
        return None


@router.websocket("/ws/chat")
async def ws_chat(
    websocket: WebSocket,
    registry: RegistryDep,
    broadcaster: BroadcasterDep,
    uow_factory: UoWFactoryDep,
    token: str = Query(...),
) -> None:
    principal = await _authenticate(token)
    if principal is None:
        await websocket.close(code=AUTH_FAILED_CLOSE_CODE, reason="Authentication failed")
        return

    connection = Connection(websocket, principal)
    await registry.connect(connection)

    heartbeat_task = asyncio.create_task(
        _heartbeat(connection), name=f"ws-heartbeat-{principal.principal_key}",
    )
    try:
        await _read_loop(connection, registry, broadcaster, uow_factory)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", principal.principal_key)
    finally:
        heartbeat_task.cancel()
        registry.disconnect(connection)


async def _heartbeat(connection: Connection) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    try:
        while True:
            await asyncio.sleep(interval)
            await connection.send("pong", {})
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.debug("Heartbeat stopped for %r", connection, exc_info=True)


async def _read_loop(
    connection: Connection,
    registry: ConnectionRegistry,
    broadcaster: Broadcaster,
    uow_factory: UoWFactory,
) -> None:
    ws = connection.websocket
    while True:
        raw = await ws.receive_text()
        try:
            msg = WsInbound.model_validate_json(raw)
        except PayloadError:
            await _send_error(connection, "invalid_payload")
            continue

        if msg.type == "ping":
            await connection.send("pong", {})

        elif msg.type == "joinRoom":
            await _handle_join(connection, registry, msg.data)

        elif msg.type == "sendMessage":
            await _handle_send(connection, broadcaster, uow_factory, msg.data)

        elif msg.type == "markRead":
            await _handle_mark_read(connection, uow_factory, msg.data)

        else:
            await _send_error(connection, "unknown_type", type=msg.type)


async def _send_error(connection: Connection, code: str, **extra: Any) -> None:
    await connection.send("error", {"code": code, **extra})


async def _recipient(connection: Connection, address: RoomAddress) -> Identity | None:
    """Counterpart of a live event, or None after reporting a spoofed sender."""
    principal = connection.principal
    if (address.sender_id is not None and address.sender_id != principal.subject_id) or (
        address.sender_role is not None and address.sender_role != principal.role
    ):
        logger.warning(
            "Rejected event from %s claiming to be %s:%s",
            principal.principal_key,
            address.sender_role,
            address.sender_id,
        )
        await _send_error(connection, "identity_mismatch")
        return None
    return Identity(address.recipient_id, address.recipient_role)


async def _handle_join(
    connection: Connection,
    registry: ConnectionRegistry,
    data: dict[str, Any],
) -> None:
    try:
        address = RoomAddress.model_validate(data)
    except PayloadError as exc:
        await _send_error(connection, "invalid_data", detail=str(exc))
        return

    recipient = await _recipient(connection, address)
    if recipient is None:
        return
    key = conversation_key(
        connection.identity, recipient, mode=settings.CONVERSATION_KEY_MODE,
    )
    registry.subscribe(connection, key)
    logger.debug("%r joined %s", connection, key)


async def _handle_send(
    connection: Connection,
    broadcaster: Broadcaster,
    uow_factory: UoWFactory,
    data: dict[str, Any],
) -> None:
    try:
        payload = SendMessageData.model_validate(data)
    except PayloadError as exc:
        await _send_error(connection, "invalid_data", detail=str(exc))
        return

    recipient = await _recipient(connection, payload)
    if recipient is None:
        return

    async with uow_factory() as uow:
        try:
            await message_service.send_message(
                connection.principal,
                recipient.id,
                recipient.role,
                payload.content,
                uow,
                broadcaster,
            )
        except AppError as exc:
            await _send_error(connection, "send_failed", detail=exc.detail)


async def _handle_mark_read(
    connection: Connection,
    uow_factory: UoWFactory,
    data: dict[str, Any],
) -> None:
    try:
        payload = MarkReadData.model_validate(data)
    except PayloadError as exc:
        await _send_error(connection, "invalid_data", detail=str(exc))
        return

    async with uow_factory() as uow:
        try:
            await history_service.mark_read(
                connection.principal,
                Identity(payload.sender_id, payload.sender_role),
                uow,
            )
        except AppError as exc:
            logger.warning("markRead failed for %s: %s", connection.principal.principal_key, exc.detail)
            await _send_error(connection, "mark_read_failed", detail=exc.detail)
