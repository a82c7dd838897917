"""Integration tests for the REST and WebSocket surface (in-memory UoW via dependency override)."""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

import jwt
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from portal_chat.api.deps import get_uow, get_uow_factory
from portal_chat.app import create_app
from portal_chat.config import settings
from tests.conftest import FACULTY_2, STUDENT_1, FakeUoW


def _make_token(subject_id: int = 1, role: str = "student") -> str:
    return jwt.encode(
        {"id": subject_id, "role": role},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def _run(coro):
    return asyncio.run(coro)


def _auth(subject_id: int = 1, role: str = "student") -> dict[str, str]:
    return {"Authorization": f"Bearer {_make_token(subject_id, role)}"}


@pytest.fixture
def uow() -> FakeUoW:
    return FakeUoW()


@pytest.fixture
def client(uow):
    app = create_app()

    async def _override():
        yield uow

    @asynccontextmanager
    async def _shared_uow():
        yield uow

    app.dependency_overrides[get_uow] = _override
    app.dependency_overrides[get_uow_factory] = lambda: _shared_uow
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_smoke_route(client):
    resp = client.get("/api/chat/test")
    assert resp.status_code == 200
    assert resp.json()["message"] == "Chat routes are working!"


def test_missing_authorization_header(client):
    resp = client.get("/api/chat/conversations")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "No authorization header"


def test_invalid_token(client):
    resp = client.get(
        "/api/chat/conversations", headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert resp.status_code == 401


def test_send_message(client, uow):
    resp = client.post(
        "/api/chat/send",
        json={"receiver_id": 2, "receiver_role": "faculty", "content": "Hello"},
        headers=_auth(),
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["sender_id"] == 1
    assert data["sender_role"] == "student"
    assert data["receiver_id"] == 2
    assert data["is_read"] is False
    assert data["sender_name"] == "Asha Rao"
    assert data["receiver_name"] == "Dr. Menon"
    assert len(uow.messages._messages) == 1


def test_send_empty_content_is_rejected_without_write(client, uow):
    resp = client.post(
        "/api/chat/send",
        json={"receiver_id": 2, "receiver_role": "faculty", "content": "  "},
        headers=_auth(),
    )

    assert resp.status_code == 422
    assert uow.messages._messages == []


def test_send_store_failure_is_service_unavailable(client, uow):
    uow.messages_w.fail = True

    resp = client.post(
        "/api/chat/send",
        json={"receiver_id": 2, "receiver_role": "faculty", "content": "Hello"},
        headers=_auth(),
    )

    assert resp.status_code == 503


def test_history_marks_messages_read(client, uow):
    _run(uow.messages_w.append(STUDENT_1, FACULTY_2, "Hello"))
    _run(uow.messages_w.append(FACULTY_2, STUDENT_1, "Hi"))

    resp = client.get("/api/chat/history/1", headers=_auth(2, "faculty"))

    assert resp.status_code == 200
    assert [m["content"] for m in resp.json()] == ["Hello", "Hi"]
    assert _run(uow.messages.get_by_id(1)).is_read is True
    assert _run(uow.messages.get_by_id(2)).is_read is False


def test_admin_history_requires_role(client):
    resp = client.get("/api/chat/history/2", headers=_auth(1, "admin"))
    assert resp.status_code == 422


def test_admin_history_with_role(client, uow):
    _run(uow.messages_w.append(FACULTY_2, STUDENT_1, "Grades posted"))

    resp = client.get("/api/chat/history/2?role=faculty", headers=_auth(1, "admin"))

    assert resp.status_code == 200
    assert resp.json() == []


def test_conversations(client, uow):
    _run(uow.messages_w.append(FACULTY_2, STUDENT_1, "See you Thursday"))

    resp = client.get("/api/chat/conversations", headers=_auth())

    assert resp.status_code == 200
    [conv] = resp.json()
    assert conv["counterpart_id"] == 2
    assert conv["counterpart_role"] == "faculty"
    assert conv["counterpart_name"] == "Dr. Menon"
    assert conv["unread_count"] == 1


def test_conversations_store_failure_returns_empty(client, uow):
    uow.messages.fail = True

    resp = client.get("/api/chat/conversations", headers=_auth())

    assert resp.status_code == 200
    assert resp.json() == []


def test_mark_read_twice(client, uow):
    _run(uow.messages_w.append(FACULTY_2, STUDENT_1, "Hi"))
    body = {"senderId": 2, "senderRole": "faculty"}

    first = client.post("/api/chat/mark-read", json=body, headers=_auth())
    second = client.post("/api/chat/mark-read", json=body, headers=_auth())

    assert first.status_code == second.status_code == 200
    assert first.json() == {"success": True, "message": "Messages marked as read", "updated": 1}
    assert second.json()["updated"] == 0


def test_student_lists_faculty(client):
    resp = client.get("/api/chat/faculty", headers=_auth())

    assert resp.status_code == 200
    assert [c["name"] for c in resp.json()] == ["Dr. Iyer", "Dr. Menon"]


def test_student_cannot_list_students(client):
    resp = client.get("/api/chat/students", headers=_auth())
    assert resp.status_code == 403


def test_ws_rejects_bad_token(client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/ws/chat?token=bogus") as ws:
            ws.receive_text()
    assert exc_info.value.code == 4001


def test_ws_join_then_send_echoes_message(client, uow):
    with client.websocket_connect(f"/ws/chat?token={_make_token()}") as ws:
        ws.send_json({"type": "joinRoom", "data": {"recipientId": 2, "recipientRole": "faculty"}})
        ws.send_json({
            "type": "sendMessage",
            "data": {
                "senderId": 1,
                "senderRole": "student",
                "recipientId": 2,
                "recipientRole": "faculty",
                "content": "Hello over the socket",
            },
        })
        event = ws.receive_json()

    assert event["type"] == "receiveMessage"
    assert event["data"]["content"] == "Hello over the socket"
    assert event["data"]["sender_name"] == "Asha Rao"
    assert len(uow.messages._messages) == 1


def test_ws_rejects_spoofed_sender(client, uow):
    with client.websocket_connect(f"/ws/chat?token={_make_token()}") as ws:
        ws.send_json({
            "type": "sendMessage",
            "data": {
                "senderId": 99,
                "senderRole": "student",
                "recipientId": 2,
                "recipientRole": "faculty",
                "content": "spoof",
            },
        })
        event = ws.receive_json()

    assert event == {"type": "error", "data": {"code": "identity_mismatch"}}
    assert uow.messages._messages == []


def test_ws_ping_and_unknown_type(client):
    with client.websocket_connect(f"/ws/chat?token={_make_token()}") as ws:
        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong", "data": {}}
        ws.send_json({"type": "typing", "data": {}})
        event = ws.receive_json()

    assert event["data"] == {"code": "unknown_type", "type": "typing"}


def _send_payload(**overrides) -> dict:
    data = {"recipientId": 2, "recipientRole": "faculty", "content": "Hello"}
    data.update(overrides)
    return {"type": "sendMessage", "data": data}


def test_ws_join_rejects_spoofed_sender(client):
    with client.websocket_connect(f"/ws/chat?token={_make_token()}") as ws:
        ws.send_json({
            "type": "joinRoom",
            "data": {
                "senderId": 1,
                "senderRole": "faculty",
                "recipientId": 2,
                "recipientRole": "faculty",
            },
        })
        event = ws.receive_json()

    assert event == {"type": "error", "data": {"code": "identity_mismatch"}}


def test_ws_send_with_malformed_data(client, uow):
    with client.websocket_connect(f"/ws/chat?token={_make_token()}") as ws:
        ws.send_json({"type": "sendMessage", "data": {"recipientRole": "faculty", "content": "Hi"}})
        event = ws.receive_json()

    assert event["type"] == "error"
    assert event["data"]["code"] == "invalid_data"
    assert "recipientId" in event["data"]["detail"]
    assert uow.messages._messages == []


def test_ws_send_store_failure_is_reported(client, uow):
    uow.messages_w.fail = True

    with client.websocket_connect(f"/ws/chat?token={_make_token()}") as ws:
        ws.send_json(_send_payload())
        event = ws.receive_json()

    assert event == {
        "type": "error",
        "data": {"code": "send_failed", "detail": "Message store unavailable (append)"},
    }
    assert uow._rolled_back is True
    assert uow.messages._messages == []


def test_ws_send_blank_content_is_reported(client, uow):
    with client.websocket_connect(f"/ws/chat?token={_make_token()}") as ws:
        ws.send_json(_send_payload(content="   "))
        event = ws.receive_json()

    assert event["data"]["code"] == "send_failed"
    assert uow.messages._messages == []


def test_ws_mark_read(client, uow):
    _run(uow.messages_w.append(FACULTY_2, STUDENT_1, "Office hours moved"))

    with client.websocket_connect(f"/ws/chat?token={_make_token()}") as ws:
        ws.send_json({"type": "markRead", "data": {"senderId": 2, "senderRole": "faculty"}})
        # Frames are handled in order, so the pong means markRead is done.
        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong", "data": {}}

    assert _run(uow.messages.get_by_id(1)).is_read is True
    assert uow._committed is True


def test_ws_mark_read_store_failure_is_reported(client, uow):
    _run(uow.messages_w.append(FACULTY_2, STUDENT_1, "Office hours moved"))
    uow.messages_w.fail = True

    with client.websocket_connect(f"/ws/chat?token={_make_token()}") as ws:
        ws.send_json({"type": "markRead", "data": {"senderId": 2, "senderRole": "faculty"}})
        event = ws.receive_json()

    assert event == {
        "type": "error",
        "data": {"code": "mark_read_failed", "detail": "Message store unavailable (mark_read)"},
    }
    assert _run(uow.messages.get_by_id(1)).is_read is False
