from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Query

from portal_chat.api.deps import BroadcasterDep, CurrentPrincipal, RegistryDep, UoWDep
from portal_chat.api.v1.schemas.conversation import ContactResponse, ConversationResponse
from portal_chat.api.v1.schemas.message import (
    MarkReadRequest,
    MarkReadResponse,
    MessageResponse,
    SendMessageRequest,
)
from portal_chat.application.policies.permissions import resolve_counterpart
from portal_chat.domain.value_objects.enums import Role
from portal_chat.domain.value_objects.identity import Identity
from portal_chat.services import directory_service, history_service, message_service

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.get("/test")
async def smoke_test() -> dict[str, str]:
    return {
        "message": "Chat routes are working!",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/history/{counterpart_id}", response_model=list[MessageResponse])
async def get_history(
    counterpart_id: int,
    principal: CurrentPrincipal,
    uow: UoWDep,
    role: Role | None = Query(None, description="Counterpart role; implied for students and faculty"),
) -> list[MessageResponse]:
    counterpart = resolve_counterpart(principal, counterpart_id, role)
    history = await history_service.get_history(principal, counterpart, uow)
    return [MessageResponse.from_enriched(m) for m in history]


@router.post("/send", response_model=MessageResponse)
async def send_message(
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    broadcaster: BroadcasterDep,
) -> MessageResponse:
    enriched = await message_service.send_message(
        principal,
        body.receiver_id,
        body.receiver_role,
        body.content,
        uow,
        broadcaster,
    )
    return MessageResponse.from_enriched(enriched)


@router.get("/conversations", response_model=list[ConversationResponse])
async def list_conversations(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[ConversationResponse]:
    views = await history_service.list_conversations(principal, uow)
    return [ConversationResponse.model_validate(v, from_attributes=True) for v in views]


@router.post("/mark-read", response_model=MarkReadResponse)
async def mark_read(
    body: MarkReadRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MarkReadResponse:
    updated = await history_service.mark_read(
        principal, Identity(body.sender_id, body.sender_role), uow,
    )
    return MarkReadResponse(updated=updated)


@router.get("/faculty", response_model=list[ContactResponse])
async def list_faculty(
    principal: CurrentPrincipal,
    uow: UoWDep,
    registry: RegistryDep,
) -> list[ContactResponse]:
    contacts = await directory_service.list_contacts(principal, Role.FACULTY, uow, registry)
    return [ContactResponse.model_validate(c, from_attributes=True) for c in contacts]


@router.get("/students", response_model=list[ContactResponse])
async def list_students(
    principal: CurrentPrincipal,
    uow: UoWDep,
    registry: RegistryDep,
) -> list[ContactResponse]:
    contacts = await directory_service.list_contacts(principal, Role.STUDENT, uow, registry)
    return [ContactResponse.model_validate(c, from_attributes=True) for c in contacts]
