"""FastAPI dependency injection helpers."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Annotated, AsyncContextManager, AsyncIterator, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from portal_chat.application.dto.principal import Principal
from portal_chat.application.exceptions import AuthenticationError
from portal_chat.application.ports.auth import TokenVerifier
from portal_chat.application.ports.bus import EventPublisher
from portal_chat.application.uow import UnitOfWork
from portal_chat.config import settings
from portal_chat.infrastructure.auth.hs256_verifier import HS256Verifier
from portal_chat.infrastructure.auth.jwks_verifier import JWKSVerifier
from portal_chat.infrastructure.bus.in_process import InProcessPublisher
from portal_chat.infrastructure.db.session import AsyncSessionLocal
from portal_chat.infrastructure.db.uow import SqlAlchemyUoW
from portal_chat.infrastructure.ws.registry import ConnectionRegistry
from portal_chat.services.broadcaster import Broadcaster

_bearer_scheme = HTTPBearer(auto_error=False)

UoWFactory = Callable[[], AsyncContextManager[UnitOfWork]]


@asynccontextmanager
async def _session_uow() -> AsyncIterator[SqlAlchemyUoW]:
    async with AsyncSessionLocal() as session:
        async with SqlAlchemyUoW(session) as uow:
            yield uow


async def get_uow() -> AsyncIterator[SqlAlchemyUoW]:
    async with _session_uow() as uow:
        yield uow


def get_uow_factory() -> UoWFactory:
    """One unit of work per live event, since a socket outlives any request."""
    return _session_uow


UoWDep = Annotated[SqlAlchemyUoW, Depends(get_uow)]
UoWFactoryDep = Annotated[UoWFactory, Depends(get_uow_factory)]


def _get_verifier() -> TokenVerifier:
    if settings.JWT_VERIFY_MODE == "jwks":
        assert settings.JWKS_URL, "JWKS_URL must be set when JWT_VERIFY_MODE=jwks"
        return JWKSVerifier(settings.JWKS_URL)
    return HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)


_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = _get_verifier()
    return _verifier


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
) -> Principal:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No authorization header",
        )
    try:
        return await get_verifier().verify(credentials.credentials)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.detail,
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


_registry = ConnectionRegistry()
_publisher: EventPublisher = InProcessPublisher(_registry.dispatch_event)


def get_registry() -> ConnectionRegistry:
    return _registry


def set_publisher(publisher: EventPublisher | None) -> None:
    """Swap the fanout backend; ``None`` restores in-process delivery."""
    global _publisher  # noqa: PLW0603
    _publisher = publisher or InProcessPublisher(_registry.dispatch_event)


def get_broadcaster() -> Broadcaster:
    return Broadcaster(
        _publisher,
        settings.REDIS_PUBSUB_CHANNEL,
        key_mode=settings.CONVERSATION_KEY_MODE,
    )


RegistryDep = Annotated[ConnectionRegistry, Depends(get_registry)]
BroadcasterDep = Annotated[Broadcaster, Depends(get_broadcaster)]
