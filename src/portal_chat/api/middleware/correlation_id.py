from __future__ import annotations

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

correlation_id_ctx: ContextVar[str] = ContextVar("correlation_id", default="")

HEADER = "X-Request-ID"
MAX_LENGTH = 128


def _incoming_id(request: Request) -> str | None:
    cid = request.headers.get(HEADER)
    if cid and len(cid) <= MAX_LENGTH and cid.isprintable():
        return cid
    return None


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Tag each request (and its log records) with a request id."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        cid = _incoming_id(request) or uuid.uuid4().hex
        token = correlation_id_ctx.set(cid)
        try:
            response = await call_next(request)
            response.headers[HEADER] = cid
            return response
        finally:
            correlation_id_ctx.reset(token)
