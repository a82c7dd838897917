"""Translate driver and connection failures into ``PersistenceError``."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError

from portal_chat.application.exceptions import PersistenceError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def storage_errors(operation: str) -> AsyncIterator[None]:
    try:
        yield
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Message store failed during %s: %s", operation, exc)
        raise PersistenceError(f"Message store unavailable ({operation})") from exc
