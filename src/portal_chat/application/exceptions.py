from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class AuthenticationError(AppError):
    pass


class ForbiddenError(AppError):
    pass


class ValidationError(AppError):
    pass


class PersistenceError(AppError):
    """The message store could not complete a read or write."""


class BroadcastError(AppError):
    """Enrichment or live fanout failed after the message was stored."""
