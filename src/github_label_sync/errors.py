"""Typed error set shared by the client, resolver, and executor.

Every failure that can happen while talking to GitHub or while decoding user
input is mapped onto one of these kinds, so callers never need to inspect
PyGithub or requests exceptions.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    TRANSPORT_ERROR = "transport_error"


class LabelSyncError(Exception):
    """Base class for all label sync failures."""

    kind: ErrorKind = ErrorKind.TRANSPORT_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(LabelSyncError):
    """Malformed label or repository input."""

    kind = ErrorKind.INVALID_INPUT


class NotFound(LabelSyncError):
    """Repository or label does not exist."""

    kind = ErrorKind.NOT_FOUND


class Conflict(LabelSyncError):
    """Label name collision."""

    kind = ErrorKind.CONFLICT


class RateLimited(LabelSyncError):
    """GitHub rejected the call because of rate limiting."""

    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str, *, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class Unauthorized(LabelSyncError):
    """Missing, invalid, or insufficient credentials."""

    kind = ErrorKind.UNAUTHORIZED


class TransportError(LabelSyncError):
    """Timeouts, connection failures, and unexpected HTTP statuses."""

    kind = ErrorKind.TRANSPORT_ERROR
