"""Error classification for the control API.

Handlers raise ControlError with one of the ErrorCode values; the
server turns it into a plain-text response whose status comes from
http_status_for(). Anything that is not a ControlError counts as
ErrorCode.UNKNOWN and is never echoed to the caller.
"""

from __future__ import annotations

import enum


class ErrorCode(str, enum.Enum):
    """Classification of a failed request."""

    UNKNOWN = "unknown"
    INVALID_ARGUMENT = "invalid_argument"
    PERMISSION_DENIED = "permission_denied"
    UNAUTHENTICATED = "unauthenticated"
    UNIMPLEMENTED = "unimplemented"
    INTERNAL = "internal"
    UNAVAILABLE = "unavailable"


HTTP_STATUS_BY_CODE: dict[ErrorCode, int] = {
    # Internal maps to 400 in the deployed service; kept as is.
    ErrorCode.INTERNAL: 400,
    ErrorCode.INVALID_ARGUMENT: 400,
    ErrorCode.UNAUTHENTICATED: 401,
    ErrorCode.PERMISSION_DENIED: 403,
    ErrorCode.UNIMPLEMENTED: 404,
    ErrorCode.UNAVAILABLE: 503,
}

DEFAULT_HTTP_STATUS = 500


class ControlError(Exception):
    """A classified failure whose message is safe to return to the caller."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def http_status_for(code: ErrorCode) -> int:
    """Map an error classification to an HTTP status code."""
    return HTTP_STATUS_BY_CODE.get(code, DEFAULT_HTTP_STATUS)


def classify(exc: BaseException) -> ErrorCode:
    """Return the classification of any exception."""
    if isinstance(exc, ControlError):
        return exc.code
    return ErrorCode.UNKNOWN
