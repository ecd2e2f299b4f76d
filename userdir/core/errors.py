"""
Error taxonomy for the user directory service.

Every error that crosses the service boundary is a ServiceError carrying one
ErrorCode and a human-readable message. Translation of codes to transport
status codes lives in http_status_for() and nowhere else.
"""

from enum import Enum

from fastapi import status


class ErrorCode(str, Enum):
    """Outward error codes."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNAUTHENTICATED = "unauthenticated"
    INVALID_ARGUMENT = "invalid_argument"
    INTERNAL = "internal"
    DEADLINE_EXCEEDED = "deadline_exceeded"


class ServiceError(Exception):
    """Base exception for service errors."""

    code: ErrorCode = ErrorCode.INTERNAL

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(ServiceError):
    """Raised when a user, session or row does not exist."""

    code = ErrorCode.NOT_FOUND


class ConflictError(ServiceError):
    """Raised when an email address is already registered."""

    code = ErrorCode.CONFLICT


class UnauthenticatedError(ServiceError):
    """Raised for bad credentials and missing, expired or malformed sessions."""

    code = ErrorCode.UNAUTHENTICATED


class InvalidArgumentError(ServiceError):
    """Raised for malformed identifiers."""

    code = ErrorCode.INVALID_ARGUMENT


class InternalError(ServiceError):
    """
    Raised for store/cache transport or serialization failures.

    The message is safe to show to callers; driver details belong in the log
    and in the exception chain (raise ... from exc).
    """

    code = ErrorCode.INTERNAL


class CacheError(InternalError):
    """
    Raised by user cache and session store backends on transport failures.

    Cache failures never reach callers of the user service: they are logged
    and treated as a miss or ignored.
    """


class DeadlineExceededError(ServiceError):
    """Raised when a request's deadline expires before a call completes."""

    code = ErrorCode.DEADLINE_EXCEEDED


_HTTP_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.DEADLINE_EXCEEDED: status.HTTP_504_GATEWAY_TIMEOUT,
}


def http_status_for(code: ErrorCode) -> int:
    """
    Map an error code to an HTTP status code.

    Args:
        code: The error code.

    Returns:
        HTTP status code, 500 for anything unmapped.
    """
    return _HTTP_STATUS_BY_CODE.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR)
