"""RPC status errors carrying a code, a message and optional details."""

from __future__ import annotations

import enum
from typing import Any


class StatusCode(enum.IntEnum):
    """RPC status codes."""

    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16

    @property
    def label(self) -> str:
        """Name of the code as shown in error strings."""
        return _LABELS[self]


_LABELS = {
    StatusCode.OK: "OK",
    StatusCode.CANCELLED: "Canceled",
    StatusCode.UNKNOWN: "Unknown",
    StatusCode.INVALID_ARGUMENT: "InvalidArgument",
    StatusCode.DEADLINE_EXCEEDED: "DeadlineExceeded",
    StatusCode.NOT_FOUND: "NotFound",
    StatusCode.ALREADY_EXISTS: "AlreadyExists",
    StatusCode.PERMISSION_DENIED: "PermissionDenied",
    StatusCode.RESOURCE_EXHAUSTED: "ResourceExhausted",
    StatusCode.FAILED_PRECONDITION: "FailedPrecondition",
    StatusCode.ABORTED: "Aborted",
    StatusCode.OUT_OF_RANGE: "OutOfRange",
    StatusCode.UNIMPLEMENTED: "Unimplemented",
    StatusCode.INTERNAL: "Internal",
    StatusCode.UNAVAILABLE: "Unavailable",
    StatusCode.DATA_LOSS: "DataLoss",
    StatusCode.UNAUTHENTICATED: "Unauthenticated",
}


class RPCError(Exception):
    """An error with an RPC status code and attached details."""

    def __init__(self, code: StatusCode, message: str, details: tuple[Any, ...] = ()) -> None:
        self.code = StatusCode(code)
        self.message = message
        self.details = tuple(details)
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"rpc error: code = {self.code.label} desc = {self.message}"


class DuplicateMessageError(Exception):
    """Raised when a message key is already in the queue."""

    def __init__(self, message: str = "duplicate message key") -> None:
        super().__init__(message)


def internal_error(message: str, *args: Any) -> RPCError:
    """Build an Internal error with the given details."""
    return RPCError(StatusCode.INTERNAL, message, args)


def bad_request(message: str, *args: Any) -> RPCError:
    """Build an InvalidArgument error with the given details."""
    return RPCError(StatusCode.INVALID_ARGUMENT, message, args)