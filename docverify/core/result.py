"""
Tagged results for the verification workflow.

Guard violations and validation failures travel as values, not
exceptions. Only the boundary of a use case turns an unexpected
exception into an INTERNAL failure.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")

GENERIC_INTERNAL_MESSAGE = "An unexpected error occurred. Please try again later."


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    BAD_REQUEST = "BAD_REQUEST"
    INTERNAL = "INTERNAL"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.INTERNAL: 500,
}


@dataclass(frozen=True)
class Error:
    """A caller-visible failure."""
    kind: ErrorKind
    message: str                  # safe to show to the user
    detail: str | None = None     # backend codes etc., logs only


@dataclass(frozen=True)
class Result(Generic[T]):
    """Success with an optional value, or failure with an Error."""
    value: T | None = None
    error: Error | None = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    @classmethod
    def ok(cls, value: T | None = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str, detail: str | None = None) -> "Result[T]":
        return cls(error=Error(kind=kind, message=message, detail=detail))

    @classmethod
    def not_found(cls, message: str) -> "Result[T]":
        return cls.fail(ErrorKind.NOT_FOUND, message)

    @classmethod
    def bad_request(cls, message: str) -> "Result[T]":
        return cls.fail(ErrorKind.BAD_REQUEST, message)

    @classmethod
    def internal(cls, detail: str | None = None) -> "Result[T]":
        """INTERNAL failure with the generic user message."""
        return cls.fail(ErrorKind.INTERNAL, GENERIC_INTERNAL_MESSAGE, detail)

    @classmethod
    def from_error(cls, error: Error) -> "Result[T]":
        """Re-tag a failure from another Result."""
        return cls(error=error)
