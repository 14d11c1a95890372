from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class Status(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    INVALID = "invalid"


@dataclass(frozen=True)
class OpResult(Generic[T]):
    """Outcome of a mutation: the entity on success, otherwise why nothing changed."""

    status: Status
    value: Optional[T] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status is Status.OK

    @classmethod
    def success(cls, value: T) -> "OpResult[T]":
        return cls(Status.OK, value)

    @classmethod
    def not_found(cls, detail: str) -> "OpResult[T]":
        return cls(Status.NOT_FOUND, detail=detail)

    @classmethod
    def forbidden(cls, detail: str) -> "OpResult[T]":
        return cls(Status.FORBIDDEN, detail=detail)

    @classmethod
    def invalid(cls, detail: str) -> "OpResult[T]":
        return cls(Status.INVALID, detail=detail)


class PersistenceError(RuntimeError):
    """Durable write failed; the in-memory state was left as it was."""
