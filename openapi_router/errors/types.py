"""Error Types

Field failures travel through the validation layer as ``Err`` values and are
only turned into exceptions at the HTTP edge. ``AppError`` is the payload of
every failure; ``ErrorCode`` decides its HTTP status.

    match Int().validate("abc"):
        case Ok(value):
            ...
        case Err(error):
            error.code        # ErrorCode.E2004_INVALID_TYPE
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Generic, NoReturn, TypeVar, Union, final
from uuid import uuid4

T = TypeVar("T")
E = TypeVar("E")


class ErrorCode(Enum):
    """Numbered failure codes.

    2xxx: a request parameter failed validation (HTTP 400)
    9xxx: internal failures and definition mistakes (HTTP 500)
    """
    E2000_VALIDATION_GENERIC = 2000
    E2001_REQUIRED_FIELD_MISSING = 2001
    E2002_INVALID_FORMAT = 2002
    E2004_INVALID_TYPE = 2004
    E2005_CONSTRAINT_VIOLATION = 2005
    E2010_INVALID_EMAIL = 2010
    E2011_INVALID_UUID = 2011
    E2012_INVALID_DATE = 2012

    E9000_INTERNAL_GENERIC = 9000
    E9001_UNEXPECTED_ERROR = 9001
    E9010_SCHEMA_DEFINITION = 9010
    E9011_REGISTRY_STATE = 9011

    @property
    def http_status(self) -> int:
        return 400 if self.value // 1000 == 2 else 500

    @property
    def category(self) -> str:
        if self.value // 1000 == 2:
            return "validation"
        if self is ErrorCode.E9010_SCHEMA_DEFINITION or self is ErrorCode.E9011_REGISTRY_STATE:
            return "definition"
        return "internal"


def _short_id() -> str:
    return uuid4().hex[:8]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Where and when an error happened, for log correlation."""
    correlation_id: str = field(default_factory=_short_id)
    timestamp: datetime = field(default_factory=_utcnow)
    origin: str = ""
    request_id: str | None = None


@dataclass(frozen=True, slots=True)
class AppError:
    """A coded failure with a human message and structured metadata."""
    code: ErrorCode
    message: str
    context: ErrorContext = field(default_factory=ErrorContext)
    metadata: dict[str, Any] = field(default_factory=dict)
    cause: BaseException | None = None

    def with_context(self, *, correlation_id: str | None = None,
                     request_id: str | None = None) -> AppError:
        """Copy carrying the request's tracing ids; unset ids are kept."""
        context = replace(
            self.context,
            correlation_id=correlation_id or self.context.correlation_id,
            request_id=request_id or self.context.request_id,
        )
        return replace(self, context=context)

    def to_dict(self) -> dict[str, Any]:
        """Response body for a non-validation failure."""
        return {
            "error": {
                "code": self.code.name,
                "code_num": self.code.value,
                "category": self.code.category,
                "message": self.message,
                "correlation_id": self.context.correlation_id,
                "timestamp": self.context.timestamp.isoformat(),
                "metadata": self.metadata,
            }
        }

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message}"


@final
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self) -> NoReturn:
        raise ValueError(f"unwrap_err() on Ok({self.value!r})")


@final
@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        raise ValueError(f"unwrap() on Err({self.error})")

    def unwrap_err(self) -> E:
        return self.error


Result = Union[Ok[T], Err[E]]
