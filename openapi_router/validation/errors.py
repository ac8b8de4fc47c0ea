"""Request validation errors.

Every declared parameter of a request is checked before anything fails, and
the 400 body lists each problem:

    {
        "errors": [
            {"name": "page", "location": "query", "message": "is not a valid integer"},
            {"name": "todoId", "location": "path", "message": "is required"}
        ]
    }
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from openapi_router.errors import AppError, ErrorCode

from .parameters import ParameterLocation


@dataclass(frozen=True, slots=True)
class FieldError:
    """One parameter's failure. ``code`` is for logs; the body omits it."""
    name: str
    location: ParameterLocation
    message: str
    code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC

    @classmethod
    def from_app_error(cls, name: str, location: ParameterLocation, error: AppError) -> FieldError:
        return cls(name=name, location=location, message=error.message, code=error.code)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "location": self.location.value, "message": self.message}


@dataclass(eq=False)
class ValidationError(Exception):
    """All field errors of one request, in declaration order.

    The pipeline returns it inside ``Err``; handlers may raise it for checks
    of their own, and dispatch renders it as a 400.
    """
    details: list[FieldError]
    message: str = "Validation failed"

    def __post_init__(self):
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        if len(self.details) == 1:
            return f"{self.details[0].name}: {self.details[0].message}"
        if self.details:
            return f"{self.message} ({len(self.details)} errors)"
        return self.message

    def to_app_error(self) -> AppError:
        """Single AppError summary: the field's own code when only one failed."""
        if len(self.details) == 1:
            detail = self.details[0]
            return AppError(code=detail.code, message=str(self),
                            metadata={"field": detail.name, "location": detail.location.value})
        return AppError(code=ErrorCode.E2000_VALIDATION_GENERIC, message=str(self),
                        metadata={"error_count": len(self.details),
                                  "fields": [detail.name for detail in self.details]})

    def to_dict(self) -> dict[str, Any]:
        return {"errors": [detail.to_dict() for detail in self.details]}


@dataclass
class FieldErrorAccumulator:
    """Ordered collection of field errors for one pipeline run."""
    errors: list[FieldError] = field(default_factory=list)

    def add_error(self, detail: FieldError) -> None:
        self.errors.append(detail)

    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_validation_error(self) -> ValidationError | None:
        return ValidationError(details=list(self.errors)) if self.errors else None
