"""Field failure builders.

Each returns the ``Err`` a SchemaType reports for one bad value. Messages
are predicates ("is required", "is not a valid integer"); the pipeline
prefixes them with the parameter name and location.
"""
from typing import Any

from .types import AppError, ErrorCode, ErrorContext, Err

_FORMAT_CODES = {
    "date": ErrorCode.E2012_INVALID_DATE,
    "date-time": ErrorCode.E2012_INVALID_DATE,
    "email": ErrorCode.E2010_INVALID_EMAIL,
    "uuid": ErrorCode.E2011_INVALID_UUID,
}


def validation_error(message: str, *, code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC,
                     value: Any = None, **metadata) -> Err[AppError]:
    """Err for a failed field; ``None`` metadata entries are dropped."""
    metadata = {key: item for key, item in {"value": value, **metadata}.items() if item is not None}
    return Err(AppError(code=code, message=message,
                        context=ErrorContext(origin="validation"), metadata=metadata))


def required_field() -> Err[AppError]:
    return validation_error("is required", code=ErrorCode.E2001_REQUIRED_FIELD_MISSING)


def invalid_enum(value: Any, options: list[Any]) -> Err[AppError]:
    return validation_error("is not a valid enumeration value",
                            code=ErrorCode.E2005_CONSTRAINT_VIOLATION, value=value, expected=options)


def invalid_type(value: Any, expected: str) -> Err[AppError]:
    return validation_error(f"is not a valid {expected}",
                            code=ErrorCode.E2004_INVALID_TYPE, value=value, expected=expected)


def invalid_integer(value: Any) -> Err[AppError]:
    return invalid_type(value, "integer")


def invalid_number(value: Any) -> Err[AppError]:
    return invalid_type(value, "number")


def invalid_boolean(value: Any) -> Err[AppError]:
    return invalid_type(value, "boolean")


def invalid_format(value: Any, expected: str) -> Err[AppError]:
    """Err for a string that is not a valid ``expected`` (date, email, uuid, ...)."""
    return validation_error(f"is not a valid {expected}",
                            code=_FORMAT_CODES.get(expected, ErrorCode.E2002_INVALID_FORMAT),
                            value=value, expected=expected)
