"""Errors for the validation and routing layers.

- ``Ok`` / ``Err``: field validation results, matched with ``match``
- ``AppError`` / ``ErrorCode``: coded failure payloads
- builders: the ``Err`` values a SchemaType can return
- ``SchemaDefinitionError`` / ``RegistryStateError``: raised while the
  application is assembled
- ``register_error_handlers``: FastAPI handlers for the HTTP edge
"""
from .types import (
    Result,
    Ok,
    Err,
    AppError,
    ErrorCode,
    ErrorContext,
)

from .builders import (
    validation_error,
    required_field,
    invalid_enum,
    invalid_type,
    invalid_integer,
    invalid_number,
    invalid_boolean,
    invalid_format,
)

from .handlers import (
    AppErrorException,
    SchemaDefinitionError,
    RegistryStateError,
    register_error_handlers,
    result_to_response,
)

__all__ = [
    "Result",
    "Ok",
    "Err",
    "AppError",
    "ErrorCode",
    "ErrorContext",
    "validation_error",
    "required_field",
    "invalid_enum",
    "invalid_type",
    "invalid_integer",
    "invalid_number",
    "invalid_boolean",
    "invalid_format",
    "AppErrorException",
    "SchemaDefinitionError",
    "RegistryStateError",
    "register_error_handlers",
    "result_to_response",
]
