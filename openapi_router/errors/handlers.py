"""Exceptions and FastAPI exception handlers.

Three handlers are installed by ``create_app``:

- ``ValidationError`` -> 400 with the ``{"errors": [...]}`` body
- ``AppErrorException`` -> status of its error code, ``AppError.to_dict()`` body
- anything else -> logged with traceback, rendered as a 500 AppError
"""
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from openapi_router.logging import get_logger

from .types import AppError, ErrorCode, ErrorContext

log = get_logger("openapi_router.errors")

CORRELATION_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"


class AppErrorException(Exception):
    """Raised form of an AppError."""

    def __init__(self, error: AppError):
        super().__init__(str(error))
        self.error = error


class SchemaDefinitionError(AppErrorException):
    """A schema type, parameter or route was declared incorrectly.

    Raised while the application is being assembled, never while serving.
    """

    def __init__(self, message: str, **metadata):
        super().__init__(AppError(
            code=ErrorCode.E9010_SCHEMA_DEFINITION,
            message=message,
            context=ErrorContext(origin="definition"),
            metadata=metadata,
        ))
        self.message = message


class RegistryStateError(AppErrorException):
    """Registration after ``seal()``, or generation/dispatch before it."""

    def __init__(self, message: str, *, sealed: bool):
        super().__init__(AppError(
            code=ErrorCode.E9011_REGISTRY_STATE,
            message=message,
            context=ErrorContext(origin="registry"),
            metadata={"sealed": sealed},
        ))
        self.message = message


def result_to_response(error: AppError) -> JSONResponse:
    """Log ``error`` and render it with its code's HTTP status."""
    status_code = error.code.http_status
    emit = log.error if status_code >= 500 else log.warning
    emit(
        "error_response",
        status=status_code,
        error_code=error.code.name,
        category=error.code.category,
        origin=error.context.origin,
        correlation_id=error.context.correlation_id,
        message=error.message,
    )
    return JSONResponse(status_code=status_code, content=error.to_dict())


async def app_error_handler(request: Request, exc: AppErrorException) -> JSONResponse:
    error = exc.error.with_context(
        correlation_id=request.headers.get(CORRELATION_HEADER),
        request_id=request.headers.get(REQUEST_ID_HEADER),
    )
    return result_to_response(error)


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """400 listing every field error of a ValidationError raised past dispatch."""
    from openapi_router.validation.errors import ValidationError

    if not isinstance(exc, ValidationError):
        raise exc

    log.warning(
        "request_validation_failed",
        error_code=exc.to_app_error().code.name,
        error_count=len(exc.details),
        fields=[d.name for d in exc.details],
        origin="handler",
    )
    return JSONResponse(status_code=400, content=exc.to_dict())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception(
        "unhandled_exception",
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=request.url.path,
    )
    error = AppError(
        code=ErrorCode.E9001_UNEXPECTED_ERROR,
        message="An unexpected error occurred",
        context=ErrorContext(origin="unhandled"),
        cause=exc,
    ).with_context(correlation_id=request.headers.get(CORRELATION_HEADER))
    return result_to_response(error)


def register_error_handlers(app: FastAPI) -> None:
    from openapi_router.validation.errors import ValidationError

    app.add_exception_handler(AppErrorException, app_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
