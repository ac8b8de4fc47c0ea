"""Request dispatch.

Binds one registry entry to a Starlette endpoint. Documented entries run the
validation pipeline first and short-circuit with a 400 listing every field
error; raw entries go straight to their handler. Handler return values are
normalized into responses. Errors other than ValidationError are not caught
here; the application's exception handlers own them.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any
import inspect

from fastapi.encoders import jsonable_encoder
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from openapi_router.logging import api_logger
from openapi_router.validation import ValidationError, ValidationPipeline

from .registry import RouteEntry, RouteRegistry

log = api_logger()


def extract_query(request: Request) -> dict[str, str | list[str]]:
    """Query parameters with repeated keys kept as lists."""
    params = request.query_params
    query: dict[str, str | list[str]] = {}
    for key in params.keys():
        values = params.getlist(key)
        query[key] = values[0] if len(values) == 1 else values
    return query


def to_response(value: Any) -> Response:
    """Pass Starlette responses through; wrap anything else as JSON."""
    if isinstance(value, Response):
        return value
    return JSONResponse(jsonable_encoder(value))


async def _call(handler: Any, *args: Any, **kwargs: Any) -> Any:
    if inspect.iscoroutinefunction(handler):
        return await handler(*args, **kwargs)
    result = await run_in_threadpool(handler, *args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


class DispatchAdapter:
    """Starlette endpoint for one registry entry."""

    __slots__ = ("entry", "registry", "context", "pipeline")

    def __init__(self, entry: RouteEntry, registry: RouteRegistry,
                 context: Mapping[str, Any] | None = None):
        self.entry = entry
        self.registry = registry
        self.context = dict(context or {})
        self.pipeline = ValidationPipeline(entry.schema.parameters) if entry.schema is not None else None

    async def dispatch(self, request: Request) -> Response:
        self.registry.require_sealed("dispatch requests")

        if self.pipeline is None:
            return to_response(await _call(self.entry.handler, request, **self.context))

        outcome = self.pipeline.run(query=extract_query(request), path=dict(request.path_params))
        if outcome.is_err():
            return self._reject(outcome.unwrap_err())
        data = outcome.unwrap()

        handler = self.entry.handler().handle if self.entry.is_class_route else self.entry.handler
        try:
            result = await _call(handler, request, data, **self.context)
        except ValidationError as exc:
            return self._reject(exc)
        return to_response(result)

    def _reject(self, exc: ValidationError) -> JSONResponse:
        log.warning(
            "request_validation_failed",
            error_code=exc.to_app_error().code.name,
            method=self.entry.method,
            route=self.entry.path,
            error_count=len(exc.details),
            fields=[d.name for d in exc.details],
        )
        return JSONResponse(status_code=400, content=exc.to_dict())
