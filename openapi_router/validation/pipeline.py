"""Validation Pipeline

Runs every declared parameter of a route against the raw request values and
either returns the data bag (name -> coerced value) or the aggregate
ValidationError. Failures are accumulated, never short-circuited.

Usage:
    pipeline = ValidationPipeline(route_schema.parameters)
    match pipeline.run(query={"page": "2"}, path={"todoId": "7"}):
        case Ok(data):
            ...
        case Err(exc):
            return JSONResponse(exc.to_dict(), status_code=400)
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from openapi_router.errors import Err, Ok, Result

from .errors import FieldError, FieldErrorAccumulator, ValidationError
from .parameters import ParameterDeclaration, ParameterLocation
from .types import SchemaType

RawSource = Mapping[str, "str | Sequence[str]"]


def _pick(raw: Any, schema: SchemaType) -> Any:
    """Reduce a multi-valued raw entry for scalar types (last value wins)."""
    if schema.multi or not isinstance(raw, (list, tuple)):
        return raw
    return raw[-1] if raw else None


class ValidationPipeline:
    """Collect-all validation over an ordered set of parameter declarations."""

    __slots__ = ("parameters",)

    def __init__(self, parameters: Mapping[str, ParameterDeclaration]):
        self.parameters = parameters

    def run(self, query: RawSource | None = None,
            path: RawSource | None = None) -> Result[dict[str, Any], ValidationError]:
        sources = {
            ParameterLocation.QUERY: query or {},
            ParameterLocation.PATH: path or {},
        }
        accumulator = FieldErrorAccumulator()
        data: dict[str, Any] = {}

        for name, declaration in self.parameters.items():
            raw = _pick(sources[declaration.location].get(name), declaration.schema)
            match declaration.validate(raw):
                case Ok(value):
                    data[name] = value
                case Err(error):
                    accumulator.add_error(FieldError.from_app_error(name, declaration.location, error))

        if (exc := accumulator.to_validation_error()) is not None:
            return Err(exc)
        return Ok(data)


def validate_parameters(parameters: Mapping[str, ParameterDeclaration], *,
                        query: RawSource | None = None,
                        path: RawSource | None = None) -> dict[str, Any]:
    """Validate and return the data bag, raising ValidationError on failure."""
    result = ValidationPipeline(parameters).run(query=query, path=path)
    if result.is_err():
        raise result.unwrap_err()
    return result.unwrap()
