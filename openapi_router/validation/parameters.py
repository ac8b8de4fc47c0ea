"""Parameter Declarations

A parameter binds a SchemaType to a request location. ``Query`` and ``Path``
accept any shorthand ``to_schema_type`` understands plus per-declaration
options, merged with precedence explicit options > instance attributes >
type defaults.

Usage:
    parameters = {
        "todoId": Path(Int, description="Todo id"),
        "page": Query(Int(default=1), required=False),
        "status": Query(Enumeration(["open", "done"]), required=False),
    }
"""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any

from openapi_router.errors import AppError, Result, SchemaDefinitionError

from .types import SchemaType, to_schema_type


class ParameterLocation(str, Enum):
    """Where a raw value is read from."""
    QUERY = "query"
    PATH = "path"


@dataclass(frozen=True, slots=True)
class ParameterDeclaration:
    """A SchemaType bound to a location; the name comes from the schema key."""
    location: ParameterLocation
    schema: SchemaType
    name: str | None = None

    @property
    def required(self) -> bool:
        return self.schema.required

    def bind(self, name: str) -> ParameterDeclaration:
        """Return a copy carrying the parameter name."""
        if not isinstance(name, str) or not name:
            raise SchemaDefinitionError(f"Parameter names must be non-empty strings, got {name!r}")
        return self if self.name == name else replace(self, name=name)

    def validate(self, raw: Any) -> Result[Any, AppError]:
        return self.schema.validate(raw)

    def to_openapi(self) -> dict[str, Any]:
        """Render the OpenAPI parameter object."""
        param: dict[str, Any] = {
            "name": self.name,
            "in": self.location.value,
            "required": self.required,
            "schema": self.schema.to_json_schema(),
        }
        if self.schema.description:
            param["description"] = self.schema.description
        if self.schema.example is not None:
            param["example"] = self.schema.example
        return param


def _declare(location: ParameterLocation, type_: Any, options: dict[str, Any]) -> ParameterDeclaration:
    schema = to_schema_type(type_)
    allowed = {f.name for f in fields(schema) if f.init}
    if unknown := sorted(set(options) - allowed):
        raise SchemaDefinitionError(
            f"Unknown option(s) for {type(schema).__name__}: {', '.join(unknown)}",
            allowed=sorted(allowed))

    overrides = dict(options)
    if location is ParameterLocation.PATH:
        overrides["required"] = True
    if overrides:
        schema = replace(schema, **overrides)
    return ParameterDeclaration(location=location, schema=schema)


def Query(type_: Any, **options: Any) -> ParameterDeclaration:
    """Declare a query-string parameter."""
    return _declare(ParameterLocation.QUERY, type_, options)


def Path(type_: Any, **options: Any) -> ParameterDeclaration:
    """Declare a path parameter. Path parameters are always required."""
    return _declare(ParameterLocation.PATH, type_, options)
