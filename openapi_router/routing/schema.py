"""Route schemas and class-based routes.

A RouteSchema is the declarative description of one operation: its
parameters drive request validation and, together with the remaining
metadata, the operation object in the generated document.

Usage:
    class TodoFetch(OpenAPIRoute):
        schema = RouteSchema(
            tags=["Todos"],
            summary="Fetch a todo",
            parameters={"todoId": Path(Int)},
            responses={"200": {"todo": {"id": 7, "title": "Buy milk"}}},
        )

        async def handle(self, request, data, **context):
            return {"todoId": data["todoId"]}
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from http import HTTPStatus
from typing import Any, ClassVar
import re

from starlette.requests import Request

from openapi_router.errors import SchemaDefinitionError
from openapi_router.validation import ParameterDeclaration, Query

from .shapes import render_shape

STATUS_KEY = re.compile(r"[1-5]\d\d")


def reason_phrase(status: str) -> str:
    """HTTP reason phrase for a status key, used as the default description."""
    if status == "default":
        return "Default response"
    try:
        return HTTPStatus(int(status)).phrase
    except ValueError:
        return "Response"


@dataclass(frozen=True, slots=True)
class ApiResponse:
    """One documented response: a shape tree plus its description."""
    shape: Any = None
    description: str = ""
    content_type: str = "application/json"


@dataclass(frozen=True)
class RouteSchema:
    """Declarative metadata for one operation.

    ``parameters`` maps names to ParameterDeclarations; bare types are
    declared as query parameters. ``responses`` maps status keys (3-digit
    codes or ``"default"``) to ApiResponses or bare shapes.
    """
    tags: tuple[str, ...] = ()
    summary: str = ""
    description: str = ""
    operation_id: str | None = None
    deprecated: bool = False
    parameters: Mapping[str, Any] = field(default_factory=dict)
    responses: Mapping[Any, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        tags = (self.tags,) if isinstance(self.tags, str) else tuple(self.tags)
        object.__setattr__(self, "tags", tags)
        object.__setattr__(self, "parameters", self._normalize_parameters(self.parameters))
        object.__setattr__(self, "responses", self._normalize_responses(self.responses))

    @staticmethod
    def _normalize_parameters(parameters: Mapping[str, Any]) -> dict[str, ParameterDeclaration]:
        if not isinstance(parameters, Mapping):
            raise SchemaDefinitionError(
                f"RouteSchema.parameters must be a mapping, got {type(parameters).__name__}")
        normalized = {}
        for name, declaration in parameters.items():
            if not isinstance(declaration, ParameterDeclaration):
                declaration = Query(declaration)
            normalized[name] = declaration.bind(name)
        return normalized

    @staticmethod
    def _normalize_responses(responses: Mapping[Any, Any]) -> dict[str, ApiResponse]:
        if not isinstance(responses, Mapping):
            raise SchemaDefinitionError(
                f"RouteSchema.responses must be a mapping, got {type(responses).__name__}")
        normalized = {}
        for status, response in responses.items():
            key = str(status)
            if key != "default" and not STATUS_KEY.fullmatch(key):
                raise SchemaDefinitionError(f"Invalid response status key: {status!r}")
            if not isinstance(response, ApiResponse):
                response = ApiResponse(shape=response)
            if not response.description:
                response = replace(response, description=reason_phrase(key))
            # Render once to reject malformed shape trees.
            if response.shape is not None:
                render_shape(response.shape, {})
            normalized[key] = response
        return normalized

    def with_parameters(self, extra: Mapping[str, ParameterDeclaration]) -> RouteSchema:
        """Copy with additional parameter declarations appended."""
        return replace(self, parameters={**self.parameters, **extra})


class OpenAPIRoute:
    """Base class for documented, validated routes.

    Subclasses set ``schema`` and implement ``handle``, either sync or async.
    A fresh instance is created for every request.
    """

    schema: ClassVar[RouteSchema] = RouteSchema()

    @classmethod
    def get_schema(cls) -> RouteSchema:
        """The class schema, with the docstring's first line as a fallback summary."""
        schema = cls.schema
        if not isinstance(schema, RouteSchema):
            raise SchemaDefinitionError(
                f"{cls.__name__}.schema must be a RouteSchema, got {type(schema).__name__}")
        if not schema.summary and cls.__doc__:
            schema = replace(schema, summary=cls.__doc__.strip().splitlines()[0])
        return schema

    def handle(self, request: Request, data: dict[str, Any], **context: Any) -> Any:
        raise NotImplementedError(f"{type(self).__name__} must implement handle()")
