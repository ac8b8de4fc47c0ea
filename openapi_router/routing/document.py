"""OpenAPI Document Generation

Folds the sealed registry's visible entries into an OpenAPI 3 document on
top of a user-supplied override (info, servers, security, extra components).
Generation is a pure function of the registry and the override: calling
``generate()`` twice yields equal documents.

Usage:
    generator = DocumentGenerator(registry, DocumentOverride.parse({"info": {"title": "Todos"}}))
    document = generator.generate()
    print(dump_document(document, "yaml"))
"""
from __future__ import annotations

from copy import deepcopy
from typing import Any
import json

import yaml
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from openapi_router.errors import SchemaDefinitionError
from openapi_router.logging import registry_logger

from .registry import RouteEntry, RouteRegistry
from .schema import ApiResponse, RouteSchema
from .shapes import render_shape

log = registry_logger()

DEFAULT_OPENAPI_VERSION = "3.0.3"
EMPTY_RESPONSES = {"200": {"description": "Successful response"}}


class Info(BaseModel):
    """OpenAPI ``info`` object; unknown keys (contact, license, ...) pass through."""
    model_config = ConfigDict(extra="allow")

    title: str | None = None
    version: str | None = None
    description: str | None = None


class DocumentOverride(BaseModel):
    """User-supplied base document merged under the generated paths."""
    model_config = ConfigDict(extra="allow")

    openapi: str | None = None
    info: Info | None = None
    servers: list[dict[str, Any]] | None = None
    security: list[dict[str, list[str]]] | None = None
    tags: list[dict[str, Any]] | None = None
    paths: dict[str, Any] | None = None
    components: dict[str, Any] | None = None

    @classmethod
    def parse(cls, data: DocumentOverride | dict[str, Any] | None) -> DocumentOverride:
        """Validate an override mapping, failing as a definition error."""
        if isinstance(data, DocumentOverride):
            return data
        try:
            return cls.model_validate(data or {})
        except PydanticValidationError as exc:
            raise SchemaDefinitionError(
                f"Invalid OpenAPI override: {exc.error_count()} error(s)",
                errors=[{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()],
            ) from exc


class DocumentGenerator:
    """Builds the OpenAPI document for a sealed registry."""

    def __init__(self, registry: RouteRegistry, override: DocumentOverride | None = None, *,
                 openapi_version: str = DEFAULT_OPENAPI_VERSION,
                 default_title: str = "OpenAPI Router", default_version: str = "1.0.0"):
        self.registry = registry
        self.override = override or DocumentOverride()
        self.openapi_version = openapi_version
        self.default_title = default_title
        self.default_version = default_version

    def generate(self) -> dict[str, Any]:
        self.registry.require_sealed("generate the OpenAPI document")

        base = deepcopy(self.override.model_dump(exclude_none=True))
        info = {"title": self.default_title, "version": self.default_version, **base.pop("info", {})}
        paths: dict[str, Any] = base.pop("paths", {})
        components: dict[str, Any] = base.pop("components", {})
        model_schemas: dict[str, Any] = {}

        document: dict[str, Any] = {"openapi": base.pop("openapi", self.openapi_version), "info": info}
        document.update(base)

        for entry in self.registry.visible_entries:
            paths.setdefault(entry.openapi_path, {})[entry.method.lower()] = self._operation(entry, model_schemas)

        if model_schemas:
            schemas = components.setdefault("schemas", {})
            for name, schema in model_schemas.items():
                schemas.setdefault(name, schema)

        document["paths"] = paths
        document["components"] = components

        log.info("openapi_generated", paths=len(paths),
                 operations=len(self.registry.visible_entries), models=len(model_schemas))
        return document

    def _operation(self, entry: RouteEntry, model_schemas: dict[str, Any]) -> dict[str, Any]:
        schema: RouteSchema = entry.schema
        operation: dict[str, Any] = {
            "tags": list(schema.tags),
            "summary": schema.summary,
            "description": schema.description,
        }
        if schema.operation_id:
            operation["operationId"] = schema.operation_id
        operation["parameters"] = [declaration.to_openapi() for declaration in schema.parameters.values()]
        operation["responses"] = self._responses(schema.responses, model_schemas)
        if schema.deprecated:
            operation["deprecated"] = True
        return operation

    @staticmethod
    def _responses(responses: dict[str, ApiResponse], model_schemas: dict[str, Any]) -> dict[str, Any]:
        if not responses:
            return deepcopy(EMPTY_RESPONSES)
        rendered = {}
        for status, response in responses.items():
            item: dict[str, Any] = {"description": response.description}
            if response.shape is not None:
                item["content"] = {
                    response.content_type: {"schema": render_shape(response.shape, model_schemas)},
                }
            rendered[status] = item
        return rendered


def dump_document(document: dict[str, Any], fmt: str = "json") -> str:
    """Serialize a document as JSON or YAML."""
    if fmt == "yaml":
        return yaml.safe_dump(document, sort_keys=False, allow_unicode=True)
    if fmt == "json":
        return json.dumps(document, indent=2, ensure_ascii=False)
    raise ValueError(f"Unsupported document format: {fmt!r}")
