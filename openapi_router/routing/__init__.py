"""Routing: route schemas, the registry, document generation and dispatch."""

from .paths import path_signature, path_tokens, to_openapi_path
from .shapes import render_shape, example_schema_type
from .schema import ApiResponse, RouteSchema, OpenAPIRoute, reason_phrase
from .registry import RouteEntry, RouteRegistry, HTTP_METHODS
from .document import (
    Info,
    DocumentOverride,
    DocumentGenerator,
    dump_document,
)
from .dispatch import DispatchAdapter, extract_query, to_response
from .router import OpenAPIRouter, RawRoutes

__all__ = [
    # Paths
    "path_signature",
    "path_tokens",
    "to_openapi_path",
    # Shapes
    "render_shape",
    "example_schema_type",
    # Schemas
    "ApiResponse",
    "RouteSchema",
    "OpenAPIRoute",
    "reason_phrase",
    # Registry
    "RouteEntry",
    "RouteRegistry",
    "HTTP_METHODS",
    # Document
    "Info",
    "DocumentOverride",
    "DocumentGenerator",
    "dump_document",
    # Dispatch
    "DispatchAdapter",
    "extract_query",
    "to_response",
    # Router
    "OpenAPIRouter",
    "RawRoutes",
]
