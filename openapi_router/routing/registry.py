"""Route Registry

Ordered, two-phase store of route entries. During the registration phase
entries are appended; ``seal()`` freezes the registry, after which document
generation and dispatch may read it and any further registration is a
RegistryStateError.

Every definition problem (unknown method, duplicate route, path parameter
missing from the template) raises SchemaDefinitionError at ``add`` time.
"""
from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from openapi_router.errors import RegistryStateError, SchemaDefinitionError
from openapi_router.logging import registry_logger
from openapi_router.validation import ParameterLocation, Path, Str

from .paths import path_signature, path_tokens, to_openapi_path
from .schema import OpenAPIRoute, RouteSchema

log = registry_logger()

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"})


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """One registered route.

    ``schema`` is None for raw routes, which bypass validation and are left
    out of the document (``visible`` is False).
    """
    method: str
    path: str
    handler: Callable[..., Any]
    schema: RouteSchema | None = None
    visible: bool = True

    @property
    def openapi_path(self) -> str:
        return to_openapi_path(self.path)

    @property
    def is_class_route(self) -> bool:
        return isinstance(self.handler, type) and issubclass(self.handler, OpenAPIRoute)

    @property
    def name(self) -> str:
        return getattr(self.handler, "__name__", type(self.handler).__name__)


class RouteRegistry:
    """Ordered route entries with a registration phase and a sealed phase."""

    def __init__(self) -> None:
        self._entries: list[RouteEntry] = []
        self._keys: set[tuple[str, str]] = set()
        self._sealed = False

    # -- registration ----------------------------------------------------------

    def add(self, method: str, path: str, handler: Callable[..., Any],
            schema: RouteSchema | None = None) -> RouteEntry:
        """Register a documented, validated route.

        ``handler`` is an OpenAPIRoute subclass (schema taken from the class)
        or a plain callable ``handler(request, data, **context)`` with an
        explicit ``schema``.
        """
        self._require_open(f"{method} {path}")
        if isinstance(handler, type) and issubclass(handler, OpenAPIRoute):
            if schema is not None:
                raise SchemaDefinitionError(
                    f"{handler.__name__} declares its own schema; do not pass schema=")
            schema = handler.get_schema()
        elif not callable(handler):
            raise SchemaDefinitionError(f"Route handler must be callable, got {handler!r}")
        elif schema is None:
            raise SchemaDefinitionError(
                f"Plain handler {getattr(handler, '__name__', handler)!r} requires schema=")
        elif not isinstance(schema, RouteSchema):
            raise SchemaDefinitionError(f"schema must be a RouteSchema, got {type(schema).__name__}")

        schema = self._bind_path_parameters(path, schema)
        return self._append(RouteEntry(method=method, path=path, handler=handler, schema=schema))

    def add_raw(self, method: str, path: str, handler: Callable[..., Any]) -> RouteEntry:
        """Register an undocumented route called as ``handler(request, **context)``."""
        if not callable(handler):
            raise SchemaDefinitionError(f"Route handler must be callable, got {handler!r}")
        return self._append(RouteEntry(method=method, path=path, handler=handler, visible=False))

    def _append(self, entry: RouteEntry) -> RouteEntry:
        self._require_open(f"{entry.method} {entry.path}")
        method = entry.method.upper() if isinstance(entry.method, str) else entry.method
        if method not in HTTP_METHODS:
            raise SchemaDefinitionError(f"Unsupported HTTP method: {entry.method!r}")
        if not isinstance(entry.path, str) or not entry.path.startswith("/"):
            raise SchemaDefinitionError(f"Route paths must start with '/', got {entry.path!r}")

        key = (method, path_signature(entry.path))
        if key in self._keys:
            raise SchemaDefinitionError(f"Route {method} {entry.path} is already registered")

        if method != entry.method:
            entry = RouteEntry(method=method, path=entry.path, handler=entry.handler,
                               schema=entry.schema, visible=entry.visible)
        self._keys.add(key)
        self._entries.append(entry)
        log.debug("route_registered", method=method, path=entry.path,
                  handler=entry.name, visible=entry.visible)
        return entry

    @staticmethod
    def _bind_path_parameters(path: str, schema: RouteSchema) -> RouteSchema:
        tokens = path_tokens(path) if isinstance(path, str) else []
        if len(set(tokens)) != len(tokens):
            raise SchemaDefinitionError(f"Path {path!r} repeats a parameter name")

        for name, declaration in schema.parameters.items():
            if declaration.location is ParameterLocation.PATH and name not in tokens:
                raise SchemaDefinitionError(
                    f"Path parameter {name!r} does not appear in {path!r}", path=path, parameter=name)
            if declaration.location is not ParameterLocation.PATH and name in tokens:
                raise SchemaDefinitionError(
                    f"Parameter {name!r} is a path segment of {path!r} but declared in "
                    f"{declaration.location.value}", path=path, parameter=name)

        implicit = {name: Path(Str) for name in tokens if name not in schema.parameters}
        return schema.with_parameters(implicit) if implicit else schema

    # -- phase control ---------------------------------------------------------

    def seal(self) -> None:
        """End the registration phase. Idempotent."""
        if self._sealed:
            return
        self._sealed = True
        log.info("registry_sealed", routes=len(self._entries),
                 documented=len(self.visible_entries))

    @property
    def sealed(self) -> bool:
        return self._sealed

    def require_sealed(self, operation: str) -> None:
        if not self._sealed:
            raise RegistryStateError(f"Cannot {operation} before the registry is sealed", sealed=False)

    def _require_open(self, route: str) -> None:
        if self._sealed:
            raise RegistryStateError(f"Cannot register {route}: the registry is sealed", sealed=True)

    # -- read access -----------------------------------------------------------

    @property
    def entries(self) -> tuple[RouteEntry, ...]:
        return tuple(self._entries)

    @property
    def visible_entries(self) -> tuple[RouteEntry, ...]:
        return tuple(entry for entry in self._entries if entry.visible)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RouteEntry]:
        return iter(tuple(self._entries))
