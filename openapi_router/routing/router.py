"""Router facade.

The user-facing entry point: verb decorators register routes into a
RouteRegistry, ``raw`` registers undocumented routes, and ``openapi()``
returns the cached document once the router is sealed.

Usage:
    router = OpenAPIRouter({"info": {"title": "Todos", "version": "1.0"}})

    @router.get("/todos/:todoId")
    class TodoFetch(OpenAPIRoute):
        schema = RouteSchema(parameters={"todoId": Path(Int)})

        def handle(self, request, data, **context):
            return {"todoId": data["todoId"]}

    @router.raw.get("/health")
    def health(request):
        return {"status": "ok"}

    app = create_app(router)
"""
from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any, TypeVar

from openapi_router.config import Settings, get_settings

from .document import DocumentGenerator, DocumentOverride
from .registry import RouteEntry, RouteRegistry
from .schema import RouteSchema

H = TypeVar("H", bound=Callable[..., Any])


class _RouteVerbs:
    """Verb shortcuts over an abstract ``route(method, path, **options)``."""

    def route(self, method: str, path: str, **options: Any) -> Callable[[H], H]:
        raise NotImplementedError

    def get(self, path: str, **options: Any) -> Callable[[H], H]:
        return self.route("GET", path, **options)

    def post(self, path: str, **options: Any) -> Callable[[H], H]:
        return self.route("POST", path, **options)

    def put(self, path: str, **options: Any) -> Callable[[H], H]:
        return self.route("PUT", path, **options)

    def patch(self, path: str, **options: Any) -> Callable[[H], H]:
        return self.route("PATCH", path, **options)

    def delete(self, path: str, **options: Any) -> Callable[[H], H]:
        return self.route("DELETE", path, **options)

    def head(self, path: str, **options: Any) -> Callable[[H], H]:
        return self.route("HEAD", path, **options)

    def options(self, path: str, **options: Any) -> Callable[[H], H]:
        return self.route("OPTIONS", path, **options)


class RawRoutes(_RouteVerbs):
    """Bypass registration: no validation, not documented."""

    def __init__(self, registry: RouteRegistry):
        self._registry = registry

    def route(self, method: str, path: str) -> Callable[[H], H]:
        def decorator(handler: H) -> H:
            self._registry.add_raw(method, path, handler)
            return handler
        return decorator


class OpenAPIRouter(_RouteVerbs):
    """Declarative router producing both validated endpoints and their document."""

    def __init__(self, schema: DocumentOverride | Mapping[str, Any] | None = None, *,
                 settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.override = DocumentOverride.parse(schema)
        self.registry = RouteRegistry()
        self.raw = RawRoutes(self.registry)
        self._document: dict[str, Any] | None = None

    def route(self, method: str, path: str, *, schema: RouteSchema | None = None) -> Callable[[H], H]:
        """Register an OpenAPIRoute subclass, or a plain callable with ``schema``."""
        def decorator(handler: H) -> H:
            self.registry.add(method, path, handler, schema=schema)
            return handler
        return decorator

    def seal(self) -> None:
        self.registry.seal()

    @property
    def sealed(self) -> bool:
        return self.registry.sealed

    def openapi(self) -> dict[str, Any]:
        """The generated document, built on first access."""
        if self._document is None:
            generator = DocumentGenerator(
                self.registry,
                self.override,
                openapi_version=self.settings.OPENAPI_VERSION,
                default_title=self.settings.APP_TITLE,
                default_version=self.settings.APP_VERSION,
            )
            self._document = generator.generate()
        return self._document

    def __iter__(self) -> Iterator[RouteEntry]:
        return iter(self.registry)

    def __len__(self) -> int:
        return len(self.registry)
