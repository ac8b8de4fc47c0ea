"""FastAPI application factory.

Mounts every registry entry through Starlette routing and serves the
generated document plus Swagger UI / ReDoc pages. FastAPI's own schema and
docs routes are disabled; the router's document is the only one served.

Usage:
    from openapi_router import create_app
    from myservice.routes import router

    app = create_app(router, context={"db": database})
"""
from collections.abc import Mapping
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.openapi.docs import get_redoc_html, get_swagger_ui_html
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from openapi_router.config import Settings
from openapi_router.errors import SchemaDefinitionError, register_error_handlers
from openapi_router.logging import configure_logging, get_logger
from openapi_router.middleware import RequestLoggingMiddleware
from openapi_router.routing import DispatchAdapter, OpenAPIRouter, RouteEntry, dump_document, path_signature

log = get_logger(__name__)


def create_app(router: OpenAPIRouter, *, settings: Settings | None = None,
               context: Mapping[str, Any] | None = None) -> FastAPI:
    """Seal ``router`` and build the ASGI application serving it.

    ``context`` is passed to every handler as keyword arguments.
    """
    settings = settings or router.settings
    configure_logging(level=settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

    router.seal()
    info = router.override.info
    title = (info.title if info and info.title else None) or settings.APP_TITLE
    version = (info.version if info and info.version else None) or settings.APP_VERSION

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("startup", title=title, routes=len(router.registry),
                 documented=len(router.registry.visible_entries))
        yield
        log.info("shutdown", title=title)

    app = FastAPI(
        title=title,
        version=version,
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )

    # Register structured error handlers
    register_error_handlers(app)
    app.add_middleware(RequestLoggingMiddleware)

    _check_document_paths(router, _document_paths(settings))
    _mount_documents(app, router, settings, title)

    for entry in _mount_order(router.registry.entries):
        adapter = DispatchAdapter(entry, router.registry, context)
        app.add_route(entry.openapi_path, adapter.dispatch, methods=[entry.method],
                      name=f"{entry.method.lower()}:{entry.path}", include_in_schema=False)

    return app


def _mount_order(entries: tuple[RouteEntry, ...]) -> list[RouteEntry]:
    """Registration order, with each HEAD entry moved ahead of an earlier GET on
    the same path (Starlette GET routes also answer HEAD)."""
    ordered: list[RouteEntry] = []
    for entry in entries:
        if entry.method == "HEAD":
            signature = path_signature(entry.path)
            for index, mounted in enumerate(ordered):
                if mounted.method == "GET" and path_signature(mounted.path) == signature:
                    ordered.insert(index, entry)
                    break
            else:
                ordered.append(entry)
        else:
            ordered.append(entry)
    return ordered


def _document_paths(settings: Settings) -> list[str]:
    paths = [settings.OPENAPI_URL, settings.OPENAPI_YAML_URL]
    if settings.OPENAPI_URL:
        paths += [settings.DOCS_URL, settings.REDOC_URL]
    return [path for path in paths if path]


def _check_document_paths(router: OpenAPIRouter, document_paths: list[str]) -> None:
    for entry in router.registry:
        if entry.method in ("GET", "HEAD") and entry.openapi_path in document_paths:
            raise SchemaDefinitionError(
                f"Route {entry.method} {entry.path} collides with a served document endpoint",
                path=entry.path)


def _mount_documents(app: FastAPI, router: OpenAPIRouter, settings: Settings, title: str) -> None:
    if settings.OPENAPI_URL:
        async def openapi_json(request: Request) -> Response:
            return JSONResponse(router.openapi())

        app.add_route(settings.OPENAPI_URL, openapi_json, methods=["GET"], include_in_schema=False)

    if settings.OPENAPI_YAML_URL:
        async def openapi_yaml(request: Request) -> Response:
            return Response(dump_document(router.openapi(), "yaml"), media_type="application/yaml")

        app.add_route(settings.OPENAPI_YAML_URL, openapi_yaml, methods=["GET"], include_in_schema=False)

    # The HTML pages load the JSON document, so they need it mounted.
    if not settings.OPENAPI_URL:
        return

    if settings.DOCS_URL:
        async def swagger_ui(request: Request) -> Response:
            return get_swagger_ui_html(openapi_url=settings.OPENAPI_URL, title=f"{title} - Swagger UI")

        app.add_route(settings.DOCS_URL, swagger_ui, methods=["GET"], include_in_schema=False)

    if settings.REDOC_URL:
        async def redoc(request: Request) -> Response:
            return get_redoc_html(openapi_url=settings.OPENAPI_URL, title=f"{title} - ReDoc")

        app.add_route(settings.REDOC_URL, redoc, methods=["GET"], include_in_schema=False)
