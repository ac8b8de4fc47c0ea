"""Command line interface.

    openapi-router export myservice.routes:router --format yaml --output openapi.yaml
    openapi-router serve myservice.routes:router --port 8080

The target is a ``module:attribute`` reference to an OpenAPIRouter, or to a
zero-argument factory function returning one.
"""
from __future__ import annotations

from pathlib import Path
from typing import Sequence
import argparse
import importlib
import inspect
import sys

from openapi_router.config import get_settings
from openapi_router.errors import AppErrorException
from openapi_router.logging import cli_logger, configure_logging
from openapi_router.routing import OpenAPIRouter, dump_document

log = cli_logger()


class TargetError(Exception):
    """A ``module:attribute`` target could not be resolved to a router."""


def load_router(target: str) -> OpenAPIRouter:
    """Import ``module:attribute`` and return the router it names."""
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise TargetError(f"Target must look like 'module:attribute', got {target!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise TargetError(f"Cannot import module {module_name!r}: {exc}") from exc

    obj = module
    for part in attribute.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise TargetError(f"Module {module_name!r} has no attribute {attribute!r}") from exc

    if inspect.isfunction(obj):
        try:
            obj = obj()
        except Exception as exc:
            raise TargetError(f"Router factory {target!r} failed: {type(exc).__name__}: {exc}") from exc
    if not isinstance(obj, OpenAPIRouter):
        raise TargetError(f"{target!r} is not an OpenAPIRouter (got {type(obj).__name__})")
    return obj


def cmd_export(args: argparse.Namespace) -> int:
    router = load_router(args.target)
    router.seal()
    text = dump_document(router.openapi(), args.format)

    if args.output:
        output = Path(args.output)
        output.write_text(text if text.endswith("\n") else text + "\n", encoding="utf-8")
        log.info("openapi_exported", target=args.target, output=str(output), format=args.format)
    else:
        sys.stdout.write(text if text.endswith("\n") else text + "\n")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from openapi_router.app import create_app

    settings = get_settings()
    router = load_router(args.target)
    app = create_app(router, settings=settings)
    host = args.host or settings.BACKEND_HOST
    port = args.port or settings.BACKEND_PORT

    log.info("server_config", host=host, port=port, routes=len(router))
    uvicorn.run(app, host=host, port=port, log_config=None)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openapi-router",
        description="Export or serve the OpenAPI document of a declarative router",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    export = subparsers.add_parser("export", help="Write the generated OpenAPI document")
    export.add_argument("target", help="module:attribute of the router")
    export.add_argument("--format", choices=["json", "yaml"], default="json", help="Output format")
    export.add_argument("--output", "-o", help="Output file (default: stdout)")
    export.set_defaults(func=cmd_export)

    serve = subparsers.add_parser("serve", help="Serve the router with uvicorn")
    serve.add_argument("target", help="module:attribute of the router")
    serve.add_argument("--host", help="Bind host (default: BACKEND_HOST)")
    serve.add_argument("--port", type=int, help="Bind port (default: BACKEND_PORT)")
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    # Logs go to stdout; keep exports to stdout parseable.
    configure_logging(level="WARNING" if args.command == "export" else settings.LOG_LEVEL,
                      json_logs=settings.LOG_JSON)

    try:
        return args.func(args)
    except TargetError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except AppErrorException as exc:
        print(f"error: {exc.error.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
