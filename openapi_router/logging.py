"""structlog setup for the router.

One configure call routes structlog and stdlib records (uvicorn included)
through the same renderer: colored console lines while developing, one JSON
object per line when ``json_logs`` is set. Request middleware binds the
correlation id through contextvars so every event of a request carries it.
"""
import logging
import sys
from uuid import uuid4

import structlog
from structlog.types import EventDict, Processor

SERVICE_NAME = "openapi-router"
SERVICE_VERSION = "0.1.0"

# Header and query values that must never reach a log line.
REDACTED_KEYS = frozenset({"password", "token", "secret", "authorization", "cookie", "api_key"})


def _redact(obj, depth: int = 0):
    if depth > 5:
        return obj
    if isinstance(obj, dict):
        return {
            key: "[REDACTED]" if str(key).lower() in REDACTED_KEYS else _redact(value, depth + 1)
            for key, value in obj.items()
        }
    if isinstance(obj, list):
        return [_redact(item, depth + 1) for item in obj]
    return obj


def _censor_sensitive_keys(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    return _redact(event_dict)


def _add_service_info(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("version", SERVICE_VERSION)
    return event_dict


def _drop_color_message_key(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """uvicorn attaches a colored duplicate of its message."""
    event_dict.pop("color_message", None)
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _add_service_info,
        _censor_sensitive_keys,
        _drop_color_message_key,
    ]


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Install the stdout handler and structlog configuration.

    Safe to call more than once; the root handler list is replaced each time.
    """
    shared = _shared_processors()
    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True, exception_formatter=structlog.dev.plain_traceback)

    structlog.configure(
        processors=[
            *shared,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    ))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # uvicorn records propagate to the root handler instead of its own.
    for name in ("uvicorn", "uvicorn.error"):
        logging.getLogger(name).handlers = []
    for name in ("uvicorn.access", "httpcore", "httpx"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def generate_correlation_id() -> str:
    """Short id for requests that arrive without an ``X-Correlation-ID``."""
    return uuid4().hex[:8]


def bind_context(**kwargs) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LoggerRegistry:
    """One cached logger per component, named ``openapi_router.<component>``."""

    _loggers: dict[str, structlog.stdlib.BoundLogger] = {}

    @classmethod
    def get(cls, component: str) -> structlog.stdlib.BoundLogger:
        if component not in cls._loggers:
            cls._loggers[component] = get_logger(f"openapi_router.{component}")
        return cls._loggers[component]


def api_logger() -> structlog.stdlib.BoundLogger:
    """Request handling: middleware and dispatch."""
    return LoggerRegistry.get("api")


def registry_logger() -> structlog.stdlib.BoundLogger:
    """Route registration and document generation."""
    return LoggerRegistry.get("registry")


def cli_logger() -> structlog.stdlib.BoundLogger:
    return LoggerRegistry.get("cli")
