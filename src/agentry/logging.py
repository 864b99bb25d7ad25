"""structlog setup shared by the HTTP app and the CLI.

Modules keep logging through ``logging.getLogger(__name__)``; records are routed
through structlog's ``ProcessorFormatter`` so request context (method, path,
user id) bound with :func:`bind_context` shows up on every line.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from agentry.config import get_settings

# Chatty third-party loggers, capped at WARNING unless LOG_LEVEL=DEBUG.
_NOISY_LOGGERS = ("uvicorn.access", "watchfiles.main")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def configure_logging(level: str, json_output: bool | None = None) -> None:
    """Install a single stderr handler on the root logger.

    Args:
        level: Log level name; unknown names fall back to INFO.
        json_output: Force JSON lines. Defaults to JSON when APP_ENV=prod.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    if json_output is None:
        json_output = get_settings().app_env == "prod"

    shared = _shared_processors()
    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)

    if log_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def bind_context(**kwargs: object) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


@contextmanager
def request_context(**kwargs: object) -> Iterator[None]:
    """Fresh log context for one request; anything bound inside is dropped on exit."""
    clear_context()
    bind_context(**kwargs)
    try:
        yield
    finally:
        clear_context()
