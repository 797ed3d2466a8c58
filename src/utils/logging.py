"""structlog configuration for Stageside.

One processor chain (contextvars, level, stack info, exc info, ISO
timestamps) feeds one of two renderers: a coloured console renderer
while developing, JSON lines when ``app_env`` is ``"production"``.  The
stdlib root logger is routed through the same chain, so uvicorn and httpx
records look like ours.

Request-scoped fields (request id, route) are bound with
:func:`bind_request_context` and cleared at the end of each request by
the HTTP middleware.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

import structlog

# httpx logs every request at INFO; ticketing fan-out makes that noisy.
_QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(
    log_level: str = "INFO",
    app_env: str | None = None,
    json_output: bool = False,
    stream: TextIO | None = None,
) -> structlog.BoundLogger:
    """Configure structlog and the stdlib bridge.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR).
        app_env: Deployment environment; ``"production"`` selects JSON.
            Falls back to the ``APP_ENV`` environment variable.
        json_output: Force JSON regardless of environment.
        stream: Where log lines go; stdout by default.

    Returns:
        The root structlog logger.
    """
    stream = stream or sys.stdout
    env = app_env or os.environ.get("APP_ENV", "development")
    use_json = json_output or env == "production"
    level = logging.getLevelName(log_level.upper())

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if use_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=stream.isatty())

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )
    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Named logger; configures defaults on first use."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)


def bind_request_context(**fields: str) -> None:
    """Attach fields to every log line emitted during the current request."""
    structlog.contextvars.bind_contextvars(**fields)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
