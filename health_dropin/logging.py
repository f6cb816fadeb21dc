"""Logging for health_dropin.

Package modules obtain loggers through :func:`get_logger` and never touch
logging configuration. :func:`setup_logging` is for whoever owns the process
(``python -m health_dropin`` or the embedding application): it renders
structlog events and stdlib records, uvicorn's included, through a single
stdout handler.
"""

from __future__ import annotations

import functools
import logging
import sys
from typing import Any

import structlog

# The standalone server runs uvicorn with log_config=None, so these loggers
# have no handlers of their own.
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error")


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)


def setup_logging(
    *,
    log_level: str = "INFO",
    json_logs: bool = False,
    service_name: str = "health-dropin",
) -> None:
    """Send every log record to stdout, as JSON or for a console.

    Args:
        log_level: Root log level name.
        json_logs: JSON lines (production) instead of console rendering.
        service_name: Value of the ``service`` key on every record.
    """
    pre_chain = _pre_chain(service_name)

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(json_logs),
            ],
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level.upper())

    _route_uvicorn()


def _pre_chain(service_name: str) -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        functools.partial(_stamp_service, service_name),
    ]


def _renderer(json_logs: bool) -> structlog.types.Processor:
    if json_logs:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def _stamp_service(
    service_name: str, logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    event_dict.setdefault("service", service_name)
    return event_dict


def _route_uvicorn() -> None:
    """Hand uvicorn's records to the root handler."""
    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True
        uvicorn_logger.setLevel(logging.NOTSET)
