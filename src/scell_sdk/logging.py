"""Structured logging for Scell SDK.

SDK modules log through structlog loggers bound to the standard library
``scell_sdk`` logger hierarchy, so nothing is emitted unless the
application enables it. ``configure_logging`` attaches a structlog-rendered
handler for applications that have no logging setup of their own.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from structlog.typing import Processor

ROOT_LOGGER = "scell_sdk"

logging.getLogger(ROOT_LOGGER).addHandler(logging.NullHandler())

_processors: list[Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
]


def configure_logging(level: str = "INFO", format: str = "json") -> None:
    """Render SDK log events to stdout.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        format: "json" for machine-readable output, "text" for a console renderer.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    renderer: Processor
    if format.lower() == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    sdk_logger = logging.getLogger(ROOT_LOGGER)
    sdk_logger.handlers = [logging.NullHandler(), handler]
    sdk_logger.setLevel(log_level)
    sdk_logger.propagate = False


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger under the ``scell_sdk`` hierarchy."""
    return structlog.wrap_logger(  # type: ignore[no-any-return]
        logging.getLogger(name or ROOT_LOGGER),
        processors=_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
    )
