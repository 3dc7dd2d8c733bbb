"""Logging configuration using structlog.

Call ``configure_logging()`` once at startup (the CLI does this).  Modules log
through the stdlib API::

    import logging
    logger = logging.getLogger(__name__)
    logger.info("✓ Saved: %s", title)

Records are routed through structlog's ``ProcessorFormatter`` and rendered as
human-readable console lines, or as JSON when ``json_logs=True``.
"""

from __future__ import annotations

import logging
import sys

import structlog

_NOISY_LOGGERS = ("asyncio", "playwright", "trafilatura", "htmldate", "urllib3")


def configure_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """Configure the root logger and structlog.

    Safe to call more than once: existing root handlers are replaced.

    Args:
        log_level: ``"DEBUG"``, ``"INFO"``, ``"WARNING"``, ``"ERROR"`` or
            ``"CRITICAL"``; case-insensitive, unknown values fall back to INFO.
        json_logs: Emit newline-delimited JSON instead of console lines.
    """
    level_upper = log_level.upper()
    numeric_level = getattr(logging, level_upper, logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        final_renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        shared_processors.append(structlog.processors.format_exc_info)
    else:
        final_renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            final_renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    if numeric_level > logging.DEBUG:
        for noisy_logger in _NOISY_LOGGERS:
            logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
