"""Structured logging setup via structlog."""

import logging

import structlog

from auditable.config import Settings, get_settings


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog for the process.

    Renders JSON in production and a console format elsewhere.
    Request ids bound with structlog.contextvars are merged into
    every log line.

    Args:
        settings: Settings to read the level and environment from
    """
    settings = settings or get_settings()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            (
                structlog.processors.JSONRenderer()
                if settings.is_production
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


__all__ = [
    "configure_logging",
]
