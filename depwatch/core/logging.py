"""Structured logging setup shared by the API, the scheduler and the CLI."""

from __future__ import annotations

import logging.config
import os
import sys

import structlog

# Third-party loggers that are too chatty at INFO.
_QUIET_LOGGERS = (
    "uvicorn.access",
    "sqlalchemy.engine",
    "asyncpg",
    "httpx",
    "httpcore",
)


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(fmt: str) -> structlog.types.Processor:
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Route structlog and stdlib records through one stderr handler.

    *level* and *fmt* fall back to ``DEPWATCH_LOG_LEVEL`` (default ``INFO``)
    and ``DEPWATCH_LOG_FORMAT`` (``console`` or ``json``, default
    ``console``). Stdout stays free for command output.
    """
    level = (level or os.environ.get("DEPWATCH_LOG_LEVEL", "INFO")).upper()
    fmt = (fmt or os.environ.get("DEPWATCH_LOG_FORMAT", "console")).lower()
    processors = _shared_processors()

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    loggers: dict[str, dict[str, str]] = {name: {"level": "WARNING"} for name in _QUIET_LOGGERS}
    loggers["depwatch"] = {"level": level}
    loggers["uvicorn.error"] = {"level": "INFO"}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": processors,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        _renderer(fmt),
                    ],
                },
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "structlog",
                },
            },
            "root": {"handlers": ["stderr"], "level": level},
            "loggers": loggers,
        }
    )
