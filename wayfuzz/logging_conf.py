"""Logging configuration built around structlog JSON logging.

Log records go to stderr; stdout carries nothing but results.
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path

import structlog

_STRUCTLOG_CONFIGURED = False


def _logging_dict(level: str, log_file: Path | None) -> dict:
    handlers: dict[str, dict] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "json",
            "stream": "ext://sys.stderr",
        }
    }
    if log_file is not None:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "level": "DEBUG" if level == "DEBUG" else "INFO",
            "filename": str(log_file),
            "encoding": "utf-8",
            "formatter": "json",
        }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
            }
        },
        "handlers": handlers,
        "loggers": {
            "wayfuzz": {
                "handlers": list(handlers),
                "level": "DEBUG",
                "propagate": False,
            },
            "httpx": {"handlers": list(handlers), "level": "WARNING", "propagate": False},
        },
    }


def configure_logging(
    verbose: bool = False, log_file: Path | None = None
) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers and return the application logger.

    Handlers are rebuilt on every call so they bind to the current stderr.
    """

    global _STRUCTLOG_CONFIGURED
    level = "DEBUG" if verbose else "ERROR"
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(_logging_dict(level, log_file))

    if not _STRUCTLOG_CONFIGURED:
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.stdlib.filter_by_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                # Event becomes the message, remaining keys land in the JSON record.
                structlog.stdlib.render_to_log_kwargs,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        _STRUCTLOG_CONFIGURED = True
    return structlog.get_logger("wayfuzz")


__all__ = ["configure_logging"]
