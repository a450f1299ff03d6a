"""Structured logging configuration.

Outputs either JSON (for log shipping) or console format (for interactive
use). Logs go to stderr so command output on stdout stays parseable.

Usage:
    from pouch_admin.logging_config import get_logger, setup_logging

    setup_logging(log_level="DEBUG")
    logger = get_logger(__name__)
    logger.info("event_name", key1=value1, key2=value2)
"""

import logging
import os
import sys
from typing import Any, Literal

import structlog
from structlog.types import EventDict, Processor

# Event fields that may carry key secrets or provider credentials
SECRET_FIELDS = frozenset({"api_key", "key", "secret", "token"})


def _mask(value: Any) -> Any:
    if isinstance(value, str) and value:
        return value[:4] + "***"
    return value


def redact_secrets(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask secret fields, including inside a plugin ``config`` mapping."""
    for name in event_dict.keys() & SECRET_FIELDS:
        event_dict[name] = _mask(event_dict[name])
    config = event_dict.get("config")
    if isinstance(config, dict):
        event_dict["config"] = {k: _mask(v) if k in SECRET_FIELDS else v for k, v in config.items()}
    return event_dict


def setup_logging(
    service_name: str | None = None,
    log_format: Literal["json", "console"] | None = None,
    log_level: str | None = None,
) -> None:
    """Configure structured logging with structlog.

    Args:
        service_name: Name bound to every log line.
                     Falls back to SERVICE_NAME env var or "pouch-admin".
        log_format: Output format - "json" or "console".
                   Falls back to LOG_FORMAT env var or "console".
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
                  Falls back to LOG_LEVEL env var or "WARNING".
    """
    service_name = service_name or os.getenv("SERVICE_NAME", "pouch-admin")
    log_format = log_format or os.getenv("LOG_FORMAT", "console")
    log_level = log_level or os.getenv("LOG_LEVEL", "WARNING")

    numeric_level = getattr(logging, log_level.upper(), logging.WARNING)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
        force=True,
    )

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=False),
        # Merge contextvars (service name, key id, ...)
        structlog.contextvars.merge_contextvars,
        structlog.processors.CallsiteParameterAdder(
            {
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            }
        ),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        redact_secrets,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer(sort_keys=False))
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(service=service_name)

    logger = structlog.get_logger()
    logger.info(
        "logging_initialized",
        service=service_name,
        log_format=log_format,
        log_level=log_level,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance."""
    return structlog.get_logger(name)
