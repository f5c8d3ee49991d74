"""
Structured logging using structlog with:
- JSON/console switchable format
- Correlation ID + request context
- Redaction of credentials that slip into event dicts
- Safe defaults for Uvicorn/SQLAlchemy

"""

from __future__ import annotations

import logging
import logging.config
import sys
import uuid
from typing import Any, Dict, List, Optional

import structlog
from pythonjsonlogger.json import JsonFormatter

# ---------------------------------------------------------------------
# Redaction
# ---------------------------------------------------------------------

_SECRET_KEYS = frozenset({"password", "password_hash", "token", "access_token", "authorization"})


class SecretRedactionProcessor:
    """Replace values of credential-like keys with a fixed marker (recursively)."""

    def __call__(self, logger, method_name, event_dict):
        return self._redact(event_dict)

    def _redact(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {
                k: ("***REDACTED***" if str(k).lower() in _SECRET_KEYS else self._redact(v))
                for k, v in value.items()
            }
        if isinstance(value, (list, tuple)):
            return [self._redact(v) for v in value]
        return value


# ---------------------------------------------------------------------
# Context processors
# ---------------------------------------------------------------------


def add_request_context(logger, method_name, event_dict):
    """Copy a few standard request fields from contextvars into the event."""
    ctx = structlog.contextvars.get_contextvars()
    for key in ("correlation_id", "user_id", "role", "path", "method"):
        if key in ctx and key not in event_dict:
            event_dict[key] = ctx[key]
    return event_dict


# ---------------------------------------------------------------------
# Public helpers to use from API code
# ---------------------------------------------------------------------


def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    """Generate/bind a correlation_id if not provided; returns the id."""
    cid = correlation_id or str(uuid.uuid4())
    structlog.contextvars.bind_contextvars(correlation_id=cid)
    return cid


def bind_context(**kwargs: Any) -> None:
    """Bind request-scoped fields (None values are skipped)."""
    payload = {k: v for k, v in kwargs.items() if v is not None}
    if payload:
        structlog.contextvars.bind_contextvars(**payload)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


# ---------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------


def _level_name_to_int(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)


def configure_logging(log_level: str = "INFO", log_format: str = "console", *, redact: bool = True) -> None:
    """
    Configure stdlib logging and structlog. Safe to call more than once.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_format: "json" for machine-readable output, "console" for humans
        redact: mask credential-like keys before rendering
    """
    logging_config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": JsonFormatter,
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S",
            },
            "console": {
                "format": "%(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json" if log_format == "json" else "console",
                "stream": sys.stdout,
            },
        },
        "root": {
            "level": _level_name_to_int(log_level),
            "handlers": ["console"],
        },
        "loggers": {
            # Quiet noisy libs, but keep errors
            "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": "WARNING", "handlers": ["console"], "propagate": False},
            "sqlalchemy.engine": {"level": "WARNING", "handlers": ["console"], "propagate": False},
            "aiosqlite": {"level": "WARNING", "handlers": ["console"], "propagate": False},
        },
    }
    logging.config.dictConfig(logging_config)

    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        add_request_context,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if redact:
        processors.append(SecretRedactionProcessor())
    processors.extend(
        [
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if log_format == "json" else structlog.dev.ConsoleRenderer(colors=False),
        ]
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    # Clear any inherited context
    structlog.contextvars.clear_contextvars()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("Turno confirmado", turno_id=turno.id)
    """
    return structlog.get_logger(name)


security_logger = structlog.get_logger("security")


def log_security_event(event_type: str, *, user_id: Optional[str] = None, **kwargs: Any) -> None:
    """Log security-relevant events (logins, refused access, account changes)."""
    security_logger.info("Security event", event_type=event_type, user_id=user_id, **kwargs)
