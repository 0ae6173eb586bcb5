"""Structured logging configuration using structlog."""

import logging
import re
import sys
from typing import Optional

import structlog

from rentalcore.config.settings import get_settings

# Stripe-style secrets that can leak through integration errors
# e.g. sk_live_51H..., rk_test_..., whsec_...
_SECRET_PATTERN = re.compile(r"\b((?:sk|rk)_(?:live|test)_[A-Za-z0-9]{8,}|whsec_[A-Za-z0-9]{8,})")
_REDACTED = "<SECRET_REDACTED>"


def redact_secrets(value: str) -> str:
    """Replace API secrets in a string."""
    return _SECRET_PATTERN.sub(_REDACTED, value)


class SecretRedactingFilter(logging.Filter):
    """Filter that redacts API secrets from log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg and isinstance(record.msg, str):
            record.msg = redact_secrets(record.msg)
        if record.args:
            record.args = tuple(
                redact_secrets(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
        return True


def _redact_secrets(
    logger: logging.Logger, method_name: str, event_dict: dict
) -> dict:
    """Structlog processor to redact secrets from event dictionaries."""
    for key, value in list(event_dict.items()):
        if isinstance(value, str):
            event_dict[key] = redact_secrets(value)
    return event_dict


def setup_logging(log_level: Optional[str] = None) -> None:
    """Configure structured logging for the application.

    The level defaults to ``LOG_LEVEL``; every event carries the app name and
    environment.
    """
    settings = get_settings()
    level = getattr(logging, (log_level or settings.log_level).upper())
    secret_filter = SecretRedactingFilter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    root_logger.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.addFilter(secret_filter)
    root_logger.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _redact_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(app=settings.app_name, environment=settings.environment)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
