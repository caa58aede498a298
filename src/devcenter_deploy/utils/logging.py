"""Logging configuration utilities."""

import logging
import re
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog
from structlog.contextvars import bound_contextvars


SENSITIVE_KEYS = {
    "secret",
    "client_secret",
    "clientsecret",
    "token",
    "access_token",
    "authorization",
}

# Credentials that can show up inside free-text values: bearer tokens in
# header dumps, client secrets in form bodies, and the SAS signature of the
# pre-signed upload URL.
_SECRET_PATTERNS = (
    (re.compile(r"(Bearer\s+)[^\s\"',]+", re.IGNORECASE), r"\1[REDACTED]"),
    (re.compile(r"(client_secret=)[^&\s]+", re.IGNORECASE), r"\1[REDACTED]"),
    (re.compile(r"([?&]sig=)[^&\s]+", re.IGNORECASE), r"\1[REDACTED]"),
)


def redact_text(value: str) -> str:
    for pattern, replacement in _SECRET_PATTERNS:
        value = pattern.sub(replacement, value)
    return value


def _redact_sensitive(_, __, event_dict: dict) -> dict:
    """Redact sensitive fields and embedded credentials in the structured log."""
    for key, value in list(event_dict.items()):
        if key.lower() in SENSITIVE_KEYS:
            event_dict[key] = "[REDACTED]"
        elif isinstance(value, str):
            event_dict[key] = redact_text(value)
    return event_dict


def setup_logging(log_level: str = "INFO", log_format: str = "console") -> None:
    """Configure structured logging."""
    level = getattr(logging, log_level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _redact_sensitive,
    ]
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


@contextmanager
def deploy_log_context(app_id: Optional[str], flight_id: Optional[str] = None) -> Iterator[None]:
    """Bind correlation fields for the duration of one deployment run.

    Previous values are restored on exit so consecutive runs in the same
    task never share an appId or flightId.
    """
    fields = {"appId": app_id}
    if flight_id:
        fields["flightId"] = flight_id
    with bound_contextvars(**fields):
        yield
