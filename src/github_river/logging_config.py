"""Structured logging configuration for github-river.

- JSON structured logging with StructuredFormatter
- Logger hierarchy under the github_river namespace
- Level and format taken from RiverConfig (LOG_LEVEL, LOG_FORMAT)
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

__all__ = ["LOGGER_NAME", "StructuredFormatter", "TextFormatter", "configure_logging"]

LOGGER_NAME = "github_river"

# Keys redacted from the structured context
SENSITIVE_KEYS = {
    "password", "token", "secret", "apikey", "api_key",
    "authorization", "credential", "credentials", "auth",
}

_STANDARD_FIELDS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "exc_info",
    "exc_text",
    "stack_info",
    "taskName",
}


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter.

    Outputs logs in JSON format with:
    - timestamp: UTC ISO 8601 format with 'Z' suffix
    - level: Log level name (INFO, ERROR, etc.)
    - logger: Logger name (github_river hierarchy)
    - message: Log message
    - context: Extras dict merged from LogRecord attributes
    - exception: Formatted traceback when exc_info is set

    Sensitive keys (password, token, authorization, ...) are redacted.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            k: ("[REDACTED]" if k.lower() in SENSITIVE_KEYS else v)
            for k, v in record.__dict__.items()
            if k not in _STANDARD_FIELDS and not k.startswith("_")
        }
        if extras:
            log_data["context"] = extras

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter for local runs (LOG_FORMAT=text)."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Configure the github_river logger hierarchy.

    Args:
        level: Log level name. Defaults to INFO.
        fmt: "json" or "text". Defaults to json.
    """
    log_level = getattr(logging, (level or "INFO").upper(), logging.INFO)
    formatter = TextFormatter() if (fmt or "json").lower() == "text" else StructuredFormatter()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    # Only one handler, even when called repeatedly
    if not logger.handlers:
        handler = logging.StreamHandler()
        logger.addHandler(handler)
    for handler in logger.handlers:
        handler.setFormatter(formatter)

    logger.propagate = False
