"""Structured Logging — JSON formatter and setup for production observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (shortcode, operation, error_code, attempt, identifier, path)
      surfaced when present
    - A record carrying a shortcode but no identifier gets the identifier
      decoded from the shortcode, so log lines join on either key
    - setup_logging() replaces its own handler; repeated lifespans never
      duplicate output
    - JSON format in production, human-readable in development
"""

import logging
import json
from datetime import datetime, timezone

from buildshare.core.shortcode import identifier_for_shortcode

EXTRA_FIELDS = (
    "shortcode", "operation", "error_code", "attempt", "identifier", "path",
)

_HANDLER_NAME = "buildshare"


def _identifier_from(shortcode: object) -> int | None:
    if not isinstance(shortcode, str):
        return None
    try:
        return identifier_for_shortcode(shortcode)
    except ValueError:
        return None


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if "shortcode" in log and "identifier" not in log:
            identifier = _identifier_from(log["shortcode"])
            if identifier is not None:
                log["identifier"] = identifier
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Configure logging for the application."""
    for existing in list(logging.root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logging.root.removeHandler(existing)
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
