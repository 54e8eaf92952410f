"""Structured Logging — JSON or text output for the Packstation service.

Invariants:
    - Every JSON record has timestamp, level, logger and message
    - Request and aggregate fields (see _EXTRA_FIELDS) appear only when set via `extra=`
    - setup_logging replaces its own handler on repeated calls (no duplicate lines)
"""

import json
import logging
from datetime import datetime, timezone

_EXTRA_FIELDS = (
    "packstation_id", "version", "error_code", "username",
    "path", "method", "status_code", "duration_ms",
)

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Loggers that repeat what ResponseTimeMiddleware already logs per request
_QUIET_LOGGERS = ("uvicorn.access", "httpx")

_handler: logging.Handler | None = None


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({
            key: getattr(record, key)
            for key in _EXTRA_FIELDS
            if getattr(record, key, None) is not None
        })
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install the root handler; `fmt` is "json" or "text"."""
    global _handler
    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)

    _handler = logging.StreamHandler()
    _handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT),
    )
    root.addHandler(_handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
