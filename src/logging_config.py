"""
Logging for the ProjectHub API.

One stderr handler on the root logger. Production writes one JSON object per
line; everything else gets a short human-readable line. Both carry the
request id set by RequestIdMiddleware, and any extra= fields the call passed:

    logger.warning("Rolling back project creation", extra={"project_id": pid})
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# LogRecord attributes that are not extra= fields
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "request_id"}

_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite")


class RequestIdFilter(logging.Filter):
    """Stamp every record with the current request id, or "-" outside a request."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True


class JsonFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", "-")
        if request_id != "-":
            entry["request_id"] = request_id
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and value is not None:
                entry[key] = value

        return json.dumps(entry, default=str)


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Install the root handler. Safe to call again; old handlers are replaced.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
        environment: "production" switches to JSON lines
        debug: Force DEBUG regardless of log_level
    """
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(RequestIdFilter())
    if environment == "production":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)-5s [%(name)s] req=%(request_id)s %(message)s",
            datefmt="%H:%M:%S",
        ))

    root = logging.getLogger()
    for old in root.handlers[:]:
        root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
