"""Structured Logging — one JSON line per event for the hosting log drain.

Invariants:
    - Every line carries timestamp (event time, UTC), level, logger, service
      and message
    - Only whitelisted request/order extras are copied into the line
    - setup_logging is idempotent: re-running it replaces, never stacks, its handler
    - uvicorn's own loggers go through the same root handler

Design Decisions:
    - JSONFormatter on stdlib logging: the log drain parses JSON lines and
      nothing else needs a logging dependency
    - Text format kept for local runs (LOG_FORMAT=text)
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_FIELDS = (
    "path", "method", "client", "status_code", "error_code",
    "order_id", "order_number", "preorder_id", "item_count",
)

_HANDLER_NAME = "caramel"
_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


class JSONFormatter(logging.Formatter):
    def __init__(self, service: str = "caramel-api"):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "service": self.service,
            "message": record.getMessage(),
        }
        entry.update(
            (key, record.__dict__[key]) for key in EXTRA_FIELDS
            if record.__dict__.get(key) is not None
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(
    level: str = "INFO", fmt: str = "json", service: str = "caramel-api",
) -> logging.Handler:
    """Install the process log handler on the root logger."""
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter(service))
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        ))

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in _UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True
    return handler
