"""
Logging setup for the API process.

One stdout handler on the root logger. JSON lines by default (and always in
production) so request, model-call and usage events can be filtered by
their ``extra_fields``; plain text when LOG_FORMAT=text for local runs.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from core.config import settings

# SQL echo, HTTP client chatter and SDK retries drown out request logs
QUIET_LOGGERS = ("sqlalchemy.engine", "httpx", "urllib3", "anthropic")

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per record; ``extra={"extra_fields": {...}}`` is merged in."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            entry.update(extra_fields)

        # UUIDs, dates and pydantic error contexts are not JSON-native
        return json.dumps(entry, default=str)


def use_json_format() -> bool:
    return settings.LOG_FORMAT.lower() == "json" or settings.ENVIRONMENT == "production"


def setup_logging() -> logging.Logger:
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if use_json_format() else logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root
