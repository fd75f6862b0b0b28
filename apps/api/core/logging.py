"""
Logging setup for the plan engine API.

Production emits one JSON object per line; anything passed as
``extra={"extra_fields": {...}}`` is merged into that object, so request
paths, athlete ids and engine names become searchable keys. Local runs get
a plain text format.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.config import settings

SERVICE_NAME = "plan-engine"

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# Per-request chatter from the server and the test client
QUIET_LOGGERS = ("uvicorn.access", "httpx")


class JSONFormatter(logging.Formatter):
    """Render a record as a single JSON line."""

    def __init__(self, service: str = SERVICE_NAME):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service,
            "logger": record.name,
            "message": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            payload.update(extra_fields)

        # dates and enums in extra_fields fall back to str()
        return json.dumps(payload, ensure_ascii=False, default=str)


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> logging.Logger:
    """
    Install a single stdout handler on the root logger.

    ``level`` and ``log_format`` default to LOG_LEVEL / LOG_FORMAT.
    Production always logs JSON.
    """
    log_level = _resolve_level(level or settings.LOG_LEVEL)
    use_json = (log_format or settings.LOG_FORMAT) == "json" or settings.is_production

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if use_json else logging.Formatter(TEXT_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger
