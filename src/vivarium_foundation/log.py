"""Structured logging setup for applications embedding the foundation."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .settings import Settings

_EXTRA_FIELDS = ("entity_id", "facility_id", "component")


class JsonLogFormatter(logging.Formatter):
    """Format log records as single-line JSON payloads."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        for attr in _EXTRA_FIELDS:
            if hasattr(record, attr):
                payload[attr] = getattr(record, attr)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(settings: Settings, log_level: Optional[str] = None) -> None:
    """
    Install one stdout handler on the root logger.

    Does nothing when the root logger already has handlers, so repeated
    calls (or a host application's own setup) win.

    Args:
        settings: Supplies the level and the output format
        log_level: Overrides ``settings.log_level``
    """
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    level_name = log_level or settings.log_level
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if settings.json_logs:
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
