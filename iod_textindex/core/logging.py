"""Logging setup for applications embedding the text index clients.

The clients only ever log through ``logging.getLogger(__name__)``; this module
offers an opt-in root configuration with either a plain text or a JSON format.
JSON output carries the context fields the clients attach via ``extra={...}``.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from iod_textindex.core.config import Settings, get_settings

CONTEXT_FIELDS = (
    "operation",
    "job_id",
    "index",
    "error_code",
    "http_status",
)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Example:
        >>> logger.info("Job submitted", extra={"job_id": "abc", "index": "mydocs"})
        # Output: {"timestamp": "2026-10-18T09:12:00Z", "level": "INFO",
        #          "message": "Job submitted", "job_id": "abc", "index": "mydocs"}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in CONTEXT_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_data, ensure_ascii=False, default=str)


def configure_logging(
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
    settings: Optional[Settings] = None,
) -> None:
    """Configure root logging with a single stdout handler.

    Safe to call repeatedly; previously installed root handlers are replaced.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL),
            ``IOD_LOG_LEVEL`` when omitted
        json_format: Use the JSON formatter instead of plain text,
            ``IOD_LOG_JSON`` when omitted
        settings: Settings to read the defaults from
    """
    settings = settings or get_settings()
    level = level or settings.LOG_LEVEL
    if json_format is None:
        json_format = settings.LOG_JSON

    root = logging.getLogger()
    root.setLevel(level.upper())

    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level.upper())
    if json_format:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S%z",
            )
        )
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
