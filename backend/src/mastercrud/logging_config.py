"""Logging configuration shared by the CLI and the API server.

Usage:
    from mastercrud.logging_config import configure_logging

    configure_logging(level="INFO", json_logs=False)
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
from typing import Any


class JsonFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Configure root logging.

    Args:
        level: Level name; defaults to MASTERCRUD_LOG_LEVEL or INFO
        json_logs: Emit JSON lines; defaults to MASTERCRUD_LOG_JSON
    """
    if level is None:
        level = os.environ.get("MASTERCRUD_LOG_LEVEL", "INFO")
    if json_logs is None:
        json_logs = os.environ.get("MASTERCRUD_LOG_JSON", "").lower() in ("1", "true", "yes")

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "json": {"()": JsonFormatter},
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "json" if json_logs else "console",
                }
            },
            "root": {"handlers": ["default"], "level": level.upper()},
        }
    )
