"""
Logging setup shared by the Streamlit app and the API.

Standard library logging with a concise console formatter by default and an
optional JSON formatter for log shipping.

Usage:
    from homicide.logs import configure_logging

    configure_logging(level="INFO")
    logger = logging.getLogger(__name__)
"""

from __future__ import annotations

import json
import logging
import logging.config
from typing import Any, Dict

_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def _json_formatter(record: logging.LogRecord) -> str:
    payload: Dict[str, Any] = {
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    for key, value in vars(record).items():
        if key not in _RESERVED and not key.startswith("_"):
            payload[key] = value
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    return json.dumps(payload, default=str)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return _json_formatter(record)


def configure_logging(level: str = "INFO", json_logs: bool = False, force: bool = True) -> None:
    """
    Configure root logging.

    Parameters
    ----------
    level : str
        Logging level name (e.g., "DEBUG", "INFO").
    json_logs : bool
        Emit one JSON object per line instead of the console format.
    force : bool
        Replace handlers installed earlier (Streamlit reruns call this repeatedly).
    """
    root = logging.getLogger()
    if not force and root.handlers:
        return

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
                    "level": level,
                }
            },
            "root": {"handlers": ["default"], "level": level},
        }
    )


__all__ = ["configure_logging", "JsonFormatter"]
