"""
Logging configuration for Sessiongate.

Probe traffic is dropped from the access log, and QR data URLs are shortened
so a single start request does not flood the log with base64.
"""

import logging
import re
from typing import Any, Dict, List

PROBE_PATHS = ("/healthz",)

_DATA_URL = re.compile(r"data:image/png;base64,[A-Za-z0-9+/=]{16,}")


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access lines for liveness probes."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True
        message = record.getMessage()
        return not ("GET" in message and any(path in message for path in PROBE_PATHS))


class QRDataURLFilter(logging.Filter):
    """Replace inline QR images with a short placeholder."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if "data:image/png;base64," in message:
            record.msg = _DATA_URL.sub("data:image/png;base64,<qr>", message)
            record.args = None
        return True


def _logger(handlers: List[str], level: str) -> Dict[str, Any]:
    return {"handlers": handlers, "level": level, "propagate": False}


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """
    Build the dictConfig used by the app and by uvicorn.

    Args:
        level: Level for Sessiongate's own loggers and the root logger
    """
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "health_check": {"()": HealthCheckFilter},
            "qr_data_url": {"()": QRDataURLFilter},
        },
        "formatters": {
            "default": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
            "access": {"format": "%(message)s"},
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
                "filters": ["qr_data_url"],
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
                "filters": ["health_check"],
            },
        },
        "loggers": {
            "uvicorn": _logger(["default"], "INFO"),
            "uvicorn.error": _logger(["default"], "INFO"),
            "uvicorn.access": _logger(["access"], "INFO"),
            # Request lines for every engine call are too chatty at INFO
            "httpx": _logger(["default"], "WARNING"),
            "sessiongate": _logger(["default"], level),
        },
        "root": {"level": level, "handlers": ["default"]},
    }
