"""
Logging Configuration — One root handler for the CLI and the server.

Two output styles:
- ``text``: short colored lines for a terminal, with portal context
  (sync status, collection, record id) appended when present
- ``json``: one object per line for log collectors

## Environment Variables

- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_FORMAT: json, text (default: text)

Explicit arguments (from ``PortalConfig.log_level`` / ``log_format``)
take precedence over the environment.

## Usage

    from schoolportal.logging_config import setup_logging

    setup_logging()                    # env / defaults
    setup_logging("DEBUG", "json")     # explicit
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import IO, Any, Dict, Optional

from flask import has_request_context, request

# Attributes callers attach through `extra=`; both formatters print them.
EXTRA_FIELDS = ("collection", "record_id", "sync_status", "source", "payload_chars", "path")

# Third-party loggers held at WARNING regardless of the chosen level.
# werkzeug is included because the app logs its own /api/ request lines.
NOISY_LOGGERS = ("urllib3", "httpx", "httpcore", "werkzeug")


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {name: getattr(record, name) for name in EXTRA_FIELDS if hasattr(record, name)}


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

        {"ts": "...", "level": "WARNING", "logger": "schoolportal.persistence.coordinator",
         "message": "...", "sync_status": "failed"}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_extras(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        # Notice titles are often Bangla; keep them readable
        return json.dumps(entry, ensure_ascii=False, default=str)


class HumanFormatter(logging.Formatter):
    """
    Terminal formatter.

        12:34:56 WARNING [coordinator    ] Remote sync failed: timeout (sync_status=failed)
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, color: Optional[bool] = None):
        super().__init__()
        self.color = sys.stderr.isatty() if color is None else color

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:7}"
        if self.color:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"

        module = record.name.rsplit(".", 1)[-1][:15]
        line = f"{datetime.now():%H:%M:%S} {level} [{module:15}] {record.getMessage()}"

        extras = _extras(record)
        if extras:
            line += " (" + ", ".join(f"{k}={v}" for k, v in extras.items()) + ")"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class RequestPathFilter(logging.Filter):
    """Tag records emitted while serving a Flask request with its path."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "path") and has_request_context():
            record.path = request.path
        return True


def setup_logging(
    level: Optional[str] = None,
    format_type: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> logging.Handler:
    """
    Replace the root handlers with a single configured handler.

    Args:
        level: Log level name; falls back to LOG_LEVEL, then INFO
        format_type: ``json`` or ``text``; falls back to LOG_FORMAT, then text
        stream: Output stream (default: stderr)

    Returns:
        The installed handler
    """
    log_level = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    log_format = (format_type or os.environ.get("LOG_FORMAT") or "text").lower()
    numeric_level = getattr(logging, log_level, logging.INFO)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(JSONFormatter() if log_format == "json" else HumanFormatter())
    handler.addFilter(RequestPathFilter())

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"Logging configured: level={log_level}, format={log_format}")
    return handler
