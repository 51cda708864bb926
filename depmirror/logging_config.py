"""
Logging Configuration — One stderr handler, text or JSON lines.

Every line goes through mask_credentials(), so a clone URL of the form
https://oauth2:<token>@host/... never reaches the terminal or a CI log.

    LOG_LEVEL   DEBUG, INFO, WARNING, ERROR (default: INFO)
    LOG_FORMAT  text, json (default: text)

The CLI passes --log-level/--log-format; both fall back to the env vars.
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
from datetime import datetime, timezone
from typing import Any, Dict

# user:password@ or oauth2:token@ in https remote URLs
_CREDENTIALS_RE = re.compile(r"(https?://)[^/@\s]+@")

# LogRecord attributes set through logger.info(..., extra={...})
EXTRA_FIELDS = ("dependency", "mirror_name")

# Chatty per-request loggers of the HTTP stack
QUIET_LOGGERS = ("httpx", "httpcore")


def mask_credentials(text: str) -> str:
    """Hide credentials embedded in URLs before they reach a log line."""
    return _CREDENTIALS_RE.sub(r"\1***@", text)


class JSONFormatter(logging.Formatter):
    """One JSON object per line: ts, level, logger, message and any extras."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": mask_credentials(record.getMessage()),
        }
        entry.update(
            (name, getattr(record, name)) for name in EXTRA_FIELDS if hasattr(record, name)
        )
        if record.exc_info:
            entry["exception"] = mask_credentials(self.formatException(record.exc_info))
        return json.dumps(entry)


class HumanFormatter(logging.Formatter):
    """
    Terminal output, e.g.

        09:15:02 INFO    [syncer      ] Remote repo '...' created

    The level is colored only when stderr is a tty.
    """

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    MODULE_WIDTH = 12

    def _level(self, levelname: str) -> str:
        padded = f"{levelname:7}"
        if not sys.stderr.isatty():
            return padded
        return f"{self.LEVEL_COLORS.get(levelname, '')}{padded}{self.RESET}"

    def format(self, record: logging.LogRecord) -> str:
        module = record.name.rpartition(".")[2][: self.MODULE_WIDTH]
        line = (
            f"{datetime.now():%H:%M:%S} {self._level(record.levelname)} "
            f"[{module:{self.MODULE_WIDTH}}] {record.getMessage()}"
        )
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return mask_credentials(line)


def setup_logging(level: str | None = None, format_type: str | None = None) -> None:
    """Install the stderr handler on the root logger, replacing any others."""
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    format_name = (format_type or os.environ.get("LOG_FORMAT", "text")).lower()
    numeric_level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(JSONFormatter() if format_name == "json" else HumanFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"Logging configured: level={level_name}, format={format_name}")
