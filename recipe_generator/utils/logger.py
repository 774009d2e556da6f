"""Logging for the recipe generator.

Every pipeline log line for a request carries `request_id` and `client_key`
(passed with `extra=`), so one request can be followed across stages.

Environment:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_TYPE: text, json (default: text)
"""

import json
import logging
import os
import sys
from typing import Any, Optional

# Attributes copied from `extra=` into the output when present
REQUEST_CONTEXT_FIELDS = ("request_id", "client_key")


def _request_context(record: logging.LogRecord) -> dict[str, Any]:
    return {
        field: getattr(record, field)
        for field in REQUEST_CONTEXT_FIELDS
        if getattr(record, field, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_request_context(record),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


class RichTextFormatter(logging.Formatter):
    """Colored single-line output for a terminal.

    Lines inside a request are prefixed with `[request_id client_key]`.
    """

    RESET = "\033[0m"
    # level -> (ANSI color, icon)
    LEVEL_STYLES = {
        "DEBUG": ("\033[36m", "🔍"),
        "INFO": ("\033[32m", "ℹ️"),
        "WARNING": ("\033[33m", "⚠️"),
        "ERROR": ("\033[31m", "❌"),
        "CRITICAL": ("\033[1;31m", "❌"),
    }

    def format(self, record: logging.LogRecord) -> str:
        color, icon = self.LEVEL_STYLES.get(record.levelname, (self.RESET, ""))
        context = _request_context(record)
        prefix = f"[{' '.join(str(v) for v in context.values())}] " if context else ""

        line = (
            f"{color}{icon} {self.formatTime(record, '%Y-%m-%d %H:%M:%S')} "
            f"{record.levelname:<8} {record.name:<20} {prefix}{record.getMessage()}{self.RESET}"
        )
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def get_logger(name: str, log_type: Optional[str] = None) -> logging.Logger:
    """Return the named logger, attaching a stdout handler on first use.

    Args:
        name: Logger name.
        log_type: "text" or "json"; defaults to LOG_TYPE.
    """
    instance = logging.getLogger(name)
    if instance.handlers:
        return instance

    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    log_type = (log_type or os.getenv("LOG_TYPE", "text")).lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if log_type == "json" else RichTextFormatter())

    instance.setLevel(level)
    instance.addHandler(handler)
    return instance


logger = get_logger("recipe_generator")

logging.getLogger("google.genai").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
