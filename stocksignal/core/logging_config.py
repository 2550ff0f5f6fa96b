"""Logging setup for the CLI and library callers.

Records may carry `symbol` and `strategy` through `extra=`; both the plain
and the JSON format render them.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional, TextIO

CONTEXT_FIELDS = ("strategy", "symbol")

PLAIN_FORMAT = "%(asctime)s [%(levelname)-5s] %(name)s: %(message)s"


def _context(record: logging.LogRecord) -> dict:
    return {
        field: getattr(record, field)
        for field in CONTEXT_FIELDS
        if getattr(record, field, None)
    }


class ContextFormatter(logging.Formatter):
    """Plain text lines with a trailing `[strategy=... symbol=...]` tag."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        if not context:
            return line
        tag = " ".join(f"{k}={v}" for k, v in context.items())
        return f"{line} [{tag}]"


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_entry.update(_context(record))
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        if hasattr(record, "extra_data"):
            log_entry["data"] = record.extra_data
        return json.dumps(log_entry, ensure_ascii=False, default=str)


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
    stream: Optional[TextIO] = None,
) -> None:
    """Install a single root handler.

    Args:
        json_output: Emit JSON lines instead of plain text.
        level: Root log level name, case-insensitive.
        stream: Handler stream, stdout by default.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(ContextFormatter(PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)

    # request lines from the Alpha Vantage client are noise at INFO
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)
