"""
Logging configuration for the permission guard service.
Colour-coded console output for humans, JSON records for log aggregation.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

DEFAULT_CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Extra attributes copied into structured records when a log call supplies them
STRUCTURED_EXTRAS = ("request_id", "uri", "rule", "validator_id", "parse_method")


class ColoredFormatter(logging.Formatter):
    """Formatter with color coding for different log levels."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        # Colour a copy so other handlers sharing the record see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, '')
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record):
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        for key in STRUCTURED_EXTRAS:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(
    level: str = "INFO",
    fmt: Optional[str] = None,
    structured: bool = False,
) -> logging.Logger:
    """
    Configure the root logger once for the process.

    Args:
        level: level name, unknown names fall back to INFO
        fmt: console format string, ignored when structured is set
        structured: emit JSON lines instead of coloured text
    """
    root = logging.getLogger()
    root.handlers.clear()

    log_level = getattr(logging, (level or "INFO").upper(), logging.INFO)
    root.setLevel(log_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(ColoredFormatter(fmt or DEFAULT_CONSOLE_FORMAT, datefmt='%H:%M:%S'))
    root.addHandler(handler)

    # Keep uvicorn's access log from drowning out permission decisions
    logging.getLogger("uvicorn.access").setLevel(max(log_level, logging.WARNING))
    return root
