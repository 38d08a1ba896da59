"""JSON logging configuration for the Gold Pass service."""

import json
import logging
import sys
from datetime import datetime, timezone

from goldpass.config import LOG_FILE, LOG_LEVEL

EXTRA_FIELDS = ("request_id", "route", "method", "status", "remote_addr", "uid", "event_type")


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record):
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for k in EXTRA_FIELDS:
            if hasattr(record, k):
                payload[k] = getattr(record, k)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(
    log_file: str | None = None,
    log_level: str | None = None,
):
    """Configure logging with JSON formatter.

    Args:
        log_file: Path to log file. Defaults to GOLDPASS_LOG_FILE. An empty
            value disables the file handler.
        log_level: Log level. Defaults to GOLDPASS_LOG_LEVEL or 'INFO'.
    """
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(JsonFormatter())
    handlers: list[logging.Handler] = [console_handler]

    log_file = LOG_FILE if log_file is None else log_file
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(JsonFormatter())
        handlers.append(file_handler)

    root = logging.getLogger()
    log_level = (log_level or LOG_LEVEL).upper()
    root.setLevel(getattr(logging, log_level, logging.INFO))
    root.handlers = handlers
