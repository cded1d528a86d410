"""
Log line formatting. JSON lines carry the service name and the
transaction id so one unit of work can be followed across modules.
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Any

from pythonjsonlogger.json import JsonFormatter

from .context import get_transaction_id

SERVICE_NAME = "maintrack-backend"
SERVICE_VERSION = "0.1.0"

# LogRecord attributes that add noise to a JSON line
_DROPPED_KEYS = ("msg", "args", "created", "msecs", "relativeCreated", "pathname")


class MaintrackJsonFormatter(JsonFormatter):
    """JSON formatter that stamps every line with service and correlation data."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(
            record.created, tz=timezone.utc
        ).isoformat()
        log_record["level"] = record.levelname
        log_record["logger_name"] = record.name
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno
        log_record["transaction_id"] = getattr(
            record, "transaction_id", None
        ) or get_transaction_id()
        log_record["service"] = {"name": SERVICE_NAME, "version": SERVICE_VERSION}

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            log_record["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "stacktrace": traceback.format_exception(exc_type, exc_value, exc_tb),
            }
            log_record.pop("exc_info", None)

        for key in _DROPPED_KEYS:
            log_record.pop(key, None)


def json_formatter() -> MaintrackJsonFormatter:
    return MaintrackJsonFormatter(
        fmt="%(timestamp)s %(level)s %(transaction_id)s %(message)s"
    )


def text_formatter(colored: bool = False) -> logging.Formatter:
    """Plain one-line formatter, optionally with ANSI colors for terminals."""
    if colored:
        return logging.Formatter(
            "\033[1;32m%(asctime)s\033[0m | \033[1;34m%(levelname)s\033[0m | "
            "%(transaction_id)s | \033[1;33m%(name)s:%(lineno)d\033[0m | %(message)s"
        )
    return logging.Formatter(
        "%(asctime)s | %(levelname)s | %(transaction_id)s | "
        "%(name)s:%(lineno)d | %(message)s"
    )
