"""Logging infrastructure for Maintrack backend."""

from .context import (
    TransactionIdFilter,
    get_transaction_id,
    set_transaction_id,
    transaction_scope,
)
from .formatting import MaintrackJsonFormatter, json_formatter, text_formatter
from .handlers import QueuedLogSink, route_logger
from .setup import get_logger, setup_logging, shutdown_logging

__all__ = [
    "MaintrackJsonFormatter",
    "QueuedLogSink",
    "TransactionIdFilter",
    "get_logger",
    "get_transaction_id",
    "json_formatter",
    "route_logger",
    "set_transaction_id",
    "setup_logging",
    "shutdown_logging",
    "text_formatter",
    "transaction_scope",
]
