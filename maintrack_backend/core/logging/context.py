"""
Transaction tracking for logging correlation.
One transaction ID ties together the log lines of one unit of work.
"""

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

# Context variable for transaction ID
_transaction_id: ContextVar[str | None] = ContextVar("transaction_id", default=None)


def generate_transaction_id() -> str:
    """Generate a unique transaction ID for request tracking."""
    return str(uuid.uuid4())[:8]


def get_transaction_id() -> str:
    """Get the current transaction ID or generate a new one."""
    txn_id = _transaction_id.get()
    if txn_id is None:
        txn_id = generate_transaction_id()
        _transaction_id.set(txn_id)
    return txn_id


def set_transaction_id(txn_id: str) -> None:
    """Set the transaction ID for the current context."""
    _transaction_id.set(txn_id)


@contextmanager
def transaction_scope(txn_id: str | None = None) -> Iterator[str]:
    """Run a block under its own transaction ID, restoring the previous one."""
    token = _transaction_id.set(txn_id or generate_transaction_id())
    try:
        yield _transaction_id.get()
    finally:
        _transaction_id.reset(token)


class TransactionIdFilter(logging.Filter):
    """Logging filter that adds transaction ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add transaction ID to the log record."""
        record.transaction_id = get_transaction_id()
        return True
