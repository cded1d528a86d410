"""
Queue-backed log sinks. Callers only ever touch a QueueHandler; a
background QueueListener does the console and rotating-file I/O.
"""

import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path

from .context import TransactionIdFilter
from .formatting import json_formatter, text_formatter


class QueuedLogSink:
    """
    Console output plus an optional rotating log file behind one queue.

    Attributes:
        level: Minimum level passed on by the queue handler
        handler: QueueHandler to attach to loggers
    """

    def __init__(
        self,
        level: int = logging.INFO,
        json_lines: bool = True,
        log_file: str | None = None,
        max_bytes: int = 50 * 1024 * 1024,
        backup_count: int = 5,
        console: bool = True,
    ):
        self.level = level
        self._queue: queue.Queue = queue.Queue(-1)
        self._listener: QueueListener | None = None

        targets: list[logging.Handler] = []
        if console:
            stream = logging.StreamHandler(sys.stdout)
            stream.setFormatter(
                json_formatter() if json_lines else text_formatter(colored=True)
            )
            targets.append(stream)
        if log_file:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            rotating = RotatingFileHandler(
                path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            )
            rotating.setFormatter(json_formatter() if json_lines else text_formatter())
            targets.append(rotating)
        for target in targets:
            target.setLevel(level)
        self._targets = targets

        self.handler = QueueHandler(self._queue)
        self.handler.setLevel(level)
        # Stamp the id on the caller's thread; the listener runs elsewhere
        self.handler.addFilter(TransactionIdFilter())

    @property
    def running(self) -> bool:
        return self._listener is not None

    def start(self) -> "QueuedLogSink":
        if self._listener is None:
            self._listener = QueueListener(
                self._queue, *self._targets, respect_handler_level=True
            )
            self._listener.start()
        return self

    def stop(self) -> None:
        """Flush queued records and close the targets."""
        if self._listener is not None:
            self._listener.stop()
            self._listener = None
        for target in self._targets:
            target.close()


def route_logger(name: str, handler: logging.Handler, level: int | None = None) -> None:
    """Send one named logger exclusively to `handler`."""
    target = logging.getLogger(name)
    target.handlers.clear()
    target.addHandler(handler)
    target.propagate = False
    if level is not None:
        target.setLevel(level)
