"""
Process-wide logging setup driven by the loaded settings.
"""

import logging

from .handlers import QueuedLogSink, route_logger

APP_LOGGER_NAME = "maintrack_backend"

# Third-party loggers that are kept at WARNING and routed with the app
LIBRARY_LOGGERS = ("sqlalchemy", "alembic", "aiosqlite", "asyncmy", "py.warnings")

_sink: QueuedLogSink | None = None


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger under the application namespace.

    Args:
        name: Module name; names outside the package are nested under it

    Returns:
        Logger instance
    """
    if not name:
        return logging.getLogger(APP_LOGGER_NAME)
    if name == APP_LOGGER_NAME or name.startswith(f"{APP_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{APP_LOGGER_NAME}.{name}")


def setup_logging(
    log_level: str | None = None,
    log_format: str | None = None,
    log_to_file: bool | None = None,
    log_file_path: str | None = None,
) -> logging.Logger:
    """
    Configure the app logger once per process.

    Unset arguments come from settings. Calling again while a sink is
    running returns the app logger unchanged; call shutdown_logging first
    to reconfigure.
    """
    global _sink

    app_logger = get_logger()
    if _sink is not None and _sink.running:
        return app_logger

    from ...config import settings

    level = logging.getLevelName((log_level or settings.log_level).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level or settings.log_level}")
    json_lines = (log_format or settings.log_format).lower() == "json"
    to_file = settings.log_to_file if log_to_file is None else log_to_file

    _sink = QueuedLogSink(
        level=level,
        json_lines=json_lines,
        log_file=(log_file_path or settings.log_file_path) if to_file else None,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    ).start()

    route_logger(APP_LOGGER_NAME, _sink.handler, level)
    logging.captureWarnings(True)
    for name in LIBRARY_LOGGERS:
        route_logger(name, _sink.handler, logging.WARNING)

    return app_logger


def shutdown_logging() -> None:
    """Stop the background listener, flushing anything still queued."""
    global _sink
    if _sink is not None:
        _sink.stop()
        _sink = None
