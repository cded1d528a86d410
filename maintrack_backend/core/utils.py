"""Common utilities for Maintrack backend."""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def sanitize_string(value: str | None, max_length: int = 255) -> str | None:
    """Sanitize a string value by stripping whitespace and truncating."""
    if value is None:
        return None
    value = value.strip()
    if len(value) > max_length:
        return value[:max_length]
    return value


def reference_prefix(prefix: str, on_date: date) -> str:
    """Daily reference prefix like MR-20240115."""
    return f"{prefix}-{on_date.strftime('%Y%m%d')}"


def generate_reference_number(
    prefix: str, on_date: date, sequence: int, padding: int = 4
) -> str:
    """Generate a reference number like MR-20240115-0007."""
    return f"{reference_prefix(prefix, on_date)}-{str(sequence).zfill(padding)}"
