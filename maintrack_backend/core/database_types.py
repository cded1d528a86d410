"""Custom database types shared by MySQL and SQLite."""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, String, TypeDecorator


class UUID(TypeDecorator):
    """UUID type stored as CHAR(36) strings.

    Automatically converts between Python uuid.UUID objects and strings.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        """Convert UUID to string when saving to database."""
        if value is None:
            return value
        if isinstance(value, uuid.UUID):
            return str(value)
        return str(uuid.UUID(str(value)))

    def process_result_value(self, value, dialect):
        """Convert string to UUID when reading from database."""
        if value is None:
            return value
        if isinstance(value, str):
            return uuid.UUID(value)
        return value


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime persisted as naive UTC.

    Neither MySQL DATETIME nor SQLite keep the offset, so values are
    normalised to UTC on the way in and tagged as UTC on the way out.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect):
        if value is None:
            return value
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def enum_column_type(enum_cls: type[enum.Enum]) -> Enum:
    """Enum column type that stores member values ("in_progress"), not names."""
    return Enum(
        enum_cls,
        values_callable=lambda members: [member.value for member in members],
        name=enum_cls.__name__.lower(),
        validate_strings=True,
    )
