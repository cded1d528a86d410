"""
Recurrence arithmetic for preventive maintenance schedules.

All month and year steps are calendar-correct: the day of month is kept
when the target month has it and clamped to the month's last day otherwise
(Jan 31 + 1 month = Feb 28/29).
"""

import enum
from datetime import datetime

from dateutil.relativedelta import relativedelta


class RecurrenceFrequency(str, enum.Enum):
    """How often a schedule comes due."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMI_ANNUALLY = "semi_annually"
    ANNUALLY = "annually"
    CUSTOM = "custom"


class FrequencyUnit(str, enum.Enum):
    """Unit of a custom recurrence interval."""

    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"
    YEARS = "years"


FIXED_STEPS = {
    RecurrenceFrequency.DAILY: relativedelta(days=1),
    RecurrenceFrequency.WEEKLY: relativedelta(weeks=1),
    RecurrenceFrequency.MONTHLY: relativedelta(months=1),
    RecurrenceFrequency.QUARTERLY: relativedelta(months=3),
    RecurrenceFrequency.SEMI_ANNUALLY: relativedelta(months=6),
    RecurrenceFrequency.ANNUALLY: relativedelta(years=1),
}


def interval_step(amount: int, unit: FrequencyUnit | str) -> relativedelta:
    """Build the calendar step for `amount` units."""
    if not isinstance(unit, FrequencyUnit):
        unit = FrequencyUnit(unit.lower())
    return relativedelta(**{unit.value: amount})


def add_calendar_days(anchor: datetime, days: int) -> datetime:
    """Add whole calendar days, keeping the wall-clock time."""
    return anchor + relativedelta(days=days)


def calculate_next_due_date(
    anchor: datetime,
    frequency: RecurrenceFrequency | str,
    custom_interval: int | None = None,
    custom_unit: FrequencyUnit | str | None = None,
) -> datetime:
    """
    Compute the next due date one recurrence step after `anchor`.

    Args:
        anchor: Recurrence anchor (the schedule's start date)
        frequency: Schedule frequency
        custom_interval: Number of units for CUSTOM frequency
        custom_unit: Unit for CUSTOM frequency (days/weeks/months/years)

    Returns:
        The next due date. For CUSTOM without a usable interval or unit the
        anchor is returned unchanged.
    """
    frequency = RecurrenceFrequency(frequency)

    if frequency != RecurrenceFrequency.CUSTOM:
        return anchor + FIXED_STEPS[frequency]

    if not custom_interval or custom_interval < 1 or not custom_unit:
        return anchor
    return anchor + interval_step(custom_interval, custom_unit)
