"""Time source for the lifecycle managers and the dashboard."""

from abc import ABC, abstractmethod
from datetime import datetime

from .utils import utc_now


class Clock(ABC):
    """Supplies the current time. Subclass to pin time in tests."""

    @abstractmethod
    def now(self) -> datetime:
        """Current time as a timezone-aware datetime."""


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return utc_now()


system_clock = SystemClock()
