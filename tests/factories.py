"""
Test data factories for maintenance requests and schedules.

Usage:
    data = build_request_create(priority="high")
    clock = FixedClock(datetime(2024, 1, 15, tzinfo=timezone.utc))
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from maintrack_backend.core.clock import Clock
from maintrack_backend.modules.maintenance_requests.schemas import (
    MaintenanceRequestCreate,
)
from maintrack_backend.modules.maintenance_schedules.schemas import (
    MaintenanceScheduleCreate,
)


class FixedClock(Clock):
    """Clock pinned to a settable instant."""

    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


def build_request_create(**overrides) -> MaintenanceRequestCreate:
    """Request payload with realistic defaults."""
    data = {
        "title": "Leaking kitchen faucet",
        "description": "Water dripping constantly from the mixer tap",
        "category": "plumbing",
        "priority": "medium",
        "property_id": uuid4(),
        "requested_by_id": uuid4(),
        "unit_number": "4B",
        "tags": ["kitchen"],
    }
    data.update(overrides)
    return MaintenanceRequestCreate(**data)


def build_schedule_create(**overrides) -> MaintenanceScheduleCreate:
    """Schedule payload with realistic defaults."""
    data = {
        "name": "HVAC filter replacement",
        "type": "servicing",
        "priority": "medium",
        "property_id": uuid4(),
        "frequency": "weekly",
        "start_date": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "equipment": "Rooftop air handler",
    }
    data.update(overrides)
    return MaintenanceScheduleCreate(**data)
