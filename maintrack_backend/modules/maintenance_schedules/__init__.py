"""Maintenance schedule module for Maintrack.

Recurring preventive maintenance: recurrence, pause/resume and overdue flags.
"""

from .models import (
    LIVE_STATUSES,
    MaintenanceSchedule,
    MaintenanceSchedulePriority,
    MaintenanceScheduleStatus,
    MaintenanceScheduleType,
)

__all__ = [
    # Models
    "MaintenanceSchedule",
    # Enums
    "MaintenanceScheduleStatus",
    "MaintenanceScheduleType",
    "MaintenanceSchedulePriority",
    "LIVE_STATUSES",
]
