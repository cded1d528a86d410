"""Maintenance request module for Maintrack.

Request intake, lifecycle transitions and the status/assignment audit trail.
"""

from .models import (
    CLOSED_STATUSES,
    MaintenanceRequest,
    MaintenanceRequestCategory,
    MaintenanceRequestPriority,
    MaintenanceRequestStatus,
    MaintenanceRequestType,
)

__all__ = [
    # Models
    "MaintenanceRequest",
    # Enums
    "MaintenanceRequestStatus",
    "MaintenanceRequestType",
    "MaintenanceRequestPriority",
    "MaintenanceRequestCategory",
    "CLOSED_STATUSES",
]
