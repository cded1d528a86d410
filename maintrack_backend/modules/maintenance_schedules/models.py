"""Maintenance schedule models for Maintrack.

- Recurring preventive maintenance schedules per property
- Persisted projections (is_active, is_paused, is_overdue, days_overdue)
  rewritten from status and next_due_date on every mutation
"""

import enum
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...core.database_types import UUID as UUID_DB
from ...core.database_types import UTCDateTime, enum_column_type
from ...core.recurrence import FrequencyUnit, RecurrenceFrequency
from ...database import Base, TenantScoped, TimestampMixin


class MaintenanceScheduleStatus(str, enum.Enum):
    """Schedule status values."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class MaintenanceScheduleType(str, enum.Enum):
    """Kind of recurring work."""

    PREVENTIVE = "preventive"
    INSPECTION = "inspection"
    CLEANING = "cleaning"
    SERVICING = "servicing"
    SAFETY_CHECK = "safety_check"
    COMPLIANCE = "compliance"
    WARRANTY = "warranty"
    SEASONAL = "seasonal"


class MaintenanceSchedulePriority(str, enum.Enum):
    """Schedule priority levels."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Statuses in which a schedule still generates work
LIVE_STATUSES = (MaintenanceScheduleStatus.ACTIVE, MaintenanceScheduleStatus.PAUSED)


class MaintenanceSchedule(TenantScoped, TimestampMixin, Base):
    """Recurring maintenance schedule within a tenant organization."""

    __tablename__ = "maintenance_schedules"

    property_id: Mapped[uuid.UUID] = mapped_column(UUID_DB(), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[MaintenanceScheduleType] = mapped_column(
        enum_column_type(MaintenanceScheduleType),
        nullable=False,
        default=MaintenanceScheduleType.PREVENTIVE,
    )
    priority: Mapped[MaintenanceSchedulePriority] = mapped_column(
        enum_column_type(MaintenanceSchedulePriority),
        nullable=False,
        default=MaintenanceSchedulePriority.MEDIUM,
    )
    status: Mapped[MaintenanceScheduleStatus] = mapped_column(
        enum_column_type(MaintenanceScheduleStatus),
        nullable=False,
        default=MaintenanceScheduleStatus.ACTIVE,
    )

    created_by_id: Mapped[uuid.UUID | None] = mapped_column(UUID_DB(), nullable=True)
    assigned_to_id: Mapped[uuid.UUID | None] = mapped_column(UUID_DB(), nullable=True)

    # Work description
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    equipment: Mapped[str | None] = mapped_column(String(255), nullable=True)
    task_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    estimated_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    estimated_cost: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2), nullable=True
    )
    advance_notice_days: Mapped[int] = mapped_column(
        Integer, default=7, nullable=False
    )
    auto_create_requests: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    # Recurrence
    frequency: Mapped[RecurrenceFrequency] = mapped_column(
        enum_column_type(RecurrenceFrequency), nullable=False
    )
    custom_interval: Mapped[int | None] = mapped_column(Integer, nullable=True)
    custom_frequency_unit: Mapped[FrequencyUnit | None] = mapped_column(
        enum_column_type(FrequencyUnit), nullable=True
    )
    start_date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    next_due_date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    last_completed_date: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )

    # Projections of status and next_due_date
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_paused: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_overdue: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    days_overdue: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Pause bookkeeping
    pause_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    paused_by_id: Mapped[uuid.UUID | None] = mapped_column(UUID_DB(), nullable=True)
    paused_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    # Counters, only moved by the completion/skip hooks
    completion_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    skip_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_maintenance_request_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID_DB(), nullable=True
    )

    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    extra_metadata: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)

    __table_args__ = (
        Index(
            "ix_maintenance_schedules_status", "tenant_organization_id", "status"
        ),
        Index(
            "ix_maintenance_schedules_next_due",
            "tenant_organization_id",
            "next_due_date",
        ),
        Index(
            "ix_maintenance_schedules_property",
            "tenant_organization_id",
            "property_id",
        ),
    )

    def refresh_projections(self, now: datetime) -> bool:
        """Rewrite the derived flags from status and next_due_date.

        Returns:
            True if any flag changed
        """
        before = (self.is_active, self.is_paused, self.is_overdue, self.days_overdue)

        self.is_active = self.status in LIVE_STATUSES
        self.is_paused = self.status == MaintenanceScheduleStatus.PAUSED
        self.is_overdue = bool(
            self.is_active
            and not self.is_paused
            and self.next_due_date is not None
            and self.next_due_date < now
        )
        self.days_overdue = (
            (now.date() - self.next_due_date.date()).days if self.is_overdue else None
        )

        return before != (
            self.is_active,
            self.is_paused,
            self.is_overdue,
            self.days_overdue,
        )

    def __repr__(self) -> str:
        return (
            f"<MaintenanceSchedule(id={self.id}, name={self.name}, "
            f"status={self.status})>"
        )
