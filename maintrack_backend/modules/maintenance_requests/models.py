"""Maintenance request models for Maintrack.

- Maintenance requests filed by tenants or staff
- Status and assignment audit trails (append-only JSON lists)
"""

import enum
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from ...core.database_types import UUID as UUID_DB
from ...core.database_types import UTCDateTime, enum_column_type
from ...database import Base, TenantScoped, TimestampMixin


class MaintenanceRequestStatus(str, enum.Enum):
    """Request lifecycle status values."""

    SUBMITTED = "submitted"
    ACKNOWLEDGED = "acknowledged"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    AWAITING_PARTS = "awaiting_parts"
    AWAITING_ACCESS = "awaiting_access"
    REQUIRES_APPROVAL = "requires_approval"
    APPROVED = "approved"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"
    PENDING = "pending"


class MaintenanceRequestType(str, enum.Enum):
    """How the work came about."""

    REACTIVE = "reactive"
    PREVENTIVE = "preventive"
    EMERGENCY = "emergency"
    INSPECTION = "inspection"
    ROUTINE = "routine"
    IMPROVEMENT = "improvement"


class MaintenanceRequestPriority(str, enum.Enum):
    """Priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"
    EMERGENCY = "emergency"


class MaintenanceRequestCategory(str, enum.Enum):
    """Trade/category of the work."""

    PLUMBING = "plumbing"
    ELECTRICAL = "electrical"
    HEATING = "heating"
    COOLING = "cooling"
    APPLIANCES = "appliances"
    STRUCTURAL = "structural"
    PAINTING = "painting"
    FLOORING = "flooring"
    ROOFING = "roofing"
    WINDOWS = "windows"
    DOORS = "doors"
    SECURITY = "security"
    LANDSCAPING = "landscaping"
    CLEANING = "cleaning"
    PEST_CONTROL = "pest_control"
    OTHER = "other"


# Statuses after which a request no longer counts as outstanding
CLOSED_STATUSES = (
    MaintenanceRequestStatus.COMPLETED,
    MaintenanceRequestStatus.CANCELLED,
)

# Status -> attribute holding the first time the status was reached
STATUS_TIMESTAMP_FIELDS = {
    MaintenanceRequestStatus.ACKNOWLEDGED: "acknowledged_at",
    MaintenanceRequestStatus.ASSIGNED: "assigned_at",
    MaintenanceRequestStatus.IN_PROGRESS: "work_started_at",
    MaintenanceRequestStatus.COMPLETED: "completed_at",
    MaintenanceRequestStatus.CANCELLED: "cancelled_at",
}


class MaintenanceRequest(TenantScoped, TimestampMixin, Base):
    """Maintenance request within a tenant organization."""

    __tablename__ = "maintenance_requests"

    reference_number: Mapped[str] = mapped_column(String(32), nullable=False)

    # Classification
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[MaintenanceRequestType] = mapped_column(
        enum_column_type(MaintenanceRequestType),
        nullable=False,
        default=MaintenanceRequestType.REACTIVE,
    )
    category: Mapped[MaintenanceRequestCategory] = mapped_column(
        enum_column_type(MaintenanceRequestCategory),
        nullable=False,
        default=MaintenanceRequestCategory.OTHER,
    )
    priority: Mapped[MaintenanceRequestPriority] = mapped_column(
        enum_column_type(MaintenanceRequestPriority),
        nullable=False,
        default=MaintenanceRequestPriority.MEDIUM,
    )

    # Lifecycle
    status: Mapped[MaintenanceRequestStatus] = mapped_column(
        enum_column_type(MaintenanceRequestStatus),
        nullable=False,
        default=MaintenanceRequestStatus.SUBMITTED,
    )
    status_history: Mapped[list[dict]] = mapped_column(
        JSON, nullable=False, default=list
    )

    # People
    property_id: Mapped[uuid.UUID] = mapped_column(UUID_DB(), nullable=False)
    requested_by_id: Mapped[uuid.UUID] = mapped_column(UUID_DB(), nullable=False)
    assigned_to_id: Mapped[uuid.UUID | None] = mapped_column(UUID_DB(), nullable=True)
    assignment_history: Mapped[list[dict]] = mapped_column(
        JSON, nullable=False, default=list
    )

    # Location and contact
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    unit_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    room: Mapped[str | None] = mapped_column(String(120), nullable=True)
    floor: Mapped[str | None] = mapped_column(String(50), nullable=True)
    contact_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    contact_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    requires_access: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    access_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Planned and actual dates
    due_date: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    preferred_start_date: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )
    preferred_completion_date: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )
    scheduled_start_date: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )
    scheduled_completion_date: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )
    actual_start_date: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )
    actual_completion_date: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )

    # Set the first time the matching status is reached
    acknowledged_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )
    assigned_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    work_started_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    # Approval
    requires_approval: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    is_approved: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    approved_by_id: Mapped[uuid.UUID | None] = mapped_column(UUID_DB(), nullable=True)
    approval_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Work and cost
    estimated_cost: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2), nullable=True
    )
    actual_cost: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    work_performed: Mapped[str | None] = mapped_column(Text, nullable=True)
    materials_used: Mapped[str | None] = mapped_column(Text, nullable=True)
    parts_replaced: Mapped[str | None] = mapped_column(Text, nullable=True)
    labor_hours: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)

    # Feedback
    quality_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    satisfaction_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tenant_feedback: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Warranty
    warranty_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    warranty_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    warranty_expires_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )

    # Safety
    is_emergency: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    safety_concerns: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Cancellation
    cancelled_by_id: Mapped[uuid.UUID | None] = mapped_column(UUID_DB(), nullable=True)
    cancellation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Linkage (non-owning)
    parent_request_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID_DB(), nullable=True
    )
    preventive_schedule_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID_DB(), nullable=True
    )

    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    extra_metadata: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)
    custom_fields: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "tenant_organization_id",
            "reference_number",
            name="uq_maintenance_requests_tenant_reference",
        ),
        Index(
            "ix_maintenance_requests_status", "tenant_organization_id", "status"
        ),
        Index(
            "ix_maintenance_requests_priority", "tenant_organization_id", "priority"
        ),
        Index(
            "ix_maintenance_requests_property", "tenant_organization_id", "property_id"
        ),
        Index(
            "ix_maintenance_requests_assignee",
            "tenant_organization_id",
            "assigned_to_id",
        ),
        Index(
            "ix_maintenance_requests_due_date", "tenant_organization_id", "due_date"
        ),
    )

    @property
    def is_closed(self) -> bool:
        return self.status in CLOSED_STATUSES

    def is_overdue_at(self, now: datetime) -> bool:
        """Past its due date while still outstanding."""
        return (
            self.due_date is not None and self.due_date < now and not self.is_closed
        )

    def __repr__(self) -> str:
        return (
            f"<MaintenanceRequest(id={self.id}, ref={self.reference_number}, "
            f"status={self.status})>"
        )
