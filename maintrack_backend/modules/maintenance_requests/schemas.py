"""Maintenance request schemas for Maintrack."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .models import (
    MaintenanceRequestCategory,
    MaintenanceRequestPriority,
    MaintenanceRequestStatus,
    MaintenanceRequestType,
)

# ----- Audit trail entries -----


class StatusHistoryEntry(BaseModel):
    """One entry of a request's status history."""

    status: MaintenanceRequestStatus
    timestamp: datetime
    changed_by: UUID | None = None
    notes: str | None = None


class AssignmentHistoryEntry(BaseModel):
    """One entry of a request's assignment history."""

    assigned_to: UUID | None = None
    assigned_by: UUID | None = None
    timestamp: datetime
    notes: str | None = None


# ----- Request Schemas -----


class MaintenanceRequestBase(BaseModel):
    """Fields a caller may supply when filing a request."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    type: MaintenanceRequestType = MaintenanceRequestType.REACTIVE
    category: MaintenanceRequestCategory = MaintenanceRequestCategory.OTHER
    priority: MaintenanceRequestPriority = MaintenanceRequestPriority.MEDIUM
    property_id: UUID
    location: str | None = Field(None, max_length=255)
    unit_number: str | None = Field(None, max_length=50)
    room: str | None = Field(None, max_length=120)
    floor: str | None = Field(None, max_length=50)
    contact_name: str | None = Field(None, max_length=255)
    contact_phone: str | None = Field(None, max_length=50)
    contact_email: str | None = Field(None, max_length=255)
    requires_access: bool = True
    access_instructions: str | None = None
    due_date: datetime | None = None
    preferred_start_date: datetime | None = None
    preferred_completion_date: datetime | None = None
    estimated_cost: Decimal | None = Field(None, ge=0)
    requires_approval: bool = False
    is_emergency: bool = False
    safety_concerns: str | None = None
    tags: list[str] = Field(default_factory=list)
    extra_metadata: dict[str, Any] | None = None
    custom_fields: dict[str, Any] | None = None


class MaintenanceRequestCreate(MaintenanceRequestBase):
    """Schema for filing a maintenance request."""

    requested_by_id: UUID
    parent_request_id: UUID | None = None
    preventive_schedule_id: UUID | None = None


class MaintenanceRequestUpdate(BaseModel):
    """Partial update. Only fields explicitly set are applied.

    `status_notes` and `assignment_notes` annotate the history entries the
    update produces; they are not stored on the request itself.
    """

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    type: MaintenanceRequestType | None = None
    category: MaintenanceRequestCategory | None = None
    priority: MaintenanceRequestPriority | None = None
    status: MaintenanceRequestStatus | None = None
    status_notes: str | None = None
    assigned_to_id: UUID | None = None
    assignment_notes: str | None = None
    location: str | None = Field(None, max_length=255)
    unit_number: str | None = Field(None, max_length=50)
    room: str | None = Field(None, max_length=120)
    floor: str | None = Field(None, max_length=50)
    contact_name: str | None = Field(None, max_length=255)
    contact_phone: str | None = Field(None, max_length=50)
    contact_email: str | None = Field(None, max_length=255)
    requires_access: bool | None = None
    access_instructions: str | None = None
    due_date: datetime | None = None
    preferred_start_date: datetime | None = None
    preferred_completion_date: datetime | None = None
    scheduled_start_date: datetime | None = None
    scheduled_completion_date: datetime | None = None
    actual_start_date: datetime | None = None
    actual_completion_date: datetime | None = None
    estimated_cost: Decimal | None = Field(None, ge=0)
    actual_cost: Decimal | None = Field(None, ge=0)
    requires_approval: bool | None = None
    is_approved: bool | None = None
    approved_by_id: UUID | None = None
    approval_notes: str | None = None
    work_performed: str | None = None
    materials_used: str | None = None
    parts_replaced: str | None = None
    labor_hours: Decimal | None = Field(None, ge=0)
    quality_rating: int | None = Field(None, ge=1, le=5)
    satisfaction_rating: int | None = Field(None, ge=1, le=5)
    tenant_feedback: str | None = None
    warranty_days: int | None = Field(None, ge=0)
    warranty_details: str | None = None
    is_emergency: bool | None = None
    safety_concerns: str | None = None
    cancelled_by_id: UUID | None = None
    cancellation_reason: str | None = None
    tags: list[str] | None = None
    extra_metadata: dict[str, Any] | None = None
    custom_fields: dict[str, Any] | None = None


class MaintenanceRequestCompletion(BaseModel):
    """Completion details recorded when work is finished."""

    work_performed: str = Field(..., min_length=1)
    materials_used: str | None = None
    parts_replaced: str | None = None
    labor_hours: Decimal | None = Field(None, ge=0)
    actual_cost: Decimal | None = Field(None, ge=0)
    warranty_days: int | None = Field(None, ge=0)
    warranty_details: str | None = None
    status_notes: str | None = None


class MaintenanceRequestFilters(BaseModel):
    """Query filters for listing requests."""

    status: list[MaintenanceRequestStatus] | None = None
    priority: list[MaintenanceRequestPriority] | None = None
    type: list[MaintenanceRequestType] | None = None
    category: list[MaintenanceRequestCategory] | None = None
    property_id: UUID | None = None
    assigned_to_id: UUID | None = None
    requested_by_id: UUID | None = None
    is_emergency: bool | None = None
    is_overdue: bool | None = None
    due_date_from: datetime | None = None
    due_date_to: datetime | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None
    tags: list[str] | None = None
    search: str | None = None


class MaintenanceRequestResponse(BaseModel):
    """Schema for maintenance request response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_organization_id: UUID
    reference_number: str
    title: str
    description: str | None = None
    type: MaintenanceRequestType
    category: MaintenanceRequestCategory
    priority: MaintenanceRequestPriority
    status: MaintenanceRequestStatus
    property_id: UUID
    requested_by_id: UUID
    assigned_to_id: UUID | None = None
    due_date: datetime | None = None
    actual_start_date: datetime | None = None
    actual_completion_date: datetime | None = None
    acknowledged_at: datetime | None = None
    assigned_at: datetime | None = None
    work_started_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    approved_at: datetime | None = None
    warranty_expires_at: datetime | None = None
    is_emergency: bool
    parent_request_id: UUID | None = None
    status_history: list[StatusHistoryEntry] = []
    assignment_history: list[AssignmentHistoryEntry] = []
    tags: list[str] = []
    created_at: datetime
    updated_at: datetime
