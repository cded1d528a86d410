"""Maintenance schedule schemas for Maintrack."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...core.recurrence import FrequencyUnit, RecurrenceFrequency
from ...core.utils import as_utc
from .models import (
    MaintenanceSchedulePriority,
    MaintenanceScheduleStatus,
    MaintenanceScheduleType,
)

# ----- Schedule Schemas -----


class MaintenanceScheduleBase(BaseModel):
    """Shared schedule fields."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    type: MaintenanceScheduleType = MaintenanceScheduleType.PREVENTIVE
    priority: MaintenanceSchedulePriority = MaintenanceSchedulePriority.MEDIUM
    property_id: UUID
    assigned_to_id: UUID | None = None
    location: str | None = Field(None, max_length=255)
    equipment: str | None = Field(None, max_length=255)
    task_instructions: str | None = None
    estimated_duration: int | None = Field(None, ge=0, description="Minutes")
    estimated_cost: Decimal | None = Field(None, ge=0)
    advance_notice_days: int = Field(7, ge=0)
    auto_create_requests: bool = False
    frequency: RecurrenceFrequency
    custom_interval: int | None = Field(None, ge=1)
    custom_frequency_unit: FrequencyUnit | None = None
    start_date: datetime
    end_date: datetime | None = None
    tags: list[str] = Field(default_factory=list)
    extra_metadata: dict[str, Any] | None = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_to_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else v


class MaintenanceScheduleCreate(MaintenanceScheduleBase):
    """Schema for creating a schedule."""

    created_by_id: UUID | None = None


class MaintenanceScheduleUpdate(BaseModel):
    """Partial update. next_due_date is always derived and cannot be set."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    type: MaintenanceScheduleType | None = None
    priority: MaintenanceSchedulePriority | None = None
    status: MaintenanceScheduleStatus | None = None
    property_id: UUID | None = None
    assigned_to_id: UUID | None = None
    location: str | None = Field(None, max_length=255)
    equipment: str | None = Field(None, max_length=255)
    task_instructions: str | None = None
    estimated_duration: int | None = Field(None, ge=0)
    estimated_cost: Decimal | None = Field(None, ge=0)
    advance_notice_days: int | None = Field(None, ge=0)
    auto_create_requests: bool | None = None
    frequency: RecurrenceFrequency | None = None
    custom_interval: int | None = Field(None, ge=1)
    custom_frequency_unit: FrequencyUnit | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    is_active: bool | None = None
    is_paused: bool | None = None
    pause_reason: str | None = None
    paused_by_id: UUID | None = None
    tags: list[str] | None = None
    extra_metadata: dict[str, Any] | None = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_to_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else v


class MaintenanceScheduleFilters(BaseModel):
    """Query filters for listing schedules."""

    status: list[MaintenanceScheduleStatus] | None = None
    type: list[MaintenanceScheduleType] | None = None
    priority: list[MaintenanceSchedulePriority] | None = None
    frequency: list[RecurrenceFrequency] | None = None
    property_id: UUID | None = None
    assigned_to_id: UUID | None = None
    is_active: bool | None = None
    is_paused: bool | None = None
    is_overdue: bool | None = None
    next_due_date_from: datetime | None = None
    next_due_date_to: datetime | None = None
    tags: list[str] | None = None
    search: str | None = None


class MaintenanceScheduleResponse(BaseModel):
    """Schema for schedule response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_organization_id: UUID
    property_id: UUID
    name: str
    description: str | None = None
    type: MaintenanceScheduleType
    priority: MaintenanceSchedulePriority
    status: MaintenanceScheduleStatus
    assigned_to_id: UUID | None = None
    frequency: RecurrenceFrequency
    custom_interval: int | None = None
    custom_frequency_unit: FrequencyUnit | None = None
    start_date: datetime
    end_date: datetime | None = None
    next_due_date: datetime
    last_completed_date: datetime | None = None
    is_active: bool
    is_paused: bool
    is_overdue: bool
    days_overdue: int | None = None
    pause_reason: str | None = None
    paused_at: datetime | None = None
    completion_count: int
    skip_count: int
    tags: list[str] = []
    created_at: datetime
    updated_at: datetime
