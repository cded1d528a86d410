"""Maintenance requests and schedules

Revision ID: 0001
Revises:
Create Date: 2025-01-06

Creates:
- maintenance_requests (lifecycle, audit trails, per-tenant reference numbers)
- maintenance_schedules (recurrence, pause bookkeeping, projections)
"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


REQUEST_STATUSES = (
    "submitted",
    "acknowledged",
    "assigned",
    "in_progress",
    "on_hold",
    "awaiting_parts",
    "awaiting_access",
    "requires_approval",
    "approved",
    "completed",
    "cancelled",
    "rejected",
    "pending",
)
REQUEST_TYPES = (
    "reactive",
    "preventive",
    "emergency",
    "inspection",
    "routine",
    "improvement",
)
REQUEST_PRIORITIES = ("low", "medium", "high", "urgent", "emergency")
REQUEST_CATEGORIES = (
    "plumbing",
    "electrical",
    "heating",
    "cooling",
    "appliances",
    "structural",
    "painting",
    "flooring",
    "roofing",
    "windows",
    "doors",
    "security",
    "landscaping",
    "cleaning",
    "pest_control",
    "other",
)
SCHEDULE_STATUSES = ("active", "inactive", "paused", "completed", "cancelled", "expired")
SCHEDULE_TYPES = (
    "preventive",
    "inspection",
    "cleaning",
    "servicing",
    "safety_check",
    "compliance",
    "warranty",
    "seasonal",
)
SCHEDULE_PRIORITIES = ("critical", "high", "medium", "low")
FREQUENCIES = (
    "daily",
    "weekly",
    "monthly",
    "quarterly",
    "semi_annually",
    "annually",
    "custom",
)
FREQUENCY_UNITS = ("days", "weeks", "months", "years")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Create maintenance tables."""

    # maintenance_requests - work orders with status/assignment audit trails
    op.create_table(
        "maintenance_requests",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("tenant_organization_id", sa.String(36), nullable=False),
        sa.Column("reference_number", sa.String(32), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", sa.Enum(*REQUEST_TYPES, name="maintenancerequesttype"), nullable=False),
        sa.Column("category", sa.Enum(*REQUEST_CATEGORIES, name="maintenancerequestcategory"), nullable=False),
        sa.Column("priority", sa.Enum(*REQUEST_PRIORITIES, name="maintenancerequestpriority"), nullable=False),
        sa.Column("status", sa.Enum(*REQUEST_STATUSES, name="maintenancerequeststatus"), nullable=False),
        sa.Column("status_history", sa.JSON(), nullable=False),
        sa.Column("property_id", sa.String(36), nullable=False),
        sa.Column("requested_by_id", sa.String(36), nullable=False),
        sa.Column("assigned_to_id", sa.String(36), nullable=True),
        sa.Column("assignment_history", sa.JSON(), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("unit_number", sa.String(50), nullable=True),
        sa.Column("room", sa.String(120), nullable=True),
        sa.Column("floor", sa.String(50), nullable=True),
        sa.Column("contact_name", sa.String(255), nullable=True),
        sa.Column("contact_phone", sa.String(50), nullable=True),
        sa.Column("contact_email", sa.String(255), nullable=True),
        sa.Column("requires_access", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("access_instructions", sa.Text(), nullable=True),
        sa.Column("due_date", sa.DateTime(), nullable=True),
        sa.Column("preferred_start_date", sa.DateTime(), nullable=True),
        sa.Column("preferred_completion_date", sa.DateTime(), nullable=True),
        sa.Column("scheduled_start_date", sa.DateTime(), nullable=True),
        sa.Column("scheduled_completion_date", sa.DateTime(), nullable=True),
        sa.Column("actual_start_date", sa.DateTime(), nullable=True),
        sa.Column("actual_completion_date", sa.DateTime(), nullable=True),
        sa.Column("acknowledged_at", sa.DateTime(), nullable=True),
        sa.Column("assigned_at", sa.DateTime(), nullable=True),
        sa.Column("work_started_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(), nullable=True),
        sa.Column("requires_approval", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("is_approved", sa.Boolean(), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("approved_by_id", sa.String(36), nullable=True),
        sa.Column("approval_notes", sa.Text(), nullable=True),
        sa.Column("estimated_cost", sa.Numeric(10, 2), nullable=True),
        sa.Column("actual_cost", sa.Numeric(10, 2), nullable=True),
        sa.Column("work_performed", sa.Text(), nullable=True),
        sa.Column("materials_used", sa.Text(), nullable=True),
        sa.Column("parts_replaced", sa.Text(), nullable=True),
        sa.Column("labor_hours", sa.Numeric(6, 2), nullable=True),
        sa.Column("quality_rating", sa.Integer(), nullable=True),
        sa.Column("satisfaction_rating", sa.Integer(), nullable=True),
        sa.Column("tenant_feedback", sa.Text(), nullable=True),
        sa.Column("warranty_days", sa.Integer(), nullable=True),
        sa.Column("warranty_details", sa.Text(), nullable=True),
        sa.Column("warranty_expires_at", sa.DateTime(), nullable=True),
        sa.Column("is_emergency", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("safety_concerns", sa.Text(), nullable=True),
        sa.Column("cancelled_by_id", sa.String(36), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("parent_request_id", sa.String(36), nullable=True),
        sa.Column("preventive_schedule_id", sa.String(36), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("custom_fields", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "tenant_organization_id",
            "reference_number",
            name="uq_maintenance_requests_tenant_reference",
        ),
    )
    op.create_index(
        "ix_maintenance_requests_tenant_organization_id",
        "maintenance_requests",
        ["tenant_organization_id"],
    )
    op.create_index(
        "ix_maintenance_requests_status",
        "maintenance_requests",
        ["tenant_organization_id", "status"],
    )
    op.create_index(
        "ix_maintenance_requests_priority",
        "maintenance_requests",
        ["tenant_organization_id", "priority"],
    )
    op.create_index(
        "ix_maintenance_requests_property",
        "maintenance_requests",
        ["tenant_organization_id", "property_id"],
    )
    op.create_index(
        "ix_maintenance_requests_assignee",
        "maintenance_requests",
        ["tenant_organization_id", "assigned_to_id"],
    )
    op.create_index(
        "ix_maintenance_requests_due_date",
        "maintenance_requests",
        ["tenant_organization_id", "due_date"],
    )

    # maintenance_schedules - recurring preventive work
    op.create_table(
        "maintenance_schedules",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("tenant_organization_id", sa.String(36), nullable=False),
        sa.Column("property_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", sa.Enum(*SCHEDULE_TYPES, name="maintenancescheduletype"), nullable=False),
        sa.Column("priority", sa.Enum(*SCHEDULE_PRIORITIES, name="maintenanceschedulepriority"), nullable=False),
        sa.Column("status", sa.Enum(*SCHEDULE_STATUSES, name="maintenanceschedulestatus"), nullable=False),
        sa.Column("created_by_id", sa.String(36), nullable=True),
        sa.Column("assigned_to_id", sa.String(36), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("equipment", sa.String(255), nullable=True),
        sa.Column("task_instructions", sa.Text(), nullable=True),
        sa.Column("estimated_duration", sa.Integer(), nullable=True),
        sa.Column("estimated_cost", sa.Numeric(10, 2), nullable=True),
        sa.Column("advance_notice_days", sa.Integer(), nullable=False, server_default="7"),
        sa.Column("auto_create_requests", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("frequency", sa.Enum(*FREQUENCIES, name="recurrencefrequency"), nullable=False),
        sa.Column("custom_interval", sa.Integer(), nullable=True),
        sa.Column("custom_frequency_unit", sa.Enum(*FREQUENCY_UNITS, name="frequencyunit"), nullable=True),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=True),
        sa.Column("next_due_date", sa.DateTime(), nullable=False),
        sa.Column("last_completed_date", sa.DateTime(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("is_paused", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("is_overdue", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("days_overdue", sa.Integer(), nullable=True),
        sa.Column("pause_reason", sa.Text(), nullable=True),
        sa.Column("paused_by_id", sa.String(36), nullable=True),
        sa.Column("paused_at", sa.DateTime(), nullable=True),
        sa.Column("completion_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("skip_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_maintenance_request_id", sa.String(36), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_maintenance_schedules_tenant_organization_id",
        "maintenance_schedules",
        ["tenant_organization_id"],
    )
    op.create_index(
        "ix_maintenance_schedules_status",
        "maintenance_schedules",
        ["tenant_organization_id", "status"],
    )
    op.create_index(
        "ix_maintenance_schedules_next_due",
        "maintenance_schedules",
        ["tenant_organization_id", "next_due_date"],
    )
    op.create_index(
        "ix_maintenance_schedules_property",
        "maintenance_schedules",
        ["tenant_organization_id", "property_id"],
    )


def downgrade() -> None:
    """Drop maintenance tables."""
    op.drop_table("maintenance_schedules")
    op.drop_table("maintenance_requests")
