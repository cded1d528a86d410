"""Maintenance request lifecycle services."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...core.clock import Clock, system_clock
from ...core.exceptions import DatabaseError, ResourceNotFoundError, ValidationError
from ...core.logging import get_logger
from ...core.pagination import PaginatedResults, check_page_bounds
from ...core.recurrence import add_calendar_days
from ...core.utils import as_utc, generate_reference_number, reference_prefix
from ..commons.schemas import PaginationParams
from .crud import maintenance_request_crud as crud
from .models import (
    STATUS_TIMESTAMP_FIELDS,
    MaintenanceRequest,
    MaintenanceRequestStatus,
)
from .schemas import (
    MaintenanceRequestCompletion,
    MaintenanceRequestCreate,
    MaintenanceRequestFilters,
    MaintenanceRequestResponse,
    MaintenanceRequestUpdate,
)

logger = get_logger(__name__)

RESOURCE_TYPE = "MaintenanceRequest"


# ----- History helpers -----


def _status_entry(
    status: MaintenanceRequestStatus,
    timestamp: datetime,
    changed_by: UUID | None,
    notes: str | None,
) -> dict[str, Any]:
    return {
        "status": status.value,
        "timestamp": timestamp.isoformat(),
        "changed_by": str(changed_by) if changed_by else None,
        "notes": notes,
    }


def _assignment_entry(
    assigned_to: UUID | None,
    assigned_by: UUID | None,
    timestamp: datetime,
    notes: str | None,
) -> dict[str, Any]:
    return {
        "assigned_to": str(assigned_to) if assigned_to else None,
        "assigned_by": str(assigned_by) if assigned_by else None,
        "timestamp": timestamp.isoformat(),
        "notes": notes,
    }


async def _validate_parent_request(
    db: AsyncSession, tenant_organization_id: UUID, parent_request_id: UUID
) -> None:
    """Parent must exist in the tenant and its ancestor chain must not loop."""
    visited: set[UUID] = set()
    current_id: UUID | None = parent_request_id

    while current_id is not None:
        if current_id in visited:
            raise ValidationError(
                "Parent request chain contains a cycle",
                field="parent_request_id",
                value=str(parent_request_id),
            )
        visited.add(current_id)

        ancestor = await crud.get(db, tenant_organization_id, current_id)
        if ancestor is None:
            if current_id == parent_request_id:
                raise ValidationError(
                    "Parent request not found",
                    field="parent_request_id",
                    value=str(parent_request_id),
                )
            break
        current_id = ancestor.parent_request_id


# ----- Request Services -----


async def create_request(
    db: AsyncSession,
    tenant_organization_id: UUID,
    data: MaintenanceRequestCreate,
    clock: Clock = system_clock,
) -> MaintenanceRequest:
    """File a new maintenance request with a fresh reference number."""
    if data.parent_request_id is not None:
        await _validate_parent_request(db, tenant_organization_id, data.parent_request_id)

    now = as_utc(clock.now())
    prefix = reference_prefix(settings.reference_number_prefix, now.date())
    fields = data.model_dump()

    last_tried = 0
    for attempt in range(settings.reference_number_max_attempts):
        existing = await crud.count_reference_prefix(db, tenant_organization_id, prefix)
        # After a delete the count lags behind numbers still taken; a tried
        # number is never tried again.
        sequence = max(existing + 1, last_tried + 1)
        last_tried = sequence
        reference_number = generate_reference_number(
            settings.reference_number_prefix, now.date(), sequence
        )

        request = MaintenanceRequest(
            tenant_organization_id=tenant_organization_id,
            reference_number=reference_number,
            status=MaintenanceRequestStatus.SUBMITTED,
            status_history=[
                _status_entry(
                    MaintenanceRequestStatus.SUBMITTED,
                    now,
                    data.requested_by_id,
                    "Request submitted",
                )
            ],
            assignment_history=[],
            created_at=now,
            updated_at=now,
            **fields,
        )

        created = await crud.create_unless_conflict(db, request)
        if created is None:
            logger.warning(
                "Reference number collision",
                extra={
                    "tenant_organization_id": str(tenant_organization_id),
                    "reference_number": reference_number,
                    "attempt": attempt + 1,
                },
            )
            continue

        logger.info(
            "Maintenance request created",
            extra={
                "tenant_organization_id": str(tenant_organization_id),
                "request_id": str(created.id),
                "reference_number": created.reference_number,
            },
        )
        return created

    raise DatabaseError(
        "Could not allocate a unique reference number",
        {
            "tenant_organization_id": str(tenant_organization_id),
            "prefix": prefix,
            "attempts": settings.reference_number_max_attempts,
        },
    )


async def get_request(
    db: AsyncSession, tenant_organization_id: UUID, request_id: UUID
) -> MaintenanceRequest:
    """Fetch a request; requests of other tenants are reported as not found."""
    request = await crud.get(db, tenant_organization_id, request_id)
    if not request:
        raise ResourceNotFoundError(RESOURCE_TYPE, request_id)
    return request


async def list_requests(
    db: AsyncSession,
    tenant_organization_id: UUID,
    filters: MaintenanceRequestFilters | None = None,
    pagination: PaginationParams | None = None,
    clock: Clock = system_clock,
) -> PaginatedResults[MaintenanceRequestResponse]:
    """List a tenant's requests, newest first unless a sort is given."""
    if pagination is None:
        pagination = PaginationParams(page_size=settings.default_page_size)
    check_page_bounds(pagination.page, pagination.page_size, settings.max_page_size)

    items, total = await crud.get_multi(
        db, tenant_organization_id, pagination, as_utc(clock.now()), filters
    )
    return PaginatedResults[MaintenanceRequestResponse].create(
        items=[MaintenanceRequestResponse.model_validate(item) for item in items],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


async def update_request(
    db: AsyncSession,
    tenant_organization_id: UUID,
    request_id: UUID,
    data: MaintenanceRequestUpdate | dict[str, Any],
    actor_id: UUID | None = None,
    clock: Clock = system_clock,
) -> MaintenanceRequest:
    """
    Apply a partial update and record its side effects in one save.

    A status change appends to the status history and stamps the
    first-reached timestamp for the new status. An assignee change appends
    to the assignment history. Approval and warranty fields derive their
    dates from the update time and the completion time respectively.
    """
    if isinstance(data, dict):
        data = MaintenanceRequestUpdate.model_validate(data)
    patch = data.model_dump(exclude_unset=True)

    request = await get_request(db, tenant_organization_id, request_id)
    now = as_utc(clock.now())

    status_notes = patch.pop("status_notes", None)
    assignment_notes = patch.pop("assignment_notes", None)
    previous_status = request.status
    previous_assignee = request.assigned_to_id

    crud.apply_patch(request, patch)

    new_status = patch.get("status")
    if new_status is not None and new_status != previous_status:
        request.status_history = [
            *(request.status_history or []),
            _status_entry(new_status, now, actor_id, status_notes),
        ]

        timestamp_field = STATUS_TIMESTAMP_FIELDS.get(new_status)
        if timestamp_field and getattr(request, timestamp_field) is None:
            setattr(request, timestamp_field, now)

        if new_status == MaintenanceRequestStatus.IN_PROGRESS:
            if request.actual_start_date is None:
                request.actual_start_date = now
        elif new_status == MaintenanceRequestStatus.COMPLETED:
            if request.actual_completion_date is None:
                request.actual_completion_date = now
        elif new_status == MaintenanceRequestStatus.CANCELLED:
            if request.cancelled_by_id is None:
                request.cancelled_by_id = actor_id

        logger.info(
            "Maintenance request status changed",
            extra={
                "tenant_organization_id": str(tenant_organization_id),
                "request_id": str(request.id),
                "from_status": previous_status.value,
                "to_status": new_status.value,
            },
        )

    if "assigned_to_id" in patch and patch["assigned_to_id"] != previous_assignee:
        request.assignment_history = [
            *(request.assignment_history or []),
            _assignment_entry(patch["assigned_to_id"], actor_id, now, assignment_notes),
        ]

    if "is_approved" in patch:
        request.approved_at = now if patch["is_approved"] else None

    if "warranty_days" in patch and request.completed_at is not None:
        warranty_days = patch["warranty_days"]
        request.warranty_expires_at = (
            add_calendar_days(request.completed_at, warranty_days)
            if warranty_days is not None
            else None
        )

    request.updated_at = now
    return await crud.save(db, request)


async def delete_request(
    db: AsyncSession, tenant_organization_id: UUID, request_id: UUID
) -> None:
    """Hard delete a request."""
    request = await get_request(db, tenant_organization_id, request_id)
    await crud.delete(db, request)
    logger.info(
        "Maintenance request deleted",
        extra={
            "tenant_organization_id": str(tenant_organization_id),
            "request_id": str(request_id),
        },
    )


# ----- Lifecycle shortcuts -----


async def assign_request(
    db: AsyncSession,
    tenant_organization_id: UUID,
    request_id: UUID,
    assigned_to_id: UUID,
    actor_id: UUID | None = None,
    notes: str | None = None,
    clock: Clock = system_clock,
) -> MaintenanceRequest:
    """Assign a request to a worker and move it to ASSIGNED."""
    data = MaintenanceRequestUpdate(
        assigned_to_id=assigned_to_id,
        status=MaintenanceRequestStatus.ASSIGNED,
        assignment_notes=notes,
        status_notes=notes,
    )
    return await update_request(
        db, tenant_organization_id, request_id, data, actor_id, clock=clock
    )


async def start_work(
    db: AsyncSession,
    tenant_organization_id: UUID,
    request_id: UUID,
    actor_id: UUID | None = None,
    notes: str | None = None,
    clock: Clock = system_clock,
) -> MaintenanceRequest:
    """Move a request to IN_PROGRESS."""
    data = MaintenanceRequestUpdate(
        status=MaintenanceRequestStatus.IN_PROGRESS, status_notes=notes
    )
    return await update_request(
        db, tenant_organization_id, request_id, data, actor_id, clock=clock
    )


async def complete_request(
    db: AsyncSession,
    tenant_organization_id: UUID,
    request_id: UUID,
    completion: MaintenanceRequestCompletion,
    actor_id: UUID | None = None,
    clock: Clock = system_clock,
) -> MaintenanceRequest:
    """Record completion details and move the request to COMPLETED."""
    now = as_utc(clock.now())
    patch = completion.model_dump(exclude_unset=True)
    patch["status"] = MaintenanceRequestStatus.COMPLETED
    patch["actual_completion_date"] = now

    request = await update_request(
        db,
        tenant_organization_id,
        request_id,
        MaintenanceRequestUpdate.model_validate(patch),
        actor_id,
        clock=clock,
    )
    return request


async def cancel_request(
    db: AsyncSession,
    tenant_organization_id: UUID,
    request_id: UUID,
    actor_id: UUID | None = None,
    reason: str | None = None,
    clock: Clock = system_clock,
) -> MaintenanceRequest:
    """Cancel a request, recording who cancelled it and why."""
    data = MaintenanceRequestUpdate(
        status=MaintenanceRequestStatus.CANCELLED,
        cancellation_reason=reason,
        cancelled_by_id=actor_id,
        status_notes=reason,
    )
    return await update_request(
        db, tenant_organization_id, request_id, data, actor_id, clock=clock
    )
