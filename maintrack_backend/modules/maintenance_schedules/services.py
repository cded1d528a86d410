"""Maintenance schedule lifecycle services."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...core.clock import Clock, system_clock
from ...core.exceptions import ResourceNotFoundError, ValidationError
from ...core.logging import get_logger
from ...core.pagination import PaginatedResults, check_page_bounds
from ...core.recurrence import calculate_next_due_date
from ...core.utils import as_utc
from ..commons.schemas import PaginationParams
from .crud import maintenance_schedule_crud as crud
from .models import LIVE_STATUSES, MaintenanceSchedule, MaintenanceScheduleStatus
from .schemas import (
    MaintenanceScheduleCreate,
    MaintenanceScheduleFilters,
    MaintenanceScheduleResponse,
    MaintenanceScheduleUpdate,
)

logger = get_logger(__name__)

RESOURCE_TYPE = "MaintenanceSchedule"

# Patch keys that move the recurrence anchor or step
RECURRENCE_FIELDS = ("frequency", "start_date", "custom_interval", "custom_frequency_unit")

# Patch keys handled explicitly rather than copied onto the record
FLAG_FIELDS = ("is_active", "is_paused")


def _check_date_range(start_date: datetime, end_date: datetime | None) -> None:
    if end_date is not None and as_utc(end_date) < as_utc(start_date):
        raise ValidationError(
            "End date must be after start date", field="end_date", value=end_date
        )


def _stamp_pause(
    schedule: MaintenanceSchedule, now: datetime, paused_by_id: UUID | None
) -> None:
    schedule.paused_at = now
    schedule.paused_by_id = paused_by_id


def _clear_pause(schedule: MaintenanceSchedule) -> None:
    schedule.paused_at = None
    schedule.paused_by_id = None
    schedule.pause_reason = None


def _log_extra(schedule: MaintenanceSchedule, **fields: Any) -> dict[str, Any]:
    return {
        "tenant_organization_id": str(schedule.tenant_organization_id),
        "schedule_id": str(schedule.id),
        **fields,
    }


# ----- Schedule Services -----


async def create_schedule(
    db: AsyncSession,
    tenant_organization_id: UUID,
    data: MaintenanceScheduleCreate,
    clock: Clock = system_clock,
) -> MaintenanceSchedule:
    """Create an active schedule whose first due date is one step past start."""
    _check_date_range(data.start_date, data.end_date)
    now = as_utc(clock.now())

    schedule = MaintenanceSchedule(
        tenant_organization_id=tenant_organization_id,
        status=MaintenanceScheduleStatus.ACTIVE,
        next_due_date=calculate_next_due_date(
            data.start_date,
            data.frequency,
            data.custom_interval,
            data.custom_frequency_unit,
        ),
        completion_count=0,
        skip_count=0,
        created_at=now,
        updated_at=now,
        **data.model_dump(),
    )
    schedule.refresh_projections(now)

    schedule = await crud.create(db, schedule)
    logger.info(
        "Maintenance schedule created",
        extra=_log_extra(
            schedule,
            frequency=schedule.frequency.value,
            next_due_date=schedule.next_due_date.isoformat(),
        ),
    )
    return schedule


async def get_schedule(
    db: AsyncSession, tenant_organization_id: UUID, schedule_id: UUID
) -> MaintenanceSchedule:
    """Fetch a schedule; schedules of other tenants are reported as not found."""
    schedule = await crud.get(db, tenant_organization_id, schedule_id)
    if not schedule:
        raise ResourceNotFoundError(RESOURCE_TYPE, schedule_id)
    return schedule


async def list_schedules(
    db: AsyncSession,
    tenant_organization_id: UUID,
    filters: MaintenanceScheduleFilters | None = None,
    pagination: PaginationParams | None = None,
    clock: Clock = system_clock,
) -> PaginatedResults[MaintenanceScheduleResponse]:
    """List a tenant's schedules, soonest due first unless a sort is given."""
    if pagination is None:
        pagination = PaginationParams(page_size=settings.default_page_size)
    check_page_bounds(pagination.page, pagination.page_size, settings.max_page_size)

    items, total = await crud.get_multi(
        db, tenant_organization_id, pagination, as_utc(clock.now()), filters
    )
    return PaginatedResults[MaintenanceScheduleResponse].create(
        items=[MaintenanceScheduleResponse.model_validate(item) for item in items],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


async def update_schedule(
    db: AsyncSession,
    tenant_organization_id: UUID,
    schedule_id: UUID,
    data: MaintenanceScheduleUpdate | dict[str, Any],
    actor_id: UUID | None = None,
    clock: Clock = system_clock,
) -> MaintenanceSchedule:
    """
    Apply a partial update to a schedule.

    Changing frequency, start date or the custom interval recomputes
    next_due_date from the start date. `is_active` switches the schedule
    between active and inactive. `is_paused` moves ACTIVE to PAUSED and
    back; entering or leaving PAUSED by any route stamps or clears
    paused_at, paused_by_id and pause_reason.
    """
    if isinstance(data, dict):
        data = MaintenanceScheduleUpdate.model_validate(data)
    patch = data.model_dump(exclude_unset=True)

    schedule = await get_schedule(db, tenant_organization_id, schedule_id)
    now = as_utc(clock.now())
    previous_status = schedule.status

    crud.apply_patch(
        schedule, {k: v for k, v in patch.items() if k not in FLAG_FIELDS}
    )
    _check_date_range(schedule.start_date, schedule.end_date)

    if any(field in patch for field in RECURRENCE_FIELDS):
        schedule.next_due_date = calculate_next_due_date(
            schedule.start_date,
            schedule.frequency,
            schedule.custom_interval,
            schedule.custom_frequency_unit,
        )

    is_active = patch.get("is_active")
    if is_active is False:
        schedule.status = MaintenanceScheduleStatus.INACTIVE
    elif is_active and schedule.status not in LIVE_STATUSES:
        schedule.status = MaintenanceScheduleStatus.ACTIVE

    # Pausing only moves ACTIVE schedules and resuming only moves PAUSED
    # ones; in any other status just the pause bookkeeping is updated.
    is_paused = patch.get("is_paused")
    if is_paused is True and schedule.status == MaintenanceScheduleStatus.ACTIVE:
        schedule.status = MaintenanceScheduleStatus.PAUSED
    elif is_paused is False and schedule.status == MaintenanceScheduleStatus.PAUSED:
        schedule.status = MaintenanceScheduleStatus.ACTIVE

    now_paused = schedule.status == MaintenanceScheduleStatus.PAUSED
    was_paused = previous_status == MaintenanceScheduleStatus.PAUSED
    if (now_paused and not was_paused) or (is_paused is True and not now_paused):
        _stamp_pause(schedule, now, patch.get("paused_by_id") or actor_id)
    elif is_paused is False or (was_paused and not now_paused):
        _clear_pause(schedule)

    schedule.refresh_projections(now)
    schedule.updated_at = now
    schedule = await crud.save(db, schedule)

    if schedule.status != previous_status:
        logger.info(
            "Maintenance schedule status changed",
            extra=_log_extra(
                schedule,
                from_status=previous_status.value,
                to_status=schedule.status.value,
            ),
        )
    return schedule


async def pause_schedule(
    db: AsyncSession,
    tenant_organization_id: UUID,
    schedule_id: UUID,
    reason: str | None = None,
    actor_id: UUID | None = None,
    clock: Clock = system_clock,
) -> MaintenanceSchedule:
    """Pause a schedule. next_due_date is left untouched."""
    data = MaintenanceScheduleUpdate(
        is_paused=True, pause_reason=reason, paused_by_id=actor_id
    )
    return await update_schedule(
        db, tenant_organization_id, schedule_id, data, actor_id, clock=clock
    )


async def resume_schedule(
    db: AsyncSession,
    tenant_organization_id: UUID,
    schedule_id: UUID,
    actor_id: UUID | None = None,
    clock: Clock = system_clock,
) -> MaintenanceSchedule:
    """Resume a paused schedule and clear its pause bookkeeping."""
    data = MaintenanceScheduleUpdate(
        is_paused=False, pause_reason=None, paused_by_id=None
    )
    return await update_schedule(
        db, tenant_organization_id, schedule_id, data, actor_id, clock=clock
    )


async def delete_schedule(
    db: AsyncSession, tenant_organization_id: UUID, schedule_id: UUID
) -> None:
    """Hard delete a schedule."""
    schedule = await get_schedule(db, tenant_organization_id, schedule_id)
    await crud.delete(db, schedule)
    logger.info(
        "Maintenance schedule deleted",
        extra={
            "tenant_organization_id": str(tenant_organization_id),
            "schedule_id": str(schedule_id),
        },
    )


# ----- Hooks for request generation -----


async def record_completion(
    db: AsyncSession,
    tenant_organization_id: UUID,
    schedule_id: UUID,
    maintenance_request_id: UUID | None = None,
    completed_at: datetime | None = None,
    clock: Clock = system_clock,
) -> MaintenanceSchedule:
    """Count one completed occurrence of the schedule."""
    schedule = await get_schedule(db, tenant_organization_id, schedule_id)
    now = as_utc(clock.now())

    schedule.completion_count = (schedule.completion_count or 0) + 1
    schedule.last_completed_date = as_utc(completed_at) if completed_at else now
    if maintenance_request_id is not None:
        schedule.last_maintenance_request_id = maintenance_request_id
    schedule.refresh_projections(now)
    schedule.updated_at = now
    return await crud.save(db, schedule)


async def record_skip(
    db: AsyncSession,
    tenant_organization_id: UUID,
    schedule_id: UUID,
    clock: Clock = system_clock,
) -> MaintenanceSchedule:
    """Count one skipped occurrence of the schedule."""
    schedule = await get_schedule(db, tenant_organization_id, schedule_id)
    now = as_utc(clock.now())

    schedule.skip_count = (schedule.skip_count or 0) + 1
    schedule.refresh_projections(now)
    schedule.updated_at = now
    return await crud.save(db, schedule)


async def refresh_overdue_flags(
    db: AsyncSession,
    tenant_organization_id: UUID,
    clock: Clock = system_clock,
) -> int:
    """Rewrite the persisted projections of every schedule of a tenant.

    Returns:
        Number of schedules whose flags changed
    """
    now = as_utc(clock.now())
    schedules = await crud.list_all(db, tenant_organization_id, now)

    changed = [schedule for schedule in schedules if schedule.refresh_projections(now)]
    await crud.save_many(db, changed)

    logger.info(
        "Schedule overdue flags refreshed",
        extra={
            "tenant_organization_id": str(tenant_organization_id),
            "checked": len(schedules),
            "changed": len(changed),
        },
    )
    return len(changed)
