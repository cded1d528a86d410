"""
Integration tests for the maintenance schedule lifecycle.

Tests cover:
- next_due_date derivation on create and on recurrence changes
- Pause/resume bookkeeping and status flags
- Completion/skip hooks and the overdue sweep
- Tenant isolation and listing
"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from maintrack_backend.core.exceptions import ResourceNotFoundError, ValidationError
from maintrack_backend.core.recurrence import RecurrenceFrequency
from maintrack_backend.modules.maintenance_schedules import services
from maintrack_backend.modules.maintenance_schedules.models import (
    MaintenanceScheduleStatus,
)
from maintrack_backend.modules.maintenance_schedules.schemas import (
    MaintenanceScheduleFilters,
    MaintenanceScheduleUpdate,
)
from tests.factories import build_schedule_create


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


async def create(db_session, tenant_id, clock, **overrides):
    return await services.create_schedule(
        db_session, tenant_id, build_schedule_create(**overrides), clock=clock
    )


class TestCreateSchedule:
    """Tests for create_schedule()."""

    @pytest.mark.asyncio
    async def test_weekly_from_new_year(self, db_session, tenant_id, clock):
        schedule = await create(
            db_session, tenant_id, clock, start_date=utc(2024, 1, 1), frequency="weekly"
        )

        assert schedule.next_due_date == utc(2024, 1, 8)
        assert schedule.status == MaintenanceScheduleStatus.ACTIVE
        assert schedule.is_active is True
        assert schedule.is_paused is False
        assert schedule.completion_count == 0
        assert schedule.skip_count == 0

    @pytest.mark.asyncio
    async def test_monthly_from_jan_31_clamps(self, db_session, tenant_id, clock):
        schedule = await create(
            db_session, tenant_id, clock, start_date=utc(2024, 1, 31), frequency="monthly"
        )

        assert schedule.next_due_date == utc(2024, 2, 29)

    @pytest.mark.asyncio
    async def test_custom_interval(self, db_session, tenant_id, clock):
        schedule = await create(
            db_session,
            tenant_id,
            clock,
            start_date=utc(2024, 1, 1),
            frequency="custom",
            custom_interval=10,
            custom_frequency_unit="days",
        )

        assert schedule.next_due_date == utc(2024, 1, 11)

    @pytest.mark.asyncio
    async def test_custom_without_interval_is_due_at_start(
        self, db_session, tenant_id, clock
    ):
        schedule = await create(
            db_session, tenant_id, clock, start_date=utc(2024, 3, 1), frequency="custom"
        )

        assert schedule.next_due_date == utc(2024, 3, 1)

    @pytest.mark.asyncio
    async def test_overdue_flags_computed_on_create(self, db_session, tenant_id, clock):
        # Clock is 2024-01-15; weekly from Jan 1 was due Jan 8
        schedule = await create(db_session, tenant_id, clock)

        assert schedule.is_overdue is True
        assert schedule.days_overdue == 7

    @pytest.mark.asyncio
    async def test_naive_start_date_is_treated_as_utc(
        self, db_session, tenant_id, clock
    ):
        schedule = await create(
            db_session, tenant_id, clock, start_date=datetime(2024, 2, 1, 9, 0)
        )

        assert schedule.start_date == utc(2024, 2, 1, 9, 0)
        assert schedule.next_due_date == utc(2024, 2, 8, 9, 0)

    @pytest.mark.asyncio
    async def test_end_before_start_is_rejected(self, db_session, tenant_id, clock):
        with pytest.raises(ValidationError):
            await create(
                db_session,
                tenant_id,
                clock,
                start_date=utc(2024, 2, 1),
                end_date=utc(2024, 1, 1),
            )


class TestUpdateSchedule:
    """Tests for update_schedule()."""

    @pytest.mark.asyncio
    async def test_frequency_change_recomputes_from_start_date(
        self, db_session, tenant_id, clock
    ):
        schedule = await create(
            db_session, tenant_id, clock, start_date=utc(2024, 1, 1), frequency="weekly"
        )
        await services.record_completion(db_session, tenant_id, schedule.id, clock=clock)

        schedule = await services.update_schedule(
            db_session,
            tenant_id,
            schedule.id,
            MaintenanceScheduleUpdate(frequency=RecurrenceFrequency.MONTHLY),
            clock=clock,
        )

        assert schedule.next_due_date == utc(2024, 2, 1)

    @pytest.mark.asyncio
    async def test_start_date_change_recomputes(self, db_session, tenant_id, clock):
        schedule = await create(db_session, tenant_id, clock)
        schedule = await services.update_schedule(
            db_session, tenant_id, schedule.id, {"start_date": utc(2024, 3, 4)}, clock=clock
        )

        assert schedule.next_due_date == utc(2024, 3, 11)
        assert schedule.is_overdue is False
        assert schedule.days_overdue is None

    @pytest.mark.asyncio
    async def test_unrelated_change_keeps_next_due_date(
        self, db_session, tenant_id, clock
    ):
        schedule = await create(db_session, tenant_id, clock)
        before = schedule.next_due_date
        schedule = await services.update_schedule(
            db_session, tenant_id, schedule.id, {"name": "Filter swap"}, clock=clock
        )

        assert schedule.name == "Filter swap"
        assert schedule.next_due_date == before

    @pytest.mark.asyncio
    async def test_next_due_date_is_not_patchable(self, db_session, tenant_id, clock):
        schedule = await create(db_session, tenant_id, clock)
        before = schedule.next_due_date
        schedule = await services.update_schedule(
            db_session,
            tenant_id,
            schedule.id,
            {"next_due_date": utc(2030, 1, 1)},
            clock=clock,
        )

        assert schedule.next_due_date == before

    @pytest.mark.asyncio
    async def test_deactivate_and_reactivate(self, db_session, tenant_id, clock):
        schedule = await create(db_session, tenant_id, clock)
        schedule = await services.update_schedule(
            db_session, tenant_id, schedule.id, {"is_active": False}, clock=clock
        )
        assert schedule.status == MaintenanceScheduleStatus.INACTIVE
        assert schedule.is_active is False
        assert schedule.is_overdue is False

        schedule = await services.update_schedule(
            db_session, tenant_id, schedule.id, {"is_active": True}, clock=clock
        )
        assert schedule.status == MaintenanceScheduleStatus.ACTIVE
        assert schedule.is_active is True

    @pytest.mark.asyncio
    async def test_status_patch_rewrites_flags(self, db_session, tenant_id, clock):
        schedule = await create(db_session, tenant_id, clock)
        schedule = await services.update_schedule(
            db_session, tenant_id, schedule.id, {"status": "completed"}, clock=clock
        )

        assert schedule.is_active is False
        assert schedule.is_overdue is False


class TestPauseResume:
    """Tests for pause_schedule() and resume_schedule()."""

    @pytest.mark.asyncio
    async def test_pause_then_resume(self, db_session, tenant_id, actor_id, clock):
        schedule = await create(db_session, tenant_id, clock)
        due = schedule.next_due_date

        schedule = await services.pause_schedule(
            db_session, tenant_id, schedule.id, reason="Tenant away", actor_id=actor_id, clock=clock
        )
        assert schedule.status == MaintenanceScheduleStatus.PAUSED
        assert schedule.is_paused is True
        assert schedule.is_active is True
        assert schedule.is_overdue is False
        assert schedule.pause_reason == "Tenant away"
        assert schedule.paused_by_id == actor_id
        assert schedule.paused_at == clock.now()
        assert schedule.next_due_date == due

        clock.advance(days=3)
        schedule = await services.resume_schedule(
            db_session, tenant_id, schedule.id, actor_id=actor_id, clock=clock
        )
        assert schedule.status == MaintenanceScheduleStatus.ACTIVE
        assert schedule.is_paused is False
        assert schedule.pause_reason is None
        assert schedule.paused_by_id is None
        assert schedule.paused_at is None
        assert schedule.next_due_date == due
        assert schedule.is_overdue is True

    @pytest.mark.asyncio
    async def test_pause_via_update_uses_actor(self, db_session, tenant_id, actor_id, clock):
        schedule = await create(db_session, tenant_id, clock)
        schedule = await services.update_schedule(
            db_session, tenant_id, schedule.id, {"is_paused": True}, actor_id, clock=clock
        )

        assert schedule.paused_by_id == actor_id

    @pytest.mark.asyncio
    async def test_resume_leaves_cancelled_schedule_cancelled(
        self, db_session, tenant_id, actor_id, clock
    ):
        schedule = await create(db_session, tenant_id, clock)
        await services.update_schedule(
            db_session, tenant_id, schedule.id, {"status": "cancelled"}, clock=clock
        )

        schedule = await services.resume_schedule(
            db_session, tenant_id, schedule.id, actor_id=actor_id, clock=clock
        )

        assert schedule.status == MaintenanceScheduleStatus.CANCELLED
        assert schedule.is_active is False
        assert schedule.paused_at is None

    @pytest.mark.asyncio
    async def test_pause_keeps_completed_status(
        self, db_session, tenant_id, actor_id, clock
    ):
        schedule = await create(db_session, tenant_id, clock)
        await services.update_schedule(
            db_session, tenant_id, schedule.id, {"status": "completed"}, clock=clock
        )

        schedule = await services.pause_schedule(
            db_session, tenant_id, schedule.id, reason="Audit", actor_id=actor_id, clock=clock
        )

        assert schedule.status == MaintenanceScheduleStatus.COMPLETED
        assert schedule.is_active is False
        assert schedule.is_paused is False
        assert schedule.paused_at == clock.now()
        assert schedule.paused_by_id == actor_id
        assert schedule.pause_reason == "Audit"

    @pytest.mark.asyncio
    async def test_status_patch_to_paused_stamps_pause(
        self, db_session, tenant_id, actor_id, clock
    ):
        schedule = await create(db_session, tenant_id, clock)

        schedule = await services.update_schedule(
            db_session, tenant_id, schedule.id, {"status": "paused"}, actor_id, clock=clock
        )

        assert schedule.is_paused is True
        assert schedule.paused_at == clock.now()
        assert schedule.paused_by_id == actor_id

    @pytest.mark.asyncio
    async def test_status_patch_out_of_paused_clears_pause(
        self, db_session, tenant_id, actor_id, clock
    ):
        schedule = await create(db_session, tenant_id, clock)
        await services.pause_schedule(
            db_session, tenant_id, schedule.id, reason="Tenant away", actor_id=actor_id, clock=clock
        )

        schedule = await services.update_schedule(
            db_session, tenant_id, schedule.id, {"status": "active"}, actor_id, clock=clock
        )

        assert schedule.status == MaintenanceScheduleStatus.ACTIVE
        assert schedule.pause_reason is None
        assert schedule.paused_at is None
        assert schedule.paused_by_id is None


class TestHooks:
    """Tests for the completion/skip hooks and the overdue sweep."""

    @pytest.mark.asyncio
    async def test_record_completion(self, db_session, tenant_id, clock):
        schedule = await create(db_session, tenant_id, clock)
        due = schedule.next_due_date
        request_id = uuid4()

        schedule = await services.record_completion(
            db_session, tenant_id, schedule.id, maintenance_request_id=request_id, clock=clock
        )
        schedule = await services.record_completion(
            db_session, tenant_id, schedule.id, clock=clock
        )

        assert schedule.completion_count == 2
        assert schedule.last_completed_date == clock.now()
        assert schedule.last_maintenance_request_id == request_id
        assert schedule.next_due_date == due

    @pytest.mark.asyncio
    async def test_record_skip(self, db_session, tenant_id, clock):
        schedule = await create(db_session, tenant_id, clock)
        schedule = await services.record_skip(db_session, tenant_id, schedule.id, clock=clock)

        assert schedule.skip_count == 1
        assert schedule.completion_count == 0

    @pytest.mark.asyncio
    async def test_refresh_overdue_flags(self, db_session, tenant_id, clock):
        upcoming = await create(
            db_session, tenant_id, clock, start_date=utc(2024, 1, 14), frequency="weekly"
        )
        already_overdue = await create(db_session, tenant_id, clock)
        assert upcoming.is_overdue is False

        clock.advance(days=10)
        changed = await services.refresh_overdue_flags(db_session, tenant_id, clock=clock)

        # Both gain or update their overdue flags
        assert changed == 2
        upcoming = await services.get_schedule(db_session, tenant_id, upcoming.id)
        already_overdue = await services.get_schedule(db_session, tenant_id, already_overdue.id)
        assert upcoming.is_overdue is True
        assert upcoming.days_overdue == 4
        assert already_overdue.days_overdue == 17

        assert await services.refresh_overdue_flags(db_session, tenant_id, clock=clock) == 0


class TestScheduleQueries:
    """Tests for get/list/delete with tenant scoping."""

    @pytest.mark.asyncio
    async def test_other_tenant_is_not_found(
        self, db_session, tenant_id, other_tenant_id, clock
    ):
        schedule = await create(db_session, tenant_id, clock)

        with pytest.raises(ResourceNotFoundError):
            await services.get_schedule(db_session, other_tenant_id, schedule.id)
        with pytest.raises(ResourceNotFoundError):
            await services.pause_schedule(db_session, other_tenant_id, schedule.id, clock=clock)

    @pytest.mark.asyncio
    async def test_list_filters_and_default_order(self, db_session, tenant_id, clock):
        later = await create(
            db_session, tenant_id, clock, name="Roof inspection", start_date=utc(2024, 6, 1),
            frequency="annually", type="inspection", tags=["roof"],
        )
        sooner = await create(db_session, tenant_id, clock, name="Boiler service")
        paused = await create(
            db_session, tenant_id, clock, name="Gutter clean", start_date=utc(2024, 2, 1)
        )
        await services.pause_schedule(db_session, tenant_id, paused.id, clock=clock)

        async def names(**filters):
            page = await services.list_schedules(
                db_session, tenant_id, MaintenanceScheduleFilters(**filters), clock=clock
            )
            return [item.name for item in page.items]

        assert await names() == ["Boiler service", "Gutter clean", "Roof inspection"]
        assert await names(is_paused=True) == ["Gutter clean"]
        assert await names(is_overdue=True) == [sooner.name]
        assert await names(type=["inspection"]) == [later.name]
        assert await names(tags=["roof"]) == [later.name]
        assert await names(search="boiler") == ["Boiler service"]
        assert await names(
            next_due_date_from=utc(2024, 2, 1), next_due_date_to=utc(2024, 2, 29)
        ) == ["Gutter clean"]

    @pytest.mark.asyncio
    async def test_delete(self, db_session, tenant_id, clock):
        schedule = await create(db_session, tenant_id, clock)
        await services.delete_schedule(db_session, tenant_id, schedule.id)

        with pytest.raises(ResourceNotFoundError):
            await services.get_schedule(db_session, tenant_id, schedule.id)
