"""
Unit tests for the derived schedule flags and request overdue checks.

Model instances are built in memory; no database is involved.
"""

from datetime import datetime, timezone

from maintrack_backend.modules.maintenance_requests.models import (
    MaintenanceRequest,
    MaintenanceRequestStatus,
)
from maintrack_backend.modules.maintenance_schedules.models import (
    MaintenanceSchedule,
    MaintenanceScheduleStatus,
)

NOW = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


def make_schedule(status, next_due_date) -> MaintenanceSchedule:
    return MaintenanceSchedule(
        status=status,
        next_due_date=next_due_date,
        is_active=False,
        is_paused=False,
        is_overdue=False,
        days_overdue=None,
    )


class TestScheduleProjections:
    """Tests for MaintenanceSchedule.refresh_projections()."""

    def test_active_past_due_is_overdue(self):
        schedule = make_schedule(
            MaintenanceScheduleStatus.ACTIVE, datetime(2024, 1, 10, tzinfo=timezone.utc)
        )
        assert schedule.refresh_projections(NOW) is True
        assert schedule.is_active is True
        assert schedule.is_paused is False
        assert schedule.is_overdue is True
        assert schedule.days_overdue == 5

    def test_paused_is_active_but_never_overdue(self):
        schedule = make_schedule(
            MaintenanceScheduleStatus.PAUSED, datetime(2024, 1, 10, tzinfo=timezone.utc)
        )
        schedule.refresh_projections(NOW)
        assert schedule.is_active is True
        assert schedule.is_paused is True
        assert schedule.is_overdue is False
        assert schedule.days_overdue is None

    def test_inactive_is_not_overdue(self):
        schedule = make_schedule(
            MaintenanceScheduleStatus.INACTIVE, datetime(2024, 1, 1, tzinfo=timezone.utc)
        )
        schedule.refresh_projections(NOW)
        assert schedule.is_active is False
        assert schedule.is_overdue is False

    def test_future_due_is_not_overdue(self):
        schedule = make_schedule(
            MaintenanceScheduleStatus.ACTIVE, datetime(2024, 2, 1, tzinfo=timezone.utc)
        )
        schedule.refresh_projections(NOW)
        assert schedule.is_overdue is False
        assert schedule.days_overdue is None

    def test_overdue_flag_matches_its_definition(self):
        for status in MaintenanceScheduleStatus:
            for due in (
                datetime(2024, 1, 1, tzinfo=timezone.utc),
                datetime(2024, 3, 1, tzinfo=timezone.utc),
            ):
                schedule = make_schedule(status, due)
                schedule.refresh_projections(NOW)
                assert schedule.is_overdue == (
                    schedule.is_active and not schedule.is_paused and due < NOW
                )

    def test_second_refresh_reports_no_change(self):
        schedule = make_schedule(
            MaintenanceScheduleStatus.ACTIVE, datetime(2024, 1, 10, tzinfo=timezone.utc)
        )
        schedule.refresh_projections(NOW)
        assert schedule.refresh_projections(NOW) is False


class TestRequestOverdue:
    """Tests for MaintenanceRequest.is_overdue_at()."""

    def test_open_request_past_due(self):
        request = MaintenanceRequest(
            status=MaintenanceRequestStatus.IN_PROGRESS,
            due_date=datetime(2024, 1, 14, tzinfo=timezone.utc),
        )
        assert request.is_overdue_at(NOW) is True

    def test_closed_request_is_never_overdue(self):
        for status in (
            MaintenanceRequestStatus.COMPLETED,
            MaintenanceRequestStatus.CANCELLED,
        ):
            request = MaintenanceRequest(
                status=status, due_date=datetime(2024, 1, 1, tzinfo=timezone.utc)
            )
            assert request.is_overdue_at(NOW) is False

    def test_no_due_date(self):
        request = MaintenanceRequest(status=MaintenanceRequestStatus.SUBMITTED)
        assert request.is_overdue_at(NOW) is False
