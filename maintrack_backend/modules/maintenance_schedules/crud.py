"""CRUD operations for the maintenance schedule store."""

from datetime import datetime

from sqlalchemy import and_, or_
from sqlalchemy.sql import Select

from ...core.base_crud import BaseCRUD
from .models import LIVE_STATUSES, MaintenanceSchedule, MaintenanceScheduleStatus
from .schemas import MaintenanceScheduleFilters


class MaintenanceScheduleCRUD(
    BaseCRUD[MaintenanceSchedule, MaintenanceScheduleFilters]
):
    """Tenant-scoped store for maintenance schedules.

    Flag filters are evaluated from status and next_due_date rather than the
    persisted projections, so results never depend on a stale sweep.
    """

    search_fields = ["name", "description", "location", "equipment"]
    default_order_by = "next_due_date"
    default_order_desc = False

    def _apply_filters(
        self,
        query: Select,
        filters: MaintenanceScheduleFilters | None,
        now: datetime,
    ) -> Select:
        if filters is None:
            return query

        query = self._apply_in_filter(query, "status", filters.status)
        query = self._apply_in_filter(query, "type", filters.type)
        query = self._apply_in_filter(query, "priority", filters.priority)
        query = self._apply_in_filter(query, "frequency", filters.frequency)
        query = self._apply_equal_filter(query, "property_id", filters.property_id)
        query = self._apply_equal_filter(
            query, "assigned_to_id", filters.assigned_to_id
        )
        query = self._apply_range_filter(
            query,
            "next_due_date",
            filters.next_due_date_from,
            filters.next_due_date_to,
        )

        live = MaintenanceSchedule.status.in_(LIVE_STATUSES)
        paused = MaintenanceSchedule.status == MaintenanceScheduleStatus.PAUSED

        if filters.is_active is not None:
            query = query.where(live if filters.is_active else ~live)
        if filters.is_paused is not None:
            query = query.where(paused if filters.is_paused else ~paused)
        if filters.is_overdue is not None:
            overdue = and_(
                MaintenanceSchedule.status == MaintenanceScheduleStatus.ACTIVE,
                MaintenanceSchedule.next_due_date < now,
            )
            if filters.is_overdue:
                query = query.where(overdue)
            else:
                query = query.where(
                    or_(
                        MaintenanceSchedule.status != MaintenanceScheduleStatus.ACTIVE,
                        MaintenanceSchedule.next_due_date >= now,
                    )
                )
        return query


maintenance_schedule_crud = MaintenanceScheduleCRUD(MaintenanceSchedule)
