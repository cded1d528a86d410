"""CRUD operations for the maintenance request store."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from ...core.base_crud import BaseCRUD
from .models import CLOSED_STATUSES, MaintenanceRequest, MaintenanceRequestStatus
from .schemas import MaintenanceRequestFilters


class MaintenanceRequestCRUD(BaseCRUD[MaintenanceRequest, MaintenanceRequestFilters]):
    """Tenant-scoped store for maintenance requests."""

    search_fields = ["title", "description", "reference_number"]
    default_order_by = "created_at"
    default_order_desc = True

    def _apply_filters(
        self,
        query: Select,
        filters: MaintenanceRequestFilters | None,
        now: datetime,
    ) -> Select:
        if filters is None:
            return query

        query = self._apply_in_filter(query, "status", filters.status)
        query = self._apply_in_filter(query, "priority", filters.priority)
        query = self._apply_in_filter(query, "type", filters.type)
        query = self._apply_in_filter(query, "category", filters.category)
        query = self._apply_equal_filter(query, "property_id", filters.property_id)
        query = self._apply_equal_filter(query, "assigned_to_id", filters.assigned_to_id)
        query = self._apply_equal_filter(
            query, "requested_by_id", filters.requested_by_id
        )
        query = self._apply_equal_filter(query, "is_emergency", filters.is_emergency)
        query = self._apply_range_filter(
            query, "due_date", filters.due_date_from, filters.due_date_to
        )
        query = self._apply_range_filter(
            query, "created_at", filters.created_from, filters.created_to
        )

        if filters.is_overdue is not None:
            overdue = and_(
                MaintenanceRequest.due_date < now,
                MaintenanceRequest.status.not_in(CLOSED_STATUSES),
            )
            if filters.is_overdue:
                query = query.where(overdue)
            else:
                query = query.where(
                    or_(
                        MaintenanceRequest.due_date.is_(None),
                        MaintenanceRequest.due_date >= now,
                        MaintenanceRequest.status.in_(CLOSED_STATUSES),
                    )
                )
        return query

    async def count_reference_prefix(
        self, db: AsyncSession, tenant_organization_id: UUID, prefix: str
    ) -> int:
        """Count the tenant's requests whose reference number starts with prefix."""
        result = await db.execute(
            select(func.count(MaintenanceRequest.id)).where(
                and_(
                    MaintenanceRequest.tenant_organization_id == tenant_organization_id,
                    MaintenanceRequest.reference_number.like(f"{prefix}%"),
                )
            )
        )
        return result.scalar() or 0

    async def get_completed_with_actuals(
        self, db: AsyncSession, tenant_organization_id: UUID
    ) -> list[MaintenanceRequest]:
        """Completed requests carrying both actual start and completion dates."""
        result = await db.execute(
            select(MaintenanceRequest).where(
                and_(
                    MaintenanceRequest.tenant_organization_id == tenant_organization_id,
                    MaintenanceRequest.status == MaintenanceRequestStatus.COMPLETED,
                    MaintenanceRequest.actual_start_date.is_not(None),
                    MaintenanceRequest.actual_completion_date.is_not(None),
                )
            )
        )
        return list(result.scalars().all())

    async def get_completed_since(
        self, db: AsyncSession, tenant_organization_id: UUID, since: datetime
    ) -> list[MaintenanceRequest]:
        """Completed requests whose completion time is at or after `since`."""
        result = await db.execute(
            select(MaintenanceRequest).where(
                and_(
                    MaintenanceRequest.tenant_organization_id == tenant_organization_id,
                    MaintenanceRequest.status == MaintenanceRequestStatus.COMPLETED,
                    MaintenanceRequest.completed_at >= since,
                )
            )
        )
        return list(result.scalars().all())


maintenance_request_crud = MaintenanceRequestCRUD(MaintenanceRequest)
