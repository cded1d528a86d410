"""Dashboard aggregation services.

Everything is recomputed from the store on each call; nothing is cached.
"""

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from uuid import UUID

from dateutil.relativedelta import relativedelta
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...core.clock import Clock, system_clock
from ...core.logging import get_logger
from ...core.utils import as_utc
from ..maintenance_requests.crud import maintenance_request_crud
from ..maintenance_requests.models import CLOSED_STATUSES, MaintenanceRequestStatus
from ..maintenance_requests.schemas import MaintenanceRequestFilters
from ..maintenance_schedules.crud import maintenance_schedule_crud
from ..maintenance_schedules.models import MaintenanceScheduleStatus
from ..maintenance_schedules.schemas import MaintenanceScheduleFilters
from .schemas import DashboardStats, MonthlyTrend

logger = get_logger(__name__)

PENDING_STATUSES = [
    MaintenanceRequestStatus.SUBMITTED,
    MaintenanceRequestStatus.ACKNOWLEDGED,
]
IN_PROGRESS_STATUSES = [
    MaintenanceRequestStatus.ASSIGNED,
    MaintenanceRequestStatus.IN_PROGRESS,
]
OPEN_STATUSES = [s for s in MaintenanceRequestStatus if s not in CLOSED_STATUSES]


def _average(values: list[float]) -> float:
    if not values:
        return 0.0
    return round(sum(values) / len(values), 2)


def _month_start(value: datetime) -> datetime:
    return datetime(value.year, value.month, 1, tzinfo=timezone.utc)


async def _request_counts(
    db: AsyncSession, tenant_organization_id: UUID, now: datetime
) -> dict[str, int]:
    crud = maintenance_request_crud

    async def count(filters: MaintenanceRequestFilters | None = None) -> int:
        return await crud.count(db, tenant_organization_id, now, filters)

    return {
        "total_requests": await count(),
        "pending_requests": await count(
            MaintenanceRequestFilters(status=PENDING_STATUSES)
        ),
        "in_progress_requests": await count(
            MaintenanceRequestFilters(status=IN_PROGRESS_STATUSES)
        ),
        "completed_requests": await count(
            MaintenanceRequestFilters(status=[MaintenanceRequestStatus.COMPLETED])
        ),
        "overdue_requests": await count(MaintenanceRequestFilters(is_overdue=True)),
        "emergency_requests": await count(
            MaintenanceRequestFilters(is_emergency=True, status=OPEN_STATUSES)
        ),
    }


async def _schedule_counts(
    db: AsyncSession, tenant_organization_id: UUID, now: datetime
) -> dict[str, int]:
    crud = maintenance_schedule_crud

    async def count(filters: MaintenanceScheduleFilters | None = None) -> int:
        return await crud.count(db, tenant_organization_id, now, filters)

    window_end = now + timedelta(days=settings.upcoming_schedule_window_days)
    return {
        "total_schedules": await count(),
        "active_schedules": await count(
            MaintenanceScheduleFilters(status=[MaintenanceScheduleStatus.ACTIVE])
        ),
        "overdue_schedules": await count(MaintenanceScheduleFilters(is_overdue=True)),
        "upcoming_schedules": await count(
            MaintenanceScheduleFilters(
                is_active=True, next_due_date_from=now, next_due_date_to=window_end
            )
        ),
    }


async def _performance(
    db: AsyncSession, tenant_organization_id: UUID
) -> dict[str, float]:
    completed = await maintenance_request_crud.get_completed_with_actuals(
        db, tenant_organization_id
    )

    hours = [
        (r.actual_completion_date - r.actual_start_date).total_seconds() / 3600
        for r in completed
    ]
    # Missing cost or rating counts as 0; the divisor is the whole set
    costs = [float(r.actual_cost or 0) for r in completed]
    ratings = [float(r.satisfaction_rating or 0) for r in completed]
    return {
        "average_completion_time": _average(hours),
        "average_cost": _average(costs),
        "average_satisfaction_rating": _average(ratings),
    }


async def _monthly_trends(
    db: AsyncSession, tenant_organization_id: UUID, now: datetime
) -> list[MonthlyTrend]:
    """Oldest month first, ending with the current month."""
    months = settings.dashboard_trend_months
    if months < 1:
        return []

    window_start = _month_start(now) - relativedelta(months=months - 1)
    trends = {}
    for offset in range(months):
        key = (window_start + relativedelta(months=offset)).strftime("%Y-%m")
        trends[key] = MonthlyTrend(month=key)

    created = await maintenance_request_crud.list_all(
        db,
        tenant_organization_id,
        now,
        MaintenanceRequestFilters(created_from=window_start),
    )
    for request in created:
        key = request.created_at.strftime("%Y-%m")
        if key in trends:
            trends[key].requests += 1

    completed_costs: dict[str, float] = defaultdict(float)
    completed = await maintenance_request_crud.get_completed_since(
        db, tenant_organization_id, window_start
    )
    for request in completed:
        key = request.completed_at.strftime("%Y-%m")
        if key not in trends:
            continue
        trends[key].completed += 1
        if request.actual_cost is not None:
            completed_costs[key] += float(request.actual_cost)

    for key, cost in completed_costs.items():
        trends[key].cost = round(cost, 2)
    return list(trends.values())


async def get_dashboard(
    db: AsyncSession,
    tenant_organization_id: UUID,
    clock: Clock = system_clock,
) -> DashboardStats:
    """Compute the maintenance dashboard of a tenant organization."""
    now = as_utc(clock.now())

    stats = DashboardStats(
        **await _request_counts(db, tenant_organization_id, now),
        **await _schedule_counts(db, tenant_organization_id, now),
        **await _performance(db, tenant_organization_id),
        requests_by_category=await maintenance_request_crud.count_by_field(
            db, tenant_organization_id, "category"
        ),
        requests_by_priority=await maintenance_request_crud.count_by_field(
            db, tenant_organization_id, "priority"
        ),
        requests_by_status=await maintenance_request_crud.count_by_field(
            db, tenant_organization_id, "status"
        ),
        schedules_by_type=await maintenance_schedule_crud.count_by_field(
            db, tenant_organization_id, "type"
        ),
        schedules_by_frequency=await maintenance_schedule_crud.count_by_field(
            db, tenant_organization_id, "frequency"
        ),
        monthly_trends=await _monthly_trends(db, tenant_organization_id, now),
        generated_at=now,
    )

    logger.debug(
        "Dashboard computed",
        extra={
            "tenant_organization_id": str(tenant_organization_id),
            "total_requests": stats.total_requests,
            "total_schedules": stats.total_schedules,
        },
    )
    return stats
