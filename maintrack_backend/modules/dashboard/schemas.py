"""Dashboard schemas for Maintrack."""

from datetime import datetime

from pydantic import BaseModel, Field


class MonthlyTrend(BaseModel):
    """Request volume and spend for one calendar month."""

    month: str = Field(..., description="Calendar month as YYYY-MM")
    requests: int = 0
    completed: int = 0
    cost: float = 0.0


class DashboardStats(BaseModel):
    """Maintenance statistics of one tenant organization."""

    # Requests
    total_requests: int = 0
    pending_requests: int = 0
    in_progress_requests: int = 0
    completed_requests: int = 0
    overdue_requests: int = 0
    emergency_requests: int = 0

    # Schedules
    total_schedules: int = 0
    active_schedules: int = 0
    overdue_schedules: int = 0
    upcoming_schedules: int = 0

    # Over completed requests with both actual dates
    average_completion_time: float = Field(0.0, description="Hours")
    average_cost: float = 0.0
    average_satisfaction_rating: float = 0.0

    requests_by_category: dict[str, int] = Field(default_factory=dict)
    requests_by_priority: dict[str, int] = Field(default_factory=dict)
    requests_by_status: dict[str, int] = Field(default_factory=dict)
    schedules_by_type: dict[str, int] = Field(default_factory=dict)
    schedules_by_frequency: dict[str, int] = Field(default_factory=dict)

    monthly_trends: list[MonthlyTrend] = Field(default_factory=list)
    generated_at: datetime
