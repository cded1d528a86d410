"""Schemas shared by the maintenance modules."""

from enum import Enum

from pydantic import BaseModel, Field


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class PaginationParams(BaseModel):
    """Which page of a list query to return and how to order it.

    Unset sort options fall back to the store's default ordering
    (newest first for requests, soonest due first for schedules).
    """

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1)
    sort_field: str | None = Field(default=None, description="Model column name")
    sort_direction: SortDirection | None = None

    def resolve_sort(self, default_field: str, default_desc: bool) -> tuple[str, bool]:
        """Sort column and descending flag, filling gaps from the defaults."""
        field = self.sort_field or default_field
        if self.sort_direction is None:
            return field, default_desc
        return field, self.sort_direction == SortDirection.DESC
