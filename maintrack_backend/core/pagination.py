"""
Paging for tenant-scoped list queries.
"""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel

from .exceptions import ValidationError

T = TypeVar("T")


class PaginatedResults(BaseModel, Generic[T]):
    """One page of a list query together with its paging metadata."""

    items: list[T]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool

    @classmethod
    def create(
        cls, items: list[T], total: int, page: int, page_size: int
    ) -> "PaginatedResults[T]":
        """
        Wrap a page of items.

        Args:
            items: Items on this page
            total: Matching items across all pages
            page: 1-based page number
            page_size: Requested page size

        Returns:
            PaginatedResults with total_pages and next/previous flags filled in
        """
        total_pages = math.ceil(total / page_size) if total else 0
        return cls(
            items=items,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1,
        )


def check_page_bounds(page: int, page_size: int, max_page_size: int) -> None:
    """
    Reject page numbers below 1 and page sizes outside 1..max_page_size.

    Raises:
        ValidationError: Naming the offending parameter
    """
    if page < 1:
        raise ValidationError("Page must be >= 1", field="page", value=page)
    if not 1 <= page_size <= max_page_size:
        raise ValidationError(
            f"Page size must be between 1 and {max_page_size}",
            field="page_size",
            value=page_size,
        )


def page_offset(page: int, page_size: int) -> int:
    """Row offset of the first item on a 1-based page."""
    return (page - 1) * page_size
