"""Pagination and sorting schemas used by every list operation."""

from .schemas import PaginationParams, SortDirection

__all__ = ["PaginationParams", "SortDirection"]
