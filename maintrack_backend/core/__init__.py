"""Core infrastructure for Maintrack backend."""

from .base_crud import BaseCRUD
from .clock import Clock, SystemClock, system_clock
from .database_types import UUID, UTCDateTime
from .exceptions import (
    BusinessLogicError,
    DatabaseError,
    InvalidStateError,
    MaintrackException,
    ResourceNotFoundError,
    ValidationError,
)
from .pagination import PaginatedResults, check_page_bounds, page_offset

__all__ = [
    "BaseCRUD",
    "Clock",
    "SystemClock",
    "system_clock",
    "UUID",
    "UTCDateTime",
    "MaintrackException",
    "ResourceNotFoundError",
    "ValidationError",
    "BusinessLogicError",
    "InvalidStateError",
    "DatabaseError",
    "PaginatedResults",
    "check_page_bounds",
    "page_offset",
]
