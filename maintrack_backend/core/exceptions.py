"""
Exception hierarchy shared by the maintenance modules.

Services raise these; callers map them to their own transport.
"""

from typing import Any


class MaintrackException(Exception):
    """Root of every error raised by the maintenance engine."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ResourceNotFoundError(MaintrackException):
    """The entity does not exist, or belongs to another tenant organization.

    The two cases produce the same error so tenants cannot discover each
    other's ids.
    """

    def __init__(
        self,
        resource_type: str,
        identifier: Any,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(f"{resource_type} '{identifier}' not found", details)
        self.resource_type = resource_type
        self.identifier = identifier


class ValidationError(MaintrackException):
    """Input rejected by a service, e.g. a bad parent link or page size."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(f"{field}: {message}" if field else message, details)
        self.field = field
        self.value = value


class BusinessLogicError(MaintrackException):
    pass


class InvalidStateError(BusinessLogicError):
    """An entity cannot move from its current state to the requested one.

    Request status changes are not checked against a transition table yet,
    so nothing raises this today.
    """

    def __init__(
        self,
        resource_type: str,
        current_state: str,
        requested_state: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            f"{resource_type} cannot move from '{current_state}' to '{requested_state}'",
            details,
        )
        self.resource_type = resource_type
        self.current_state = current_state
        self.requested_state = requested_state


class DatabaseError(MaintrackException):
    """A commit failed and the session was rolled back."""
