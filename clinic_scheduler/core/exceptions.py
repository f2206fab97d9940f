"""Custom application exceptions."""

from typing import Any
from uuid import UUID


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

    @property
    def details(self) -> dict[str, Any]:
        """Extra fields rendered alongside the error message."""
        return {}


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class ForbiddenException(AppException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Forbidden"):
        """Initialize with 403 status code."""
        super().__init__(message, status_code=403)


class ConflictException(AppException):
    """Provider double-booking detected before any write."""

    def __init__(
        self,
        conflicting_appointment_id: UUID | str,
        message: str = "Provider already has an appointment in this time slot",
    ):
        """Initialize with 409 status code and the colliding appointment."""
        self.conflicting_appointment_id = str(conflicting_appointment_id)
        super().__init__(message, status_code=409)

    @property
    def details(self) -> dict[str, Any]:
        return {"conflicting_appointment_id": self.conflicting_appointment_id}


class ValidationException(AppException):
    """Missing or malformed required field; raised before any write."""

    def __init__(self, field: str, message: str | None = None):
        """Initialize with 422 status code and the offending field."""
        self.field = field
        super().__init__(message or f"Invalid or missing field: {field}", status_code=422)

    @property
    def details(self) -> dict[str, Any]:
        return {"field": self.field}


class InvalidTransitionException(AppException):
    """Requested status change is not allowed from the current status."""

    def __init__(self, current: str, requested: str):
        """Initialize with 409 status code."""
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot change appointment status from '{current}' to '{requested}'",
            status_code=409,
        )

    @property
    def details(self) -> dict[str, Any]:
        return {"current_status": self.current, "requested_status": self.requested}


class RelationSyncException(AppException):
    """Link replacement failed after the appointment row was committed."""

    def __init__(self, appointment_id: UUID | str, kind: str, reason: str = ""):
        """Initialize with 500 status code."""
        self.appointment_id = str(appointment_id)
        self.kind = kind
        self.reason = reason
        message = f"Failed to sync {kind} links for appointment {appointment_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, status_code=500)

    @property
    def details(self) -> dict[str, Any]:
        # The appointment row exists; callers must retry the link sync or fix it by hand.
        return {"appointment_id": self.appointment_id, "kind": self.kind, "degraded": True}
