"""Appointment status lifecycle and write planning.

Statuses move ``pending -> confirmed -> completed``; ``cancelled`` can be
reached from ``pending`` and ``confirmed``. Any change of date or time is a
reschedule and always lands on ``pending``, whatever status the caller asked
for. Everything here runs before a write, so a raised exception leaves no
partial state behind.
"""

from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from typing import Any
from uuid import UUID

from clinic_scheduler.core.exceptions import InvalidTransitionException, ValidationException
from clinic_scheduler.schemas.appointments import (
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
    AppointmentUpdate,
    unique_ids,
)
from clinic_scheduler.schemas.notifications import NotificationKind
from clinic_scheduler.services.time_grid import normalize_time, parse_time

ALLOWED_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset(
        {AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.CONFIRMED: frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED})


@dataclass
class AppointmentPlan:
    """Validated target state of a create or update."""

    patient_ids: list[UUID]
    doctor_ids: list[UUID]
    date: date
    time: time
    service_type: str
    status: AppointmentStatus
    kind: NotificationKind
    price: Decimal | None = None
    notes: str | None = None
    is_recurring: bool = False
    rescheduled: bool = False
    links_changed: bool = True
    changed: dict[str, Any] = field(default_factory=dict)

    def row_values(self) -> dict[str, Any]:
        """Column values for the appointments table."""
        values: dict[str, Any] = {
            "patient_id": self.patient_ids[0],
            "doctor_id": self.doctor_ids[0],
            "date": self.date,
            "time": self.time,
            "service_type": self.service_type,
            "notes": self.notes,
            "is_recurring": self.is_recurring,
            "status": self.status.value,
        }
        if self.price is not None:
            values["price"] = self.price
        return values


def validate_required(
    patient_ids: list[UUID],
    doctor_ids: list[UUID],
    day: date | None,
    start: time | str | None,
) -> time:
    """
    Check the fields every appointment must have.

    Returns:
        Start time truncated to minutes

    Raises:
        ValidationException: Naming the first missing or malformed field
    """
    if not patient_ids:
        raise ValidationException("patient_ids", "At least one patient is required")
    if not doctor_ids:
        raise ValidationException("doctor_ids", "At least one doctor is required")
    if day is None:
        raise ValidationException("date", "Date is required")
    parsed = parse_time(start)
    if parsed is None:
        raise ValidationException("time", "Time must be in HH:MM format")
    return parsed


def check_transition(current: AppointmentStatus, requested: AppointmentStatus) -> None:
    """Raise if an explicit status change is not allowed."""
    if requested == current:
        return
    if requested not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionException(current.value, requested.value)


def is_reschedule(previous: Appointment, day: date, start: time | str) -> bool:
    """Date or minute-normalized time differs from the stored values."""
    return previous.date != day or normalize_time(previous.time) != normalize_time(start)


def resolve_status(
    previous: Appointment,
    requested: AppointmentStatus | None,
    rescheduled: bool,
) -> AppointmentStatus:
    """Status to persist for an update."""
    if rescheduled:
        # A completed visit cannot be moved; a cancelled one is revived by moving it.
        if previous.status == AppointmentStatus.COMPLETED:
            raise InvalidTransitionException(previous.status.value, AppointmentStatus.PENDING.value)
        return AppointmentStatus.PENDING
    if requested is None:
        return previous.status
    check_transition(previous.status, requested)
    return requested


def classify(status: AppointmentStatus, rescheduled: bool) -> NotificationKind:
    """Notification kind for an update."""
    if rescheduled:
        return NotificationKind.RESCHEDULE
    if status == AppointmentStatus.CANCELLED:
        return NotificationKind.CANCEL
    return NotificationKind.UPDATE


def plan_create(data: AppointmentCreate) -> AppointmentPlan:
    """Validate a create request."""
    patient_ids = data.requested_patient_ids()
    doctor_ids = data.requested_doctor_ids()
    start = validate_required(patient_ids, doctor_ids, data.date, data.time)

    return AppointmentPlan(
        patient_ids=patient_ids,
        doctor_ids=doctor_ids,
        date=data.date,  # type: ignore[arg-type]
        time=start,
        service_type=data.service_type,
        status=AppointmentStatus.PENDING,
        kind=NotificationKind.CREATE,
        price=data.price,
        notes=data.notes,
        is_recurring=data.is_recurring,
    )


def plan_update(previous: Appointment, data: AppointmentUpdate) -> AppointmentPlan:
    """
    Merge an update request onto the stored appointment.

    Args:
        previous: Canonical stored appointment
        data: Partial update; omitted fields keep their stored values

    Returns:
        Validated plan with the resolved status and notification kind
    """
    requested = data.model_dump(exclude_unset=True)

    patient_ids = (
        unique_ids(data.patient_ids) if data.patient_ids is not None else previous.patient_ids
    )
    doctor_ids = unique_ids(data.doctor_ids) if data.doctor_ids is not None else previous.doctor_ids
    day = data.date if "date" in requested else previous.date
    start_value = data.time if "time" in requested else previous.time
    start = validate_required(patient_ids, doctor_ids, day, start_value)

    rescheduled = is_reschedule(previous, day, start)  # type: ignore[arg-type]
    status = resolve_status(previous, data.status, rescheduled)

    return AppointmentPlan(
        patient_ids=patient_ids,
        doctor_ids=doctor_ids,
        date=day,  # type: ignore[arg-type]
        time=start,
        service_type=data.service_type or previous.service_type,
        status=status,
        kind=classify(status, rescheduled),
        price=data.price if data.price is not None else previous.price,
        notes=data.notes if "notes" in requested else previous.notes,
        is_recurring=(
            data.is_recurring if data.is_recurring is not None else previous.is_recurring
        ),
        rescheduled=rescheduled,
        links_changed=data.patient_ids is not None or data.doctor_ids is not None,
        changed=requested,
    )
