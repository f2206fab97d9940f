"""Provider double-booking detection.

Conflicts are scoped per doctor: two appointments collide only when they
share at least one doctor and their half-open intervals
``[start, start + duration)`` overlap on the same date. Patients are never
checked, so group sessions with several patients and one doctor are legal.
"""

from collections.abc import Callable, Iterable
from datetime import date, datetime, time, timedelta
from uuid import UUID

from clinic_scheduler.schemas.appointments import Appointment

DurationLookup = Callable[[str], int]


def interval(day: date, start: time, duration_minutes: int) -> tuple[datetime, datetime]:
    """Half-open interval covered by an appointment."""
    begin = datetime.combine(day, start)
    return begin, begin + timedelta(minutes=duration_minutes)


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Check if two half-open intervals overlap."""
    return a_start < b_end and a_end > b_start


def find_conflict(
    candidates: Iterable[Appointment],
    doctor_ids: Iterable[UUID],
    day: date,
    start: time,
    duration_minutes: int,
    duration_of: DurationLookup,
    exclude_appointment_id: UUID | None = None,
) -> Appointment | None:
    """
    Find the first existing appointment that double-books one of the doctors.

    Args:
        candidates: Appointments to check against, typically the day's set
        doctor_ids: Doctors of the appointment being booked
        day: Date of the appointment being booked
        start: Start time of the appointment being booked
        duration_minutes: Duration of the appointment being booked
        duration_of: Service type name to duration lookup
        exclude_appointment_id: Appointment being edited; it and its weekly
            occurrences are ignored

    Returns:
        The colliding appointment, or None
    """
    wanted = set(doctor_ids)
    if not wanted:
        return None

    begin, end = interval(day, start, duration_minutes)

    for appointment in candidates:
        if exclude_appointment_id is not None and exclude_appointment_id in (
            appointment.id,
            appointment.recurrence_source_id,
        ):
            continue
        if appointment.date != day:
            continue
        if wanted.isdisjoint(appointment.doctor_ids):
            continue

        other_begin, other_end = interval(
            appointment.date, appointment.time, duration_of(appointment.service_type)
        )
        if overlaps(begin, end, other_begin, other_end):
            return appointment

    return None


def has_conflict(
    candidates: Iterable[Appointment],
    doctor_ids: Iterable[UUID],
    day: date,
    start: time,
    duration_minutes: int,
    duration_of: DurationLookup,
    exclude_appointment_id: UUID | None = None,
) -> bool:
    """Check whether booking the slot would double-book any of the doctors."""
    return (
        find_conflict(
            candidates,
            doctor_ids,
            day,
            start,
            duration_minutes,
            duration_of,
            exclude_appointment_id,
        )
        is not None
    )
