"""Weekly recurrence expansion.

Appointments flagged ``is_recurring`` repeat every 7 days. Occurrences are
virtual: they are computed on read, carry the source appointment's id, and
are never written back.
"""

from collections.abc import Iterable
from datetime import date, timedelta

from clinic_scheduler.schemas.appointments import Appointment, AppointmentStatus

WEEK = timedelta(days=7)


def recurrence_horizon(today: date, end_date: date | None, min_days: int = 7) -> date:
    """Last date occurrences are generated for."""
    if end_date is not None and end_date > today:
        return end_date
    return today + timedelta(days=min_days)


def occurrence_key(appointment: Appointment, day: date | None = None) -> tuple:
    return (
        day or appointment.date,
        appointment.time,
        appointment.primary_doctor_id,
        appointment.primary_patient_id,
    )


def _first_occurrence(base: date, start: date) -> date:
    """First weekly date after ``base`` that is on or after ``start``."""
    first = base + WEEK
    if first >= start:
        return first
    weeks_behind = -(-(start - first).days // 7)
    return first + WEEK * weeks_behind


def expand_weekly(
    appointments: Iterable[Appointment],
    start: date,
    end: date,
    horizon: date,
    not_before: date | None = None,
) -> list[Appointment]:
    """
    Return stored appointments and weekly occurrences falling within a window.

    Args:
        appointments: Stored appointments, including recurring sources
        start: First date of the window
        end: Last date of the window (inclusive)
        horizon: No occurrence is generated after this date
        not_before: No occurrence is generated before this date (usually today)

    Returns:
        Stored and virtual appointments dated within the window, sorted by
        date and time
    """
    stored = list(appointments)
    seen = {occurrence_key(appointment) for appointment in stored}
    expanded = list(stored)
    first = max(start, not_before) if not_before else start
    last = min(end, horizon)

    for source in stored:
        if not source.is_recurring or source.is_virtual:
            continue
        if source.status == AppointmentStatus.CANCELLED:
            continue

        day = _first_occurrence(source.date, first)
        while day <= last:
            key = occurrence_key(source, day)
            if key not in seen:
                seen.add(key)
                expanded.append(
                    source.model_copy(
                        update={
                            "date": day,
                            "status": AppointmentStatus.CONFIRMED,
                            "is_virtual": True,
                            "recurrence_source_id": source.id,
                        }
                    )
                )
            day += WEEK

    in_window = [appointment for appointment in expanded if start <= appointment.date <= end]
    return sorted(in_window, key=lambda appointment: (appointment.date, appointment.time))


def is_occurrence_id(value: str) -> bool:
    """Check whether an id addresses a virtual weekly occurrence."""
    return "::" in value
