"""Outbound message texts for appointment notifications."""

from collections.abc import Iterable, Mapping
from datetime import date, time
from uuid import UUID

from clinic_scheduler.schemas.appointments import Appointment, AppointmentStatus
from clinic_scheduler.schemas.notifications import NotificationKind

GREETING = "Hello, good morning!"
DEFAULT_DOCTOR_NAME = "Doctor"


def format_date_label(day: date) -> str:
    return day.strftime("%d/%m/%Y")


def format_date_time(day: date, start: time) -> str:
    return f"{format_date_label(day)} {start.strftime('%H:%M')}"


def service_label(service_type: str | None) -> str:
    return f"for {service_type}" if service_type else "for a consultation"


def summary_line(appointment: Appointment, doctor_name: str) -> str:
    """One ``HH:MM (Doctor - service)`` entry of a same-day summary."""
    service = f" - {appointment.service_type}" if appointment.service_type else ""
    return f"{appointment.time_label} ({doctor_name}{service})"


def daily_summary(
    patient_id: UUID,
    day: date,
    appointments: Iterable[Appointment],
    doctor_names: Mapping[UUID, str],
) -> list[str]:
    """
    Build the same-day summary lines for a patient.

    Args:
        patient_id: Patient the summary is for
        day: Calendar date to summarize
        appointments: Reloaded appointments of that date, including the
            triggering one
        doctor_names: Names of the primary doctors, by id

    Returns:
        ``HH:MM (Doctor - service)`` lines sorted by time, one per
        non-cancelled appointment of the patient on that date
    """
    seen: set[str] = set()
    selected = []
    for appointment in appointments:
        if appointment.date != day or patient_id not in appointment.patient_ids:
            continue
        if appointment.status == AppointmentStatus.CANCELLED:
            continue
        if appointment.occurrence_id in seen:
            continue
        seen.add(appointment.occurrence_id)
        selected.append(appointment)

    selected.sort(key=lambda appointment: appointment.time)
    return [
        summary_line(
            appointment,
            doctor_names.get(appointment.primary_doctor_id, DEFAULT_DOCTOR_NAME),
        )
        for appointment in selected
    ]


def patient_message(
    kind: NotificationKind,
    appointment: Appointment,
    patient_name: str,
    doctor_names: str,
    previous: Appointment | None = None,
    summary: list[str] | None = None,
) -> str:
    """Message for one patient; several appointments that day render as a summary."""
    when = f"{format_date_label(appointment.date)} at {appointment.time_label}"
    service = service_label(appointment.service_type)

    if kind == NotificationKind.CANCEL:
        return (
            f"{GREETING}\n{patient_name}, your appointment on {when}, "
            f"{service} ({doctor_names}) has been cancelled."
        )

    if summary and len(summary) > 1:
        lines = "\n".join(f"- {line}" for line in summary)
        header = f"{GREETING}\n{patient_name}, "
        if kind == NotificationKind.RESCHEDULE and previous is not None:
            header += (
                f"your appointment was moved from "
                f"{format_date_time(previous.date, previous.time)} to {when}. "
            )
        return (
            f"{header}your appointments on {format_date_label(appointment.date)}:\n"
            f"{lines}\nCan you confirm your attendance?"
        )

    if kind == NotificationKind.RESCHEDULE:
        origin = (
            format_date_time(previous.date, previous.time)
            if previous is not None
            else format_date_time(appointment.date, appointment.time)
        )
        return (
            f"{GREETING}\n{patient_name}, your appointment was rescheduled from {origin} "
            f"to {when}, {service} ({doctor_names})."
        )

    return (
        f"{GREETING}\n{patient_name}, you have an appointment on {when}, "
        f"{service} ({doctor_names}).\nCan you confirm your attendance?"
    )


def doctor_message(
    kind: NotificationKind,
    appointment: Appointment,
    doctor_names: str,
    patient_names: str,
    previous: Appointment | None = None,
) -> str:
    """Message for the doctors; it only describes the triggering appointment."""
    when = f"{format_date_label(appointment.date)} at {appointment.time_label}"
    service = service_label(appointment.service_type)

    if kind == NotificationKind.CANCEL:
        return (
            f"{GREETING}\n{doctor_names}, the appointment on {when}, "
            f"{service} ({patient_names}) has been cancelled."
        )
    if kind == NotificationKind.RESCHEDULE:
        origin = (
            format_date_time(previous.date, previous.time)
            if previous is not None
            else format_date_time(appointment.date, appointment.time)
        )
        return (
            f"{GREETING}\n{doctor_names}, the appointment was rescheduled from {origin} "
            f"to {when}, {service} ({patient_names})."
        )
    return (
        f"{GREETING}\n{doctor_names}, you have an appointment on {when}, "
        f"{service} ({patient_names})."
    )


def excused_absence_message(appointment: Appointment, doctor_name: str, reason: str) -> str:
    """Scheduler notice asking for a new slot after an excused absence."""
    return (
        f"{doctor_name} registered an excused absence for the appointment on "
        f"{format_date_label(appointment.date)} at {appointment.time_label} "
        f"({reason}). Please reschedule it."
    )
