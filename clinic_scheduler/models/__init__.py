"""Database models."""

from clinic_scheduler.models.appointments import (
    appointment_doctors,
    appointment_patients,
    appointments,
    metadata,
)
from clinic_scheduler.models.justifications import justifications
from clinic_scheduler.models.notifications import notification_records
from clinic_scheduler.models.people import people
from clinic_scheduler.models.service_types import service_types

__all__ = [
    "appointment_doctors",
    "appointment_patients",
    "appointments",
    "justifications",
    "metadata",
    "notification_records",
    "people",
    "service_types",
]
