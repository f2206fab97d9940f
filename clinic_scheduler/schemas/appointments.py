"""Appointment schemas for request/response validation."""

from datetime import date as date_type
from datetime import datetime
from datetime import time as time_type
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, computed_field, field_serializer, model_validator

from clinic_scheduler.schemas.notifications import DispatchWarning, NotificationKind


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def unique_ids(ids: list[Any]) -> list[Any]:
    """Drop empty and repeated ids, keeping first-seen order."""
    seen: set[Any] = set()
    result = []
    for item in ids:
        if not item or item in seen:
            continue
        seen.add(item)
        result.append(item)
    return result


def primary(ids: list[UUID]) -> UUID:
    """Return the primary member of a patient or doctor list."""
    return ids[0]


class AppointmentCreate(BaseModel):
    """Schema for creating a new appointment.

    Either the list fields or the legacy single-valued fields may be used;
    required-field checks happen in the service so the offending field can
    be named in the error.
    """

    patient_ids: list[UUID] = Field(default_factory=list)
    doctor_ids: list[UUID] = Field(default_factory=list)
    patient_id: UUID | None = None
    doctor_id: UUID | None = None
    date: date_type | None = None
    time: str | None = Field(None, description="HH:MM; seconds are ignored")
    service_type: str = Field(..., min_length=1, max_length=200)
    price: Decimal | None = Field(None, ge=0)
    notes: str | None = Field(None, max_length=2000)
    is_recurring: bool = False

    def requested_patient_ids(self) -> list[UUID]:
        """Patient list with the legacy field as fallback."""
        return unique_ids(self.patient_ids or [self.patient_id])

    def requested_doctor_ids(self) -> list[UUID]:
        """Doctor list with the legacy field as fallback."""
        return unique_ids(self.doctor_ids or [self.doctor_id])


class AppointmentUpdate(BaseModel):
    """Schema for updating an existing appointment.

    Omitted fields keep their stored value; link lists, when present,
    replace the whole membership.
    """

    patient_ids: list[UUID] | None = None
    doctor_ids: list[UUID] | None = None
    date: date_type | None = None
    time: str | None = None
    service_type: str | None = Field(None, min_length=1, max_length=200)
    price: Decimal | None = Field(None, ge=0)
    notes: str | None = Field(None, max_length=2000)
    is_recurring: bool | None = None
    status: AppointmentStatus | None = None


class AppointmentCancel(BaseModel):
    """Schema for cancelling an appointment."""

    notes: str | None = Field(None, max_length=2000)


class Appointment(BaseModel):
    """Canonical appointment with its patient and doctor lists."""

    id: UUID
    patient_ids: list[UUID]
    doctor_ids: list[UUID]
    date: date_type
    time: time_type
    service_type: str
    price: Decimal = Decimal("0")
    notes: str | None = None
    is_recurring: bool = False
    status: AppointmentStatus = AppointmentStatus.PENDING
    created_at: datetime | None = None
    updated_at: datetime | None = None
    is_virtual: bool = False
    recurrence_source_id: UUID | None = None

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def check_parties(self) -> "Appointment":
        """Lists are deduplicated and never empty."""
        self.patient_ids = unique_ids(self.patient_ids)
        self.doctor_ids = unique_ids(self.doctor_ids)
        if not self.patient_ids:
            raise ValueError("appointment needs at least one patient")
        if not self.doctor_ids:
            raise ValueError("appointment needs at least one doctor")
        return self

    @field_serializer("time")
    def serialize_time(self, value: time_type) -> str:
        return value.strftime("%H:%M")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def primary_patient_id(self) -> UUID:
        return primary(self.patient_ids)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def primary_doctor_id(self) -> UUID:
        return primary(self.doctor_ids)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def occurrence_id(self) -> str:
        """Stored id, or ``<source id>::<date>`` for a weekly occurrence."""
        if self.is_virtual:
            return f"{self.id}::{self.date.isoformat()}"
        return str(self.id)

    @property
    def time_label(self) -> str:
        return self.time.strftime("%H:%M")


class MutationResult(BaseModel):
    """Outcome of a scheduling operation.

    A non-empty ``warnings`` list means the mutation is committed but some
    side effect (outbound message delivery) was incomplete.
    """

    appointment: Appointment
    kind: NotificationKind
    deleted: bool = False
    notification_records: int = 0
    messages_sent: int = 0
    warnings: list[DispatchWarning] = Field(default_factory=list)


class AppointmentListResponse(BaseModel):
    """Schema for appointment list response."""

    total: int
    items: list[Appointment]


class AppointmentFilters(BaseModel):
    """Schema for appointment filtering."""

    from_date: date_type
    to_date: date_type
    doctor_id: UUID | None = None
    patient_id: UUID | None = None
    include_recurring: bool = True
