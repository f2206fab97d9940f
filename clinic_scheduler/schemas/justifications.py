"""Excused absence schemas."""

from datetime import date as date_type
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from clinic_scheduler.schemas.appointments import MutationResult


class JustificationCreate(BaseModel):
    """Schema for a doctor marking an appointment as an excused absence."""

    appointment_id: UUID
    doctor_id: UUID
    reason: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=10, max_length=2000)
    date: date_type


class Justification(BaseModel):
    """Stored excused absence."""

    id: UUID
    appointment_id: UUID
    doctor_id: UUID
    reason: str
    description: str
    date: date_type
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class JustificationListResponse(BaseModel):
    """Schema for a doctor's justifications."""

    total: int
    items: list[Justification]


class JustificationResult(BaseModel):
    """Stored excused absence with the cancellation it caused."""

    justification: Justification
    cancellation: MutationResult
    reschedule_records: int = 0
