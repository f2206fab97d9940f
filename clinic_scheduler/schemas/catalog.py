"""Service catalog and contact directory schemas."""

from datetime import date as date_type
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class ServiceType(BaseModel):
    """Bookable service with its default duration and price."""

    id: UUID | None = None
    name: str
    duration_minutes: int = Field(..., gt=0)
    price: Decimal = Decimal("0")
    category: str | None = None

    model_config = {"from_attributes": True}


class Person(BaseModel):
    """Patient or doctor as seen by the notification layer."""

    id: UUID
    name: str
    role: str
    phone: str | None = None

    model_config = {"from_attributes": True}


class SlotsResponse(BaseModel):
    """Legal booking times for a date."""

    date: date_type | str
    slots: list[str]
