"""Storage and delivery interfaces consumed by the scheduling engine."""

from datetime import date
from decimal import Decimal
from typing import Any, Literal, Protocol
from uuid import UUID

from clinic_scheduler.schemas.appointments import Appointment
from clinic_scheduler.schemas.catalog import Person, ServiceType
from clinic_scheduler.schemas.justifications import Justification
from clinic_scheduler.schemas.notifications import NotificationKind, NotificationRecord

LinkKind = Literal["patient", "doctor"]


class AppointmentRepository(Protocol):
    async def insert(self, values: dict[str, Any]) -> UUID:
        """Insert an appointment row and return its id."""

    async def update(self, appointment_id: UUID, values: dict[str, Any]) -> bool:
        """Update columns of an appointment row."""

    async def delete(self, appointment_id: UUID) -> bool:
        """Remove an appointment row."""

    async def get(self, appointment_id: UUID) -> Appointment | None:
        """Load an appointment with its patient and doctor lists."""

    async def list_by_date_range(
        self,
        from_date: date,
        to_date: date,
        doctor_id: UUID | None = None,
        patient_id: UUID | None = None,
    ) -> list[Appointment]:
        """Appointments dated within ``[from_date, to_date]``, optionally by member."""

    async def list_recurring(
        self,
        until: date,
        doctor_id: UUID | None = None,
        patient_id: UUID | None = None,
    ) -> list[Appointment]:
        """Non-cancelled weekly appointments whose first date is on or before ``until``."""


class RelationRepository(Protocol):
    async def replace_links(self, appointment_id: UUID, kind: LinkKind, ids: list[UUID]) -> None:
        """Delete every link of one kind, then insert ``ids`` in order."""

    async def delete_links(self, appointment_id: UUID) -> None:
        """Delete patient and doctor links of an appointment."""


class NotificationStore(Protocol):
    async def append(self, record: NotificationRecord) -> NotificationRecord:
        """Persist a notification record."""

    async def delete(self, record_id: UUID) -> bool:
        """Delete one record."""

    async def delete_for_appointment(
        self,
        appointment_id: UUID,
        kind: NotificationKind | None = None,
    ) -> int:
        """Delete records of an appointment, optionally only one kind."""

    async def list_by_recipient(self, recipient_id: UUID) -> list[NotificationRecord]:
        """Records addressed to a doctor, newest first."""


class JustificationRepository(Protocol):
    async def insert(self, values: dict[str, Any]) -> Justification:
        """Persist an excused absence."""

    async def get(self, justification_id: UUID) -> Justification | None:
        """Load one excused absence."""

    async def delete(self, justification_id: UUID) -> bool:
        """Delete one excused absence."""

    async def delete_for_appointment(self, appointment_id: UUID) -> int:
        """Delete every excused absence of an appointment; returns the count."""

    async def list_by_doctor(self, doctor_id: UUID) -> list[Justification]:
        """Excused absences authored by a doctor, newest first."""


class ContactResolver(Protocol):
    async def get_people(self, person_ids: list[UUID]) -> list[Person]:
        """Directory entries for the given ids, in the given order."""

    async def resolve_address(self, person_id: UUID) -> str | None:
        """Deliverable address for a person, if any."""


class OutboundMessenger(Protocol):
    async def send(self, address: str, text: str) -> None:
        """Hand a message to the transport; delivery is not tracked."""


class ServiceCatalog(Protocol):
    async def list_service_types(self) -> list[ServiceType]:
        """All bookable services."""

    async def duration_of(self, name: str) -> int:
        """Duration in minutes of a service type."""

    async def price_of(self, name: str) -> Decimal:
        """Default price of a service type."""
