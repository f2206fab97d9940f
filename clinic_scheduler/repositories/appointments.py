"""Appointment and link persistence using SQLAlchemy Core."""

from collections import defaultdict
from datetime import UTC, date, datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import and_, delete, insert, or_, select, update
from sqlalchemy.engine import Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduler.models.appointments import (
    appointment_doctors,
    appointment_patients,
    appointments,
)
from clinic_scheduler.repositories.base import LinkKind
from clinic_scheduler.schemas.appointments import Appointment, AppointmentStatus

LINK_TABLES = {
    "patient": (appointment_patients, "patient_id"),
    "doctor": (appointment_doctors, "doctor_id"),
}


class SqlAppointmentRepository:
    """Appointment rows plus their patient/doctor links."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session."""
        self.db = db

    async def insert(self, values: dict[str, Any]) -> UUID:
        appointment_id = values.get("id") or uuid4()
        await self.db.execute(insert(appointments).values(**{**values, "id": appointment_id}))
        await self.db.commit()
        return appointment_id

    async def update(self, appointment_id: UUID, values: dict[str, Any]) -> bool:
        stmt = (
            update(appointments)
            .where(appointments.c.id == appointment_id)
            .values(**values, updated_at=datetime.now(UTC))
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount > 0

    async def delete(self, appointment_id: UUID) -> bool:
        stmt = delete(appointments).where(appointments.c.id == appointment_id)
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount > 0

    async def get(self, appointment_id: UUID) -> Appointment | None:
        stmt = select(appointments).where(appointments.c.id == appointment_id)
        result = await self.db.execute(stmt)
        row = result.fetchone()
        if not row:
            return None
        return (await self._with_links([row]))[0]

    async def list_by_date_range(
        self,
        from_date: date,
        to_date: date,
        doctor_id: UUID | None = None,
        patient_id: UUID | None = None,
    ) -> list[Appointment]:
        """
        List appointments dated within a range.

        Args:
            from_date: First date (inclusive)
            to_date: Last date (inclusive)
            doctor_id: Only appointments this doctor is linked to
            patient_id: Only appointments this patient is linked to

        Returns:
            Appointments ordered by date and time
        """
        conditions = [appointments.c.date >= from_date, appointments.c.date <= to_date]
        conditions.extend(self._membership_conditions(doctor_id, patient_id))

        stmt = (
            select(appointments)
            .where(and_(*conditions))
            .order_by(appointments.c.date, appointments.c.time)
        )
        result = await self.db.execute(stmt)
        return await self._with_links(result.fetchall())

    async def list_recurring(
        self,
        until: date,
        doctor_id: UUID | None = None,
        patient_id: UUID | None = None,
    ) -> list[Appointment]:
        conditions = [
            appointments.c.is_recurring.is_(True),
            appointments.c.date <= until,
            appointments.c.status != AppointmentStatus.CANCELLED.value,
        ]
        conditions.extend(self._membership_conditions(doctor_id, patient_id))

        stmt = select(appointments).where(and_(*conditions)).order_by(appointments.c.date)
        result = await self.db.execute(stmt)
        return await self._with_links(result.fetchall())

    @staticmethod
    def _membership_conditions(doctor_id: UUID | None, patient_id: UUID | None) -> list[Any]:
        conditions = []
        if doctor_id:
            linked = select(appointment_doctors.c.appointment_id).where(
                appointment_doctors.c.doctor_id == doctor_id
            )
            conditions.append(
                or_(appointments.c.doctor_id == doctor_id, appointments.c.id.in_(linked))
            )
        if patient_id:
            linked = select(appointment_patients.c.appointment_id).where(
                appointment_patients.c.patient_id == patient_id
            )
            conditions.append(
                or_(appointments.c.patient_id == patient_id, appointments.c.id.in_(linked))
            )
        return conditions

    async def _load_links(self, kind: LinkKind, ids: list[UUID]) -> dict[UUID, list[UUID]]:
        table, column = LINK_TABLES[kind]
        stmt = (
            select(table.c.appointment_id, table.c[column])
            .where(table.c.appointment_id.in_(ids))
            .order_by(table.c.appointment_id, table.c.position)
        )
        result = await self.db.execute(stmt)
        links: dict[UUID, list[UUID]] = defaultdict(list)
        for appointment_id, member_id in result.fetchall():
            links[appointment_id].append(member_id)
        return links

    async def _with_links(self, rows: list[Row]) -> list[Appointment]:
        """Attach link lists; the primary column always leads its list."""
        if not rows:
            return []
        ids = [row.id for row in rows]
        patients = await self._load_links("patient", ids)
        doctors = await self._load_links("doctor", ids)

        return [
            Appointment(
                **{
                    **dict(row._mapping),
                    "patient_ids": [row.patient_id, *patients.get(row.id, [])],
                    "doctor_ids": [row.doctor_id, *doctors.get(row.id, [])],
                }
            )
            for row in rows
        ]


class SqlRelationRepository:
    """Replace-all writes for appointment links."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session."""
        self.db = db

    async def replace_links(self, appointment_id: UUID, kind: LinkKind, ids: list[UUID]) -> None:
        table, column = LINK_TABLES[kind]

        # The delete is committed on its own; a failed insert leaves no links.
        await self.db.execute(delete(table).where(table.c.appointment_id == appointment_id))
        await self.db.commit()

        if not ids:
            return

        rows = [
            {"appointment_id": appointment_id, column: member_id, "position": position}
            for position, member_id in enumerate(ids)
        ]
        try:
            await self.db.execute(insert(table).values(rows))
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def delete_links(self, appointment_id: UUID) -> None:
        for table, _ in LINK_TABLES.values():
            await self.db.execute(delete(table).where(table.c.appointment_id == appointment_id))
        await self.db.commit()
