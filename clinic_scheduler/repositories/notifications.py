"""Notification record and justification persistence."""

from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import and_, delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduler.models.justifications import justifications
from clinic_scheduler.models.notifications import notification_records
from clinic_scheduler.schemas.justifications import Justification
from clinic_scheduler.schemas.notifications import NotificationKind, NotificationRecord


class SqlNotificationStore:
    """Append/delete store for doctor notification records."""

    def __init__(self, db: AsyncSession):
        """Initialize store with database session."""
        self.db = db

    async def append(self, record: NotificationRecord) -> NotificationRecord:
        await self.db.execute(
            insert(notification_records).values(
                id=record.id,
                recipient_id=record.recipient_id,
                appointment_id=record.appointment_id,
                kind=record.kind.value,
                message=record.message,
                created_at=record.created_at,
            )
        )
        await self.db.commit()
        return record

    async def get(self, record_id: UUID) -> NotificationRecord | None:
        result = await self.db.execute(
            select(notification_records).where(notification_records.c.id == record_id)
        )
        row = result.fetchone()
        return NotificationRecord.model_validate(dict(row._mapping)) if row else None

    async def delete(self, record_id: UUID) -> bool:
        result = await self.db.execute(
            delete(notification_records).where(notification_records.c.id == record_id)
        )
        await self.db.commit()
        return result.rowcount > 0

    async def delete_for_appointment(
        self,
        appointment_id: UUID,
        kind: NotificationKind | None = None,
    ) -> int:
        """
        Delete the records attached to an appointment.

        Args:
            appointment_id: Appointment the records refer to
            kind: Only delete records of this kind

        Returns:
            Number of records deleted
        """
        conditions = [notification_records.c.appointment_id == appointment_id]
        if kind is not None:
            conditions.append(notification_records.c.kind == kind.value)

        result = await self.db.execute(delete(notification_records).where(and_(*conditions)))
        await self.db.commit()
        return result.rowcount

    async def list_by_recipient(self, recipient_id: UUID) -> list[NotificationRecord]:
        stmt = (
            select(notification_records)
            .where(notification_records.c.recipient_id == recipient_id)
            .order_by(notification_records.c.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return [NotificationRecord.model_validate(dict(row._mapping)) for row in result.fetchall()]


class SqlJustificationRepository:
    """Excused absence records."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session."""
        self.db = db

    async def insert(self, values: dict[str, Any]) -> Justification:
        justification_id = values.get("id") or uuid4()
        await self.db.execute(insert(justifications).values(**{**values, "id": justification_id}))
        await self.db.commit()

        # Fetch created record
        result = await self.db.execute(
            select(justifications).where(justifications.c.id == justification_id)
        )
        return Justification.model_validate(dict(result.first()._mapping))

    async def get(self, justification_id: UUID) -> Justification | None:
        result = await self.db.execute(
            select(justifications).where(justifications.c.id == justification_id)
        )
        row = result.fetchone()
        return Justification.model_validate(dict(row._mapping)) if row else None

    async def delete(self, justification_id: UUID) -> bool:
        result = await self.db.execute(
            delete(justifications).where(justifications.c.id == justification_id)
        )
        await self.db.commit()
        return result.rowcount > 0

    async def list_by_doctor(self, doctor_id: UUID) -> list[Justification]:
        stmt = (
            select(justifications)
            .where(justifications.c.doctor_id == doctor_id)
            .order_by(justifications.c.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return [Justification.model_validate(dict(row._mapping)) for row in result.fetchall()]

    async def delete_for_appointment(self, appointment_id: UUID) -> int:
        result = await self.db.execute(
            delete(justifications).where(justifications.c.appointment_id == appointment_id)
        )
        await self.db.commit()
        return result.rowcount
