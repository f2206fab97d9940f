"""Excused absence handling."""

from uuid import UUID

import structlog

from clinic_scheduler.core.exceptions import ForbiddenException, NotFoundException
from clinic_scheduler.repositories.base import (
    ContactResolver,
    JustificationRepository,
    NotificationStore,
)
from clinic_scheduler.schemas.appointments import AppointmentStatus
from clinic_scheduler.schemas.justifications import (
    Justification,
    JustificationCreate,
    JustificationResult,
)
from clinic_scheduler.schemas.notifications import NotificationKind, NotificationRecord
from clinic_scheduler.services.appointment_lifecycle import check_transition
from clinic_scheduler.services.message_templates import DEFAULT_DOCTOR_NAME, excused_absence_message
from clinic_scheduler.services.scheduling_service import SchedulingService

logger = structlog.get_logger(__name__)


class JustificationService:
    """Service for doctors marking appointments as excused absences."""

    def __init__(
        self,
        justifications: JustificationRepository,
        scheduling: SchedulingService,
        store: NotificationStore,
        contacts: ContactResolver,
    ):
        """Initialize service with its repositories."""
        self.justifications = justifications
        self.scheduling = scheduling
        self.store = store
        self.contacts = contacts

    async def create(self, data: JustificationCreate) -> JustificationResult:
        """
        Record an excused absence.

        The appointment is cancelled through the scheduling service and every
        doctor of the appointment gets a reschedule notification record.

        Args:
            data: Justification data; the author must be one of the doctors

        Returns:
            Stored justification and the cancellation outcome

        Raises:
            NotFoundException: If the appointment does not exist
            ForbiddenException: If the author is not a doctor of the appointment
            InvalidTransitionException: If the appointment is already completed
        """
        appointment = await self.scheduling.get(data.appointment_id)
        if data.doctor_id not in appointment.doctor_ids:
            raise ForbiddenException("Only a doctor of the appointment can justify an absence")
        if appointment.status != AppointmentStatus.CANCELLED:
            check_transition(appointment.status, AppointmentStatus.CANCELLED)

        justification = await self.justifications.insert(
            {
                "appointment_id": data.appointment_id,
                "doctor_id": data.doctor_id,
                "reason": data.reason,
                "description": data.description,
                "date": data.date,
            }
        )

        cancellation = await self.scheduling.cancel(
            appointment.id,
            notes=f"Excused absence: {data.reason} - {data.description}",
        )

        authors = await self.contacts.get_people([data.doctor_id])
        author_name = authors[0].name if authors else DEFAULT_DOCTOR_NAME
        message = excused_absence_message(appointment, author_name, data.reason)

        for doctor_id in appointment.doctor_ids:
            await self.store.append(
                NotificationRecord(
                    recipient_id=doctor_id,
                    appointment_id=appointment.id,
                    kind=NotificationKind.RESCHEDULE,
                    message=message,
                )
            )

        logger.info(
            "justification_created",
            justification_id=str(justification.id),
            appointment_id=str(appointment.id),
            doctor_id=str(data.doctor_id),
        )

        return JustificationResult(
            justification=justification,
            cancellation=cancellation,
            reschedule_records=len(appointment.doctor_ids),
        )

    async def delete(self, justification_id: UUID, doctor_id: UUID) -> int:
        """
        Delete an excused absence and its reschedule notification records.

        Returns:
            Number of notification records removed
        """
        justification = await self.justifications.get(justification_id)
        if not justification:
            raise NotFoundException("Justification not found")
        if justification.doctor_id != doctor_id:
            raise ForbiddenException("Only the author can delete a justification")

        await self.justifications.delete(justification_id)
        removed = await self.store.delete_for_appointment(
            justification.appointment_id, kind=NotificationKind.RESCHEDULE
        )

        logger.info(
            "justification_deleted",
            justification_id=str(justification_id),
            notification_records_removed=removed,
        )
        return removed

    async def list_for_doctor(self, doctor_id: UUID) -> list[Justification]:
        return await self.justifications.list_by_doctor(doctor_id)
