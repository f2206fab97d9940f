"""Notification fan-out for appointment mutations."""

import asyncio
from collections.abc import Iterable
from uuid import UUID

import structlog

from clinic_scheduler.repositories.base import ContactResolver, NotificationStore, OutboundMessenger
from clinic_scheduler.schemas.appointments import Appointment
from clinic_scheduler.schemas.catalog import Person
from clinic_scheduler.schemas.notifications import (
    DispatchReport,
    DispatchWarning,
    NotificationKind,
    NotificationRecord,
    OutboundMessage,
)
from clinic_scheduler.services.message_templates import (
    daily_summary,
    doctor_message,
    patient_message,
)

logger = structlog.get_logger(__name__)


class NotificationDispatcher:
    """Builds, records and sends the messages of one appointment mutation.

    Doctor notification records are always persisted. Outbound delivery only
    happens when ``enabled`` is set and never raises: unreachable recipients
    and transport failures end up as warnings on the report.
    """

    def __init__(
        self,
        store: NotificationStore,
        contacts: ContactResolver,
        messenger: OutboundMessenger,
        enabled: bool = False,
        timeout: float = 10.0,
    ):
        """Initialize dispatcher with its collaborators."""
        self.store = store
        self.contacts = contacts
        self.messenger = messenger
        self.enabled = enabled
        self.timeout = timeout

    async def dispatch(
        self,
        kind: NotificationKind,
        appointment: Appointment,
        previous: Appointment | None = None,
        day_appointments: Iterable[Appointment] = (),
        record: bool = True,
    ) -> DispatchReport:
        """
        Notify the patients and doctors of an appointment.

        Args:
            kind: What happened to the appointment
            appointment: Appointment as stored after the mutation
            previous: Snapshot before the mutation, for reschedule texts
            day_appointments: Reloaded appointments of the same date, used
                for the patients' same-day summaries
            record: Persist doctor notification records; off when the
                appointment itself is being removed

        Returns:
            Rendered messages, persisted records and delivery counts
        """
        patients = await self.contacts.get_people(appointment.patient_ids)
        doctors = await self.contacts.get_people(appointment.doctor_ids)
        patient_names = ", ".join(person.name for person in patients)
        doctor_names = ", ".join(person.name for person in doctors)

        day_set = list(day_appointments)
        summary_doctors = await self._doctor_names(day_set, doctors)

        patient_messages = []
        for patient in patients:
            summary = (
                daily_summary(patient.id, appointment.date, day_set, summary_doctors)
                if kind != NotificationKind.CANCEL
                else None
            )
            patient_messages.append(
                OutboundMessage(
                    recipient_id=patient.id,
                    recipient_name=patient.name,
                    role="patient",
                    text=patient_message(
                        kind, appointment, patient.name, doctor_names, previous, summary
                    ),
                )
            )

        doctor_text = doctor_message(kind, appointment, doctor_names, patient_names, previous)
        doctor_messages = [
            OutboundMessage(
                recipient_id=doctor.id,
                recipient_name=doctor.name,
                role="doctor",
                text=doctor_text,
            )
            for doctor in doctors
        ]

        records: list[NotificationRecord] = []
        if record:
            for doctor_id in appointment.doctor_ids:
                records.append(
                    await self.store.append(
                        NotificationRecord(
                            recipient_id=doctor_id,
                            appointment_id=appointment.id,
                            kind=kind,
                            message=doctor_text,
                        )
                    )
                )

        report = DispatchReport(
            kind=kind,
            patient_messages=patient_messages,
            doctor_messages=doctor_messages,
            records=records,
        )

        if not self.enabled:
            logger.debug("dispatch_disabled", appointment_id=str(appointment.id), kind=kind.value)
            return report

        await self._send_all(report, appointment, patients, doctors)
        return report

    async def _doctor_names(
        self,
        day_set: list[Appointment],
        known: list[Person],
    ) -> dict[UUID, str]:
        names = {person.id: person.name for person in known}
        missing = [
            doctor_id
            for doctor_id in dict.fromkeys(item.primary_doctor_id for item in day_set)
            if doctor_id not in names
        ]
        if missing:
            for person in await self.contacts.get_people(missing):
                names[person.id] = person.name
        return names

    async def _send_all(
        self,
        report: DispatchReport,
        appointment: Appointment,
        patients: list[Person],
        doctors: list[Person],
    ) -> None:
        unreachable: list[str] = []
        deliveries: list[tuple[str, OutboundMessage]] = []

        for message in [*report.patient_messages, *report.doctor_messages]:
            address = await self.contacts.resolve_address(message.recipient_id)
            if not address:
                unreachable.append(f"{message.role.capitalize()}: {message.recipient_name}")
                continue
            deliveries.append((address, message))

        # Ids listed on the appointment but absent from the directory
        found = {person.id for person in [*patients, *doctors]}
        for role, ids in (("Patient", appointment.patient_ids), ("Doctor", appointment.doctor_ids)):
            unreachable.extend(
                f"{role}: {person_id}" for person_id in ids if person_id not in found
            )

        results = await asyncio.gather(
            *(self._deliver(address, message) for address, message in deliveries)
        )
        report.sent = sum(1 for delivered in results if delivered)
        report.failed = len(results) - report.sent

        if unreachable:
            logger.warning(
                "dispatch_recipients_unreachable",
                appointment_id=str(appointment.id),
                recipients=unreachable,
            )
            report.warnings.append(
                DispatchWarning(
                    message=f"Messages not sent (no phone): {', '.join(unreachable)}",
                    recipients=unreachable,
                )
            )
        if report.failed:
            failed = [
                message.recipient_name
                for (_, message), delivered in zip(deliveries, results, strict=True)
                if not delivered
            ]
            report.warnings.append(
                DispatchWarning(message="Message delivery failed", recipients=failed)
            )

        logger.info(
            "dispatch_completed",
            appointment_id=str(appointment.id),
            kind=report.kind.value,
            sent=report.sent,
            failed=report.failed,
        )

    async def _deliver(self, address: str, message: OutboundMessage) -> bool:
        try:
            await asyncio.wait_for(self.messenger.send(address, message.text), timeout=self.timeout)
            return True
        except Exception as e:
            logger.warning(
                "dispatch_recipient_failed",
                recipient_id=str(message.recipient_id),
                role=message.role,
                error=str(e) or type(e).__name__,
            )
            return False
