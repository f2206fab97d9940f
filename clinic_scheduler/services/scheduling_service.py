"""Scheduling service: the single entry point for appointment mutations."""

from collections.abc import Callable
from datetime import date
from uuid import UUID

import structlog

from clinic_scheduler.core.exceptions import (
    ConflictException,
    NotFoundException,
    ValidationException,
)
from clinic_scheduler.repositories.base import (
    AppointmentRepository,
    JustificationRepository,
    ServiceCatalog,
)
from clinic_scheduler.schemas.appointments import (
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
    AppointmentUpdate,
    MutationResult,
)
from clinic_scheduler.schemas.notifications import DispatchReport, NotificationKind
from clinic_scheduler.services.appointment_lifecycle import (
    AppointmentPlan,
    check_transition,
    plan_create,
    plan_update,
)
from clinic_scheduler.services.conflict_detector import DurationLookup, find_conflict
from clinic_scheduler.services.event_bus import AppointmentEvent, EventBus
from clinic_scheduler.services.notification_dispatcher import NotificationDispatcher
from clinic_scheduler.services.recurrence import (
    expand_weekly,
    is_occurrence_id,
    recurrence_horizon,
)
from clinic_scheduler.services.relation_sync import RelationSynchronizer
from clinic_scheduler.services.time_grid import is_legal_slot, legal_slots, parse_date

logger = structlog.get_logger(__name__)


class SchedulingService:
    """Service for creating, changing and removing appointments.

    Every mutation runs validation, slot legality, the conflict check, the
    row write, link sync, a reload of the stored appointment, notification
    dispatch and finally the event publish, in that order. Anything raised
    before the row write leaves storage untouched.
    """

    def __init__(
        self,
        appointments: AppointmentRepository,
        relations: RelationSynchronizer,
        catalog: ServiceCatalog,
        dispatcher: NotificationDispatcher,
        event_bus: EventBus | None = None,
        default_duration: int = 60,
        recurrence_end_date: date | None = None,
        recurrence_min_days: int = 7,
        clock: Callable[[], date] = date.today,
        justifications: JustificationRepository | None = None,
    ):
        """Initialize service with its repositories and collaborators."""
        self.appointments = appointments
        self.relations = relations
        self.catalog = catalog
        self.dispatcher = dispatcher
        self.event_bus = event_bus
        self.default_duration = default_duration
        self.recurrence_end_date = recurrence_end_date
        self.recurrence_min_days = recurrence_min_days
        self.clock = clock
        self.justifications = justifications

    # Reads

    async def get(self, appointment_id: UUID | str) -> Appointment:
        """
        Get an appointment, or one weekly occurrence of a recurring appointment.

        Args:
            appointment_id: Stored id, or ``<id>::<YYYY-MM-DD>`` for an occurrence

        Returns:
            The appointment

        Raises:
            NotFoundException: If nothing matches the id
        """
        if isinstance(appointment_id, str) and is_occurrence_id(appointment_id):
            return await self._get_occurrence(appointment_id)

        appointment = await self.appointments.get(self._parse_id(appointment_id))
        if not appointment:
            raise NotFoundException("Appointment not found")
        return appointment

    async def list_between(
        self,
        from_date: date,
        to_date: date,
        doctor_id: UUID | None = None,
        patient_id: UUID | None = None,
        include_recurring: bool = True,
    ) -> list[Appointment]:
        """
        List stored appointments and weekly occurrences within a date range.

        Args:
            from_date: First date (inclusive)
            to_date: Last date (inclusive)
            doctor_id: Only appointments this doctor is linked to
            patient_id: Only appointments this patient is linked to
            include_recurring: Expand recurring appointments into occurrences

        Returns:
            Appointments sorted by date and time
        """
        if to_date < from_date:
            raise ValidationException("to_date", "to_date must not be before from_date")

        stored = await self.appointments.list_by_date_range(
            from_date, to_date, doctor_id=doctor_id, patient_id=patient_id
        )
        if not include_recurring:
            return stored

        today = self.clock()
        horizon = self._horizon(today)
        sources = await self.appointments.list_recurring(
            min(to_date, horizon), doctor_id=doctor_id, patient_id=patient_id
        )
        known = {appointment.id for appointment in stored}
        merged = stored + [source for source in sources if source.id not in known]

        return expand_weekly(merged, from_date, to_date, horizon, not_before=today)

    def legal_slots(self, value: date | str | None) -> list[str]:
        """Bookable ``HH:MM`` slots for a date."""
        return [slot.strftime("%H:%M") for slot in legal_slots(value)]

    # Mutations

    async def create(self, data: AppointmentCreate) -> MutationResult:
        """
        Create an appointment.

        Args:
            data: Appointment creation data

        Returns:
            Stored appointment with the notification outcome

        Raises:
            ValidationException: If a required field is missing or the slot is illegal
            ConflictException: If one of the doctors is already booked
            RelationSyncException: If the links could not be written
        """
        plan = plan_create(data)
        self._check_slot(plan)

        duration_of = await self._duration_lookup()
        await self._check_conflict(plan, duration_of)

        if plan.price is None:
            plan.price = await self.catalog.price_of(plan.service_type)

        appointment_id = await self.appointments.insert(plan.row_values())
        await self.relations.sync_links(appointment_id, plan.patient_ids, plan.doctor_ids)

        appointment = await self._reload(appointment_id)
        logger.info(
            "appointment_created",
            appointment_id=str(appointment_id),
            date=appointment.date.isoformat(),
            time=appointment.time_label,
            doctor_ids=[str(doctor_id) for doctor_id in appointment.doctor_ids],
        )

        report = await self._notify(NotificationKind.CREATE, appointment)
        return await self._finish(NotificationKind.CREATE, appointment, report)

    async def update(self, appointment_id: UUID | str, data: AppointmentUpdate) -> MutationResult:
        """
        Update an appointment.

        A date or time change is a reschedule: it resets the status to
        ``pending`` and replaces any earlier reschedule records of the
        appointment. Link lists, when given, replace the stored ones.

        Args:
            appointment_id: Appointment to update; weekly occurrences are rejected
            data: Partial update

        Returns:
            Stored appointment with the notification outcome
        """
        previous = await self._load_for_write(appointment_id)
        plan = plan_update(previous, data)

        if not plan.changed:
            return MutationResult(appointment=previous, kind=NotificationKind.UPDATE)

        if plan.rescheduled:
            self._check_slot(plan)

        if plan.status != AppointmentStatus.CANCELLED and self._moves_interval(previous, plan):
            duration_of = await self._duration_lookup()
            await self._check_conflict(plan, duration_of, exclude_appointment_id=previous.id)

        await self.appointments.update(previous.id, plan.row_values())
        if plan.links_changed:
            await self.relations.sync_links(previous.id, plan.patient_ids, plan.doctor_ids)

        appointment = await self._reload(previous.id)
        logger.info(
            "appointment_updated",
            appointment_id=str(previous.id),
            kind=plan.kind.value,
            status=appointment.status.value,
            rescheduled=plan.rescheduled,
        )

        if plan.rescheduled:
            # A move supersedes any outstanding request to reschedule
            await self.dispatcher.store.delete_for_appointment(
                previous.id, kind=NotificationKind.RESCHEDULE
            )

        report = await self._notify(plan.kind, appointment, previous)
        return await self._finish(plan.kind, appointment, report)

    async def cancel(self, appointment_id: UUID | str, notes: str | None = None) -> MutationResult:
        """Cancel an appointment; no conflict check, cancelling twice is a no-op."""
        previous = await self._load_for_write(appointment_id)
        if previous.status == AppointmentStatus.CANCELLED:
            return MutationResult(appointment=previous, kind=NotificationKind.CANCEL)

        check_transition(previous.status, AppointmentStatus.CANCELLED)

        values: dict = {"status": AppointmentStatus.CANCELLED.value}
        if notes is not None:
            values["notes"] = notes
        await self.appointments.update(previous.id, values)

        appointment = await self._reload(previous.id)
        logger.info("appointment_cancelled", appointment_id=str(previous.id))

        report = await self._notify(NotificationKind.CANCEL, appointment, previous)
        return await self._finish(NotificationKind.CANCEL, appointment, report)

    async def delete(self, appointment_id: UUID | str) -> MutationResult:
        """
        Hard-delete an appointment.

        Links go first, then the row, then every notification record and
        excused absence of the appointment. Patients and doctors still get a
        cancellation message.
        """
        previous = await self._load_for_write(appointment_id)

        await self.relations.clear(previous.id)
        await self.appointments.delete(previous.id)
        removed = await self.dispatcher.store.delete_for_appointment(previous.id)
        justifications_removed = 0
        if self.justifications is not None:
            justifications_removed = await self.justifications.delete_for_appointment(previous.id)

        logger.info(
            "appointment_deleted",
            appointment_id=str(previous.id),
            notification_records_removed=removed,
            justifications_removed=justifications_removed,
        )

        report = await self.dispatcher.dispatch(
            NotificationKind.CANCEL, previous, previous, record=False
        )
        return await self._finish(NotificationKind.CANCEL, previous, report, deleted=True)

    # Helpers

    def _horizon(self, today: date) -> date:
        return recurrence_horizon(today, self.recurrence_end_date, self.recurrence_min_days)

    @staticmethod
    def _parse_id(appointment_id: UUID | str) -> UUID:
        if isinstance(appointment_id, UUID):
            return appointment_id
        if is_occurrence_id(appointment_id):
            raise ValidationException(
                "id", "Weekly occurrences cannot be changed; edit the recurring appointment"
            )
        try:
            return UUID(appointment_id)
        except ValueError:
            raise ValidationException("id", "Invalid appointment id")

    async def _get_occurrence(self, occurrence_id: str) -> Appointment:
        source_id, _, raw_day = occurrence_id.partition("::")
        day = parse_date(raw_day)
        if day is None:
            raise ValidationException("id", "Invalid occurrence date")

        source = await self.appointments.get(self._parse_id(source_id))
        if source:
            for occurrence in expand_weekly([source], day, day, self._horizon(self.clock())):
                if occurrence.is_virtual:
                    return occurrence
        raise NotFoundException("Appointment not found")

    async def _load_for_write(self, appointment_id: UUID | str) -> Appointment:
        appointment = await self.appointments.get(self._parse_id(appointment_id))
        if not appointment:
            raise NotFoundException("Appointment not found")
        return appointment

    async def _reload(self, appointment_id: UUID) -> Appointment:
        appointment = await self.appointments.get(appointment_id)
        if not appointment:
            raise NotFoundException("Appointment not found")
        return appointment

    @staticmethod
    def _check_slot(plan: AppointmentPlan) -> None:
        if not is_legal_slot(plan.date, plan.time):
            raise ValidationException(
                "time", f"{plan.time.strftime('%H:%M')} is not a bookable slot on {plan.date}"
            )

    @staticmethod
    def _moves_interval(previous: Appointment, plan: AppointmentPlan) -> bool:
        """The plan can collide with something the stored appointment did not."""
        return (
            plan.rescheduled
            or previous.status == AppointmentStatus.CANCELLED
            or plan.service_type != previous.service_type
            or set(plan.doctor_ids) != set(previous.doctor_ids)
        )

    async def _duration_lookup(self) -> DurationLookup:
        durations = {
            item.name: item.duration_minutes for item in await self.catalog.list_service_types()
        }
        default = self.default_duration
        return lambda name: durations.get(name, default)

    async def _check_conflict(
        self,
        plan: AppointmentPlan,
        duration_of: DurationLookup,
        exclude_appointment_id: UUID | None = None,
    ) -> None:
        candidates = await self.list_between(plan.date, plan.date)
        conflict = find_conflict(
            candidates,
            plan.doctor_ids,
            plan.date,
            plan.time,
            duration_of(plan.service_type),
            duration_of,
            exclude_appointment_id=exclude_appointment_id,
        )
        if conflict:
            logger.info(
                "appointment_conflict",
                date=plan.date.isoformat(),
                time=plan.time.strftime("%H:%M"),
                conflicting_appointment_id=conflict.occurrence_id,
            )
            raise ConflictException(conflict.occurrence_id)

    async def _notify(
        self,
        kind: NotificationKind,
        appointment: Appointment,
        previous: Appointment | None = None,
    ) -> DispatchReport:
        day_set = await self.list_between(appointment.date, appointment.date)
        return await self.dispatcher.dispatch(kind, appointment, previous, day_set)

    async def _finish(
        self,
        kind: NotificationKind,
        appointment: Appointment,
        report: DispatchReport,
        deleted: bool = False,
    ) -> MutationResult:
        if self.event_bus is not None:
            await self.event_bus.publish(
                AppointmentEvent(
                    kind=kind,
                    appointment_id=appointment.id,
                    appointment=appointment,
                    deleted=deleted,
                )
            )

        return MutationResult(
            appointment=appointment,
            kind=kind,
            deleted=deleted,
            notification_records=len(report.records),
            messages_sent=report.sent,
            warnings=report.warnings,
        )
