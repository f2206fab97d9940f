"""Replace-all synchronization of appointment patient and doctor links."""

from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError

from clinic_scheduler.core.exceptions import RelationSyncException
from clinic_scheduler.repositories.base import LinkKind, RelationRepository
from clinic_scheduler.schemas.appointments import unique_ids

logger = structlog.get_logger(__name__)


class RelationSynchronizer:
    """Keeps the link tables equal to an appointment's patient and doctor lists."""

    def __init__(self, relations: RelationRepository):
        """Initialize synchronizer with a relation repository."""
        self.relations = relations

    async def sync(self, appointment_id: UUID, kind: LinkKind, ids: list[UUID]) -> list[UUID]:
        """
        Replace every link of one kind with ``ids``.

        Args:
            appointment_id: Appointment whose links are rewritten
            kind: ``patient`` or ``doctor``
            ids: Desired members; duplicates and empty values are dropped

        Returns:
            Members actually written, in order

        Raises:
            RelationSyncException: If the repository fails; the appointment
                row is already committed and its links may be empty
        """
        members = unique_ids(ids)
        try:
            await self.relations.replace_links(appointment_id, kind, members)
        except SQLAlchemyError as e:
            logger.error(
                "relation_sync_failed",
                appointment_id=str(appointment_id),
                kind=kind,
                error=str(e),
            )
            raise RelationSyncException(appointment_id, kind, str(e)) from e
        return members

    async def sync_links(
        self,
        appointment_id: UUID,
        patient_ids: list[UUID],
        doctor_ids: list[UUID],
    ) -> None:
        """Synchronize both link kinds, patients first."""
        await self.sync(appointment_id, "patient", patient_ids)
        await self.sync(appointment_id, "doctor", doctor_ids)

    async def clear(self, appointment_id: UUID) -> None:
        """Remove every link of an appointment."""
        try:
            await self.relations.delete_links(appointment_id)
        except SQLAlchemyError as e:
            logger.error("relation_clear_failed", appointment_id=str(appointment_id), error=str(e))
            raise RelationSyncException(appointment_id, "all", str(e)) from e
