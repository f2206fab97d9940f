"""Tests for replace-all link synchronization."""

from datetime import date, time
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from clinic_scheduler.core.exceptions import RelationSyncException
from clinic_scheduler.models.appointments import appointment_doctors
from clinic_scheduler.repositories.appointments import (
    SqlAppointmentRepository,
    SqlRelationRepository,
)
from clinic_scheduler.services.relation_sync import RelationSynchronizer


@pytest.fixture
def relations() -> MagicMock:
    repository = MagicMock()
    repository.replace_links = AsyncMock()
    repository.delete_links = AsyncMock()
    return repository


@pytest.mark.asyncio
async def test_sync_drops_duplicates(relations):
    appointment_id, first, second = uuid4(), uuid4(), uuid4()
    synchronizer = RelationSynchronizer(relations)

    written = await synchronizer.sync(appointment_id, "doctor", [first, second, first])

    assert written == [first, second]
    relations.replace_links.assert_awaited_once_with(appointment_id, "doctor", [first, second])


@pytest.mark.asyncio
async def test_sync_links_writes_patients_then_doctors(relations):
    appointment_id, patient, doctor = uuid4(), uuid4(), uuid4()

    await RelationSynchronizer(relations).sync_links(appointment_id, [patient], [doctor])

    kinds = [call.args[1] for call in relations.replace_links.await_args_list]
    assert kinds == ["patient", "doctor"]


@pytest.mark.asyncio
async def test_failure_names_the_link_kind(relations):
    relations.replace_links.side_effect = SQLAlchemyError("insert failed")
    appointment_id = uuid4()

    with pytest.raises(RelationSyncException) as exc_info:
        await RelationSynchronizer(relations).sync(appointment_id, "patient", [uuid4()])

    assert exc_info.value.kind == "patient"
    assert exc_info.value.appointment_id == str(appointment_id)
    assert exc_info.value.details["degraded"] is True


@pytest.mark.asyncio
async def test_clear_failure(relations):
    relations.delete_links.side_effect = SQLAlchemyError("delete failed")

    with pytest.raises(RelationSyncException) as exc_info:
        await RelationSynchronizer(relations).clear(uuid4())

    assert exc_info.value.kind == "all"


@pytest.mark.asyncio
async def test_replace_links_keeps_order_and_replaces(db_session):
    appointment_id = await SqlAppointmentRepository(db_session).insert(
        {
            "patient_id": uuid4(),
            "doctor_id": uuid4(),
            "date": date(2030, 1, 7),
            "time": time(9, 0),
            "service_type": "Consultation",
        }
    )
    first, second, third = uuid4(), uuid4(), uuid4()
    synchronizer = RelationSynchronizer(SqlRelationRepository(db_session))

    await synchronizer.sync(appointment_id, "doctor", [first, second])
    await synchronizer.sync(appointment_id, "doctor", [third, first])

    result = await db_session.execute(
        select(appointment_doctors.c.doctor_id)
        .where(appointment_doctors.c.appointment_id == appointment_id)
        .order_by(appointment_doctors.c.position)
    )
    assert [row.doctor_id for row in result.fetchall()] == [third, first]


@pytest.mark.asyncio
async def test_repeating_a_sync_keeps_the_same_links(db_session):
    appointment_id = await SqlAppointmentRepository(db_session).insert(
        {
            "patient_id": uuid4(),
            "doctor_id": uuid4(),
            "date": date(2030, 1, 7),
            "time": time(9, 0),
            "service_type": "Consultation",
        }
    )
    first, second = uuid4(), uuid4()
    synchronizer = RelationSynchronizer(SqlRelationRepository(db_session))

    await synchronizer.sync(appointment_id, "doctor", [first, second, first])
    await synchronizer.sync(appointment_id, "doctor", [first, second, first])

    result = await db_session.execute(
        select(appointment_doctors.c.doctor_id)
        .where(appointment_doctors.c.appointment_id == appointment_id)
        .order_by(appointment_doctors.c.position)
    )
    assert [row.doctor_id for row in result.fetchall()] == [first, second]
