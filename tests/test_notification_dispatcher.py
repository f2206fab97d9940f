"""Tests for notification fan-out."""

import asyncio
from datetime import date, time
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from clinic_scheduler.schemas.appointments import Appointment
from clinic_scheduler.schemas.catalog import Person
from clinic_scheduler.schemas.notifications import NotificationKind
from clinic_scheduler.services.messengers import MessengerError
from clinic_scheduler.services.notification_dispatcher import NotificationDispatcher

DAY = date(2030, 1, 7)


@pytest.fixture
def directory() -> dict:
    """Ana and Dr. Carla have phones, Bruno does not."""
    ana = Person(id=uuid4(), name="Ana", role="patient", phone="11988887777")
    bruno = Person(id=uuid4(), name="Bruno", role="patient")
    carla = Person(id=uuid4(), name="Dr. Carla", role="doctor", phone="11977776666")
    return {"ana": ana, "bruno": bruno, "carla": carla}


@pytest.fixture
def contacts(directory) -> MagicMock:
    by_id = {person.id: person for person in directory.values()}

    async def get_people(ids):
        return [by_id[person_id] for person_id in ids if person_id in by_id]

    async def resolve_address(person_id):
        person = by_id.get(person_id)
        return f"55{person.phone}" if person and person.phone else None

    resolver = MagicMock()
    resolver.get_people = AsyncMock(side_effect=get_people)
    resolver.resolve_address = AsyncMock(side_effect=resolve_address)
    return resolver


@pytest.fixture
def record_store() -> MagicMock:
    store = MagicMock()
    store.append = AsyncMock(side_effect=lambda record: record)
    return store


def make_appointment(patients, doctors, start=time(9, 0)) -> Appointment:
    return Appointment(
        id=uuid4(),
        patient_ids=[person.id for person in patients],
        doctor_ids=[person.id for person in doctors],
        date=DAY,
        time=start,
        service_type="Consultation",
    )


@pytest.mark.asyncio
async def test_records_are_persisted_when_sending_is_disabled(record_store, contacts, directory):
    messenger = AsyncMock()
    dispatcher = NotificationDispatcher(record_store, contacts, messenger, enabled=False)
    appointment = make_appointment([directory["ana"]], [directory["carla"]])

    report = await dispatcher.dispatch(NotificationKind.CREATE, appointment, None, [appointment])

    assert len(report.records) == 1
    assert report.records[0].recipient_id == directory["carla"].id
    assert report.records[0].kind == NotificationKind.CREATE
    assert report.sent == 0
    messenger.send.assert_not_awaited()


@pytest.mark.asyncio
async def test_patient_and_doctor_messages(record_store, contacts, directory):
    messenger = AsyncMock()
    dispatcher = NotificationDispatcher(record_store, contacts, messenger, enabled=True)
    appointment = make_appointment([directory["ana"]], [directory["carla"]])

    report = await dispatcher.dispatch(NotificationKind.CREATE, appointment, None, [appointment])

    assert report.sent == 2
    assert report.warnings == []
    patient_text = report.patient_messages[0].text
    assert patient_text.startswith(
        "Hello, good morning!\nAna, you have an appointment on 07/01/2030"
    )
    assert "for Consultation (Dr. Carla)" in patient_text
    assert "Can you confirm your attendance?" in patient_text
    messenger.send.assert_any_await("5511988887777", patient_text)


@pytest.mark.asyncio
async def test_cancel_is_never_a_summary(record_store, contacts, directory):
    dispatcher = NotificationDispatcher(record_store, contacts, AsyncMock())
    ana, carla = directory["ana"], directory["carla"]
    cancelled = make_appointment([ana], [carla])
    other = make_appointment([ana], [carla], start=time(14, 0))

    report = await dispatcher.dispatch(NotificationKind.CANCEL, cancelled, cancelled, [other])

    text = report.patient_messages[0].text
    assert "has been cancelled" in text
    assert "your appointments on" not in text


@pytest.mark.asyncio
async def test_unreachable_recipients_become_warnings(record_store, contacts, directory):
    messenger = AsyncMock()
    dispatcher = NotificationDispatcher(record_store, contacts, messenger, enabled=True)
    appointment = make_appointment([directory["ana"], directory["bruno"]], [directory["carla"]])

    report = await dispatcher.dispatch(NotificationKind.CREATE, appointment)

    assert report.sent == 2
    assert len(report.warnings) == 1
    assert report.warnings[0].recipients == ["Patient: Bruno"]
    assert "no phone" in report.warnings[0].message


@pytest.mark.asyncio
async def test_unknown_ids_are_reported(record_store, contacts, directory):
    dispatcher = NotificationDispatcher(record_store, contacts, AsyncMock(), enabled=True)
    stranger = uuid4()
    appointment = Appointment(
        id=uuid4(),
        patient_ids=[directory["ana"].id],
        doctor_ids=[stranger],
        date=DAY,
        time=time(9, 0),
        service_type="Consultation",
    )

    report = await dispatcher.dispatch(NotificationKind.CREATE, appointment)

    assert report.warnings[0].recipients == [f"Doctor: {stranger}"]
    # The record is stored even though the doctor is not in the directory
    assert len(report.records) == 1


@pytest.mark.asyncio
async def test_transport_errors_are_counted_not_raised(record_store, contacts, directory):
    messenger = AsyncMock()
    messenger.send.side_effect = MessengerError("rejected")
    dispatcher = NotificationDispatcher(record_store, contacts, messenger, enabled=True)
    appointment = make_appointment([directory["ana"]], [directory["carla"]])

    report = await dispatcher.dispatch(NotificationKind.UPDATE, appointment)

    assert report.sent == 0
    assert report.failed == 2
    assert report.warnings[-1].message == "Message delivery failed"
    assert sorted(report.warnings[-1].recipients) == ["Ana", "Dr. Carla"]


@pytest.mark.asyncio
async def test_slow_transport_times_out(record_store, contacts, directory):
    async def slow_send(address, text):
        await asyncio.sleep(1)

    messenger = MagicMock()
    messenger.send = slow_send
    dispatcher = NotificationDispatcher(
        record_store, contacts, messenger, enabled=True, timeout=0.01
    )
    appointment = make_appointment([directory["ana"]], [directory["carla"]])

    report = await dispatcher.dispatch(NotificationKind.CREATE, appointment)

    assert report.failed == 2


@pytest.mark.asyncio
async def test_record_flag_skips_persistence(record_store, contacts, directory):
    dispatcher = NotificationDispatcher(record_store, contacts, AsyncMock())
    appointment = make_appointment([directory["ana"]], [directory["carla"]])

    report = await dispatcher.dispatch(NotificationKind.CANCEL, appointment, record=False)

    assert report.records == []
    assert len(report.doctor_messages) == 1
    record_store.append.assert_not_awaited()
