"""Tests for the appointment event bus."""

from uuid import uuid4

import pytest

from clinic_scheduler.schemas.notifications import NotificationKind
from clinic_scheduler.services.event_bus import AppointmentEvent, EventBus


def make_event(kind=NotificationKind.CREATE) -> AppointmentEvent:
    return AppointmentEvent(kind=kind, appointment_id=uuid4())


@pytest.mark.asyncio
async def test_publish_reaches_every_subscriber():
    bus = EventBus()
    seen_a, seen_b = [], []

    async def subscriber_a(event):
        seen_a.append(event)

    async def subscriber_b(event):
        seen_b.append(event)

    await bus.subscribe(subscriber_a)
    await bus.subscribe(subscriber_b)
    event = make_event()

    delivered = await bus.publish(event)

    assert delivered == 2
    assert seen_a == [event]
    assert seen_b == [event]


@pytest.mark.asyncio
async def test_unsubscribe_stops_delivery():
    bus = EventBus()
    seen = []

    async def subscriber(event):
        seen.append(event)

    token = await bus.subscribe(subscriber)
    await bus.unsubscribe(token)

    assert await bus.publish(make_event()) == 0
    assert seen == []
    assert bus.subscriber_count() == 0


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_block_others():
    bus = EventBus()
    seen = []

    async def broken(event):
        raise RuntimeError("subscriber crashed")

    async def healthy(event):
        seen.append(event.kind)

    await bus.subscribe(broken)
    await bus.subscribe(healthy)

    delivered = await bus.publish(make_event(NotificationKind.CANCEL))

    assert delivered == 1
    assert seen == [NotificationKind.CANCEL]


@pytest.mark.asyncio
async def test_unknown_token_is_ignored():
    bus = EventBus()

    await bus.unsubscribe(42)

    assert bus.subscriber_count() == 0
