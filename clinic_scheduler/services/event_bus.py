"""In-process publish/subscribe for appointment changes."""

import asyncio
from collections.abc import Awaitable, Callable
from uuid import UUID

import structlog
from pydantic import BaseModel

from clinic_scheduler.schemas.appointments import Appointment
from clinic_scheduler.schemas.notifications import NotificationKind

logger = structlog.get_logger(__name__)


class AppointmentEvent(BaseModel):
    """Published after every committed appointment mutation."""

    kind: NotificationKind
    appointment_id: UUID
    appointment: Appointment | None = None
    deleted: bool = False


Subscriber = Callable[[AppointmentEvent], Awaitable[None]]


class EventBus:
    """Fans appointment events out to async subscribers."""

    def __init__(self) -> None:
        # token -> subscriber
        self._subscribers: dict[int, Subscriber] = {}
        self._next_token = 0
        self._lock = asyncio.Lock()

    async def subscribe(self, subscriber: Subscriber) -> int:
        """Register a subscriber and return its token."""
        async with self._lock:
            self._next_token += 1
            self._subscribers[self._next_token] = subscriber
            return self._next_token

    async def unsubscribe(self, token: int) -> None:
        async with self._lock:
            self._subscribers.pop(token, None)

    async def publish(self, event: AppointmentEvent) -> int:
        """
        Deliver an event to every subscriber.

        A failing subscriber is logged and skipped; the others still run.

        Returns:
            Number of subscribers that handled the event
        """
        async with self._lock:
            subscribers = list(self._subscribers.items())

        delivered = 0
        for token, subscriber in subscribers:
            try:
                await subscriber(event)
                delivered += 1
            except Exception as e:
                logger.error(
                    "event_subscriber_failed",
                    token=token,
                    kind=event.kind.value,
                    appointment_id=str(event.appointment_id),
                    error=str(e),
                )
        return delivered

    def subscriber_count(self) -> int:
        return len(self._subscribers)


# Singleton instance
event_bus = EventBus()
