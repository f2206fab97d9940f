"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduler.config import Settings, get_settings
from clinic_scheduler.core.redis_client import get_cache_manager
from clinic_scheduler.database import get_db
from clinic_scheduler.repositories.appointments import (
    SqlAppointmentRepository,
    SqlRelationRepository,
)
from clinic_scheduler.repositories.base import OutboundMessenger
from clinic_scheduler.repositories.catalog import SqlContactDirectory, SqlServiceCatalog
from clinic_scheduler.repositories.notifications import (
    SqlJustificationRepository,
    SqlNotificationStore,
)
from clinic_scheduler.services.event_bus import EventBus, event_bus
from clinic_scheduler.services.justification_service import JustificationService
from clinic_scheduler.services.messengers import build_messenger
from clinic_scheduler.services.notification_dispatcher import NotificationDispatcher
from clinic_scheduler.services.relation_sync import RelationSynchronizer
from clinic_scheduler.services.scheduling_service import SchedulingService

# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def get_event_bus() -> EventBus:
    """Process-wide appointment event bus."""
    return event_bus


def get_messenger(settings: AppSettings) -> OutboundMessenger:
    return build_messenger(settings)


def get_service_catalog(db: DatabaseSession, settings: AppSettings) -> SqlServiceCatalog:
    return SqlServiceCatalog(
        db,
        cache_manager=get_cache_manager(),
        ttl=settings.service_catalog_cache_ttl,
        default_duration=settings.default_service_duration_minutes,
    )


def get_contact_directory(db: DatabaseSession, settings: AppSettings) -> SqlContactDirectory:
    return SqlContactDirectory(db, country_code=settings.default_country_code)


def get_notification_store(db: DatabaseSession) -> SqlNotificationStore:
    return SqlNotificationStore(db)


ServiceCatalogDep = Annotated[SqlServiceCatalog, Depends(get_service_catalog)]
ContactDirectory = Annotated[SqlContactDirectory, Depends(get_contact_directory)]
NotificationStoreDep = Annotated[SqlNotificationStore, Depends(get_notification_store)]
Messenger = Annotated[OutboundMessenger, Depends(get_messenger)]
AppointmentEventBus = Annotated[EventBus, Depends(get_event_bus)]


def get_scheduling_service(
    db: DatabaseSession,
    settings: AppSettings,
    catalog: ServiceCatalogDep,
    contacts: ContactDirectory,
    store: NotificationStoreDep,
    messenger: Messenger,
    bus: AppointmentEventBus,
) -> SchedulingService:
    """
    Assemble the scheduling service for one request.

    Args:
        db: Database session shared by every repository of the request
        settings: Application settings
        catalog: Service type catalog
        contacts: Contact directory
        store: Notification record store
        messenger: Outbound transport
        bus: Appointment event bus

    Returns:
        Scheduling service
    """
    dispatcher = NotificationDispatcher(
        store,
        contacts,
        messenger,
        enabled=settings.notifications_enabled,
        timeout=settings.dispatch_timeout_seconds,
    )
    return SchedulingService(
        SqlAppointmentRepository(db),
        RelationSynchronizer(SqlRelationRepository(db)),
        catalog,
        dispatcher,
        event_bus=bus,
        default_duration=settings.default_service_duration_minutes,
        recurrence_end_date=settings.recurrence_end_date,
        recurrence_min_days=settings.recurrence_min_horizon_days,
        justifications=SqlJustificationRepository(db),
    )


Scheduling = Annotated[SchedulingService, Depends(get_scheduling_service)]


def get_justification_service(
    db: DatabaseSession,
    scheduling: Scheduling,
    store: NotificationStoreDep,
    contacts: ContactDirectory,
) -> JustificationService:
    return JustificationService(SqlJustificationRepository(db), scheduling, store, contacts)


Justifications = Annotated[JustificationService, Depends(get_justification_service)]
