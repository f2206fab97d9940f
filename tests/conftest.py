import os
from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Load environment variables from .env file
load_dotenv()

# Tests never reach Redis or the WhatsApp API
os.environ["REDIS_HOST"] = ""
os.environ["NOTIFICATIONS_ENABLED"] = "false"
os.environ["WHATSAPP_ACCESS_TOKEN"] = ""

from clinic_scheduler.database import get_db
from clinic_scheduler.main import app
from clinic_scheduler.models import metadata
from clinic_scheduler.repositories.appointments import (
    SqlAppointmentRepository,
    SqlRelationRepository,
)
from clinic_scheduler.repositories.catalog import SqlContactDirectory, SqlServiceCatalog
from clinic_scheduler.repositories.notifications import (
    SqlJustificationRepository,
    SqlNotificationStore,
)
from clinic_scheduler.schemas.catalog import Person
from clinic_scheduler.services.event_bus import EventBus
from clinic_scheduler.services.notification_dispatcher import NotificationDispatcher
from clinic_scheduler.services.relation_sync import RelationSynchronizer
from clinic_scheduler.services.scheduling_service import SchedulingService

# In-memory SQLite shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite://"

# Fixed "today" for service tests: a Monday
TODAY = date(2026, 3, 2)
RECURRENCE_END = date(2026, 12, 31)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session on a fresh in-memory database."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,  # Set to True for SQL debugging
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def people(db_session: AsyncSession) -> dict[str, Person]:
    """Two patients and three doctors; Bruno and Elisa have no phone."""
    directory = SqlContactDirectory(db_session)
    return {
        "ana": await directory.add_person(
            {"name": "Ana", "role": "patient", "phone": "(11) 98888-7777"}
        ),
        "bruno": await directory.add_person({"name": "Bruno", "role": "patient", "phone": None}),
        "carla": await directory.add_person(
            {"name": "Dr. Carla", "role": "doctor", "phone": "+55 11 97777-6666"}
        ),
        "diego": await directory.add_person(
            {"name": "Dr. Diego", "role": "doctor", "phone": "11 96666-5555"}
        ),
        "elisa": await directory.add_person({"name": "Dr. Elisa", "role": "doctor", "phone": None}),
    }


@pytest_asyncio.fixture
async def service_types(db_session: AsyncSession) -> SqlServiceCatalog:
    """Catalog with a 60 minute consultation and a 30 minute follow-up."""
    catalog = SqlServiceCatalog(db_session, default_duration=60)
    await catalog.create_service_type(
        {"name": "Consultation", "duration_minutes": 60, "price": Decimal("150.00")}
    )
    await catalog.create_service_type(
        {"name": "Follow-up", "duration_minutes": 30, "price": Decimal("80.00")}
    )
    return catalog


@pytest.fixture
def messenger() -> AsyncMock:
    """Outbound messenger that accepts everything."""
    return AsyncMock()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def store(db_session: AsyncSession) -> SqlNotificationStore:
    return SqlNotificationStore(db_session)


def build_scheduling(
    db_session: AsyncSession,
    messenger: AsyncMock,
    bus: EventBus | None = None,
    enabled: bool = True,
    today: date = TODAY,
) -> SchedulingService:
    """Scheduling service over the SQL repositories with a fixed clock."""
    dispatcher = NotificationDispatcher(
        SqlNotificationStore(db_session),
        SqlContactDirectory(db_session),
        messenger,
        enabled=enabled,
        timeout=1.0,
    )
    return SchedulingService(
        SqlAppointmentRepository(db_session),
        RelationSynchronizer(SqlRelationRepository(db_session)),
        SqlServiceCatalog(db_session, default_duration=60),
        dispatcher,
        event_bus=bus,
        default_duration=60,
        recurrence_end_date=RECURRENCE_END,
        clock=lambda: today,
        justifications=SqlJustificationRepository(db_session),
    )


@pytest.fixture
def scheduling(db_session: AsyncSession, messenger: AsyncMock, bus: EventBus) -> SchedulingService:
    """Scheduling service with outbound messages enabled."""
    return build_scheduling(db_session, messenger, bus)


@pytest.fixture
def sample_appointment_data(people: dict[str, Person]) -> dict:
    """Sample appointment payload on a Monday in the future."""
    return {
        "patient_ids": [str(people["ana"].id)],
        "doctor_ids": [str(people["carla"].id)],
        "date": "2030-01-07",
        "time": "09:00",
        "service_type": "Consultation",
        "notes": "First visit",
    }


@pytest.fixture
def scheduling_factory(db_session: AsyncSession):
    """Build scheduling services with custom messenger, toggle or clock."""

    def factory(messenger: AsyncMock, **kwargs) -> SchedulingService:
        return build_scheduling(db_session, messenger, **kwargs)

    return factory
