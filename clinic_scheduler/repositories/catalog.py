"""Service type catalog and contact directory."""

import re
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

import structlog
from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduler.core.redis_client import CacheManager
from clinic_scheduler.models.people import people
from clinic_scheduler.models.service_types import service_types
from clinic_scheduler.schemas.catalog import Person, ServiceType

logger = structlog.get_logger(__name__)

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(value: str | None, country_code: str = "55") -> str | None:
    """
    Reduce a phone number to a deliverable address.

    Args:
        value: Phone number as typed, with any punctuation
        country_code: Prefix added when the digits do not already carry it

    Returns:
        Digits-only address, or None when there are no digits
    """
    if not value:
        return None
    digits = _NON_DIGITS.sub("", value)
    if not digits:
        return None
    if not digits.startswith(country_code):
        digits = f"{country_code}{digits}"
    return digits


class SqlServiceCatalog:
    """Service types read from the database, cached in Redis when available."""

    CACHE_KEY = "service_types:all"

    def __init__(
        self,
        db: AsyncSession,
        cache_manager: CacheManager | None = None,
        ttl: int = 300,
        default_duration: int = 60,
    ):
        """Initialize catalog with database session and optional cache manager."""
        self.db = db
        self.cache = cache_manager
        self.ttl = ttl
        self.default_duration = default_duration

    async def list_service_types(self) -> list[ServiceType]:
        # Try cache first
        if self.cache:
            cached = self.cache.get_json(self.CACHE_KEY)
            if cached:
                return [ServiceType.model_validate(item) for item in cached]

        result = await self.db.execute(select(service_types).order_by(service_types.c.name))
        items = [ServiceType.model_validate(dict(row._mapping)) for row in result.fetchall()]

        if self.cache:
            self.cache.set_json(
                self.CACHE_KEY,
                [item.model_dump(mode="json") for item in items],
                ttl=self.ttl,
            )
        return items

    async def create_service_type(self, values: dict[str, Any]) -> ServiceType:
        service_type_id = values.get("id") or uuid4()
        await self.db.execute(insert(service_types).values(**{**values, "id": service_type_id}))
        await self.db.commit()

        # Invalidate cache
        if self.cache:
            self.cache.delete(self.CACHE_KEY)

        result = await self.db.execute(
            select(service_types).where(service_types.c.id == service_type_id)
        )
        return ServiceType.model_validate(dict(result.first()._mapping))

    async def durations(self) -> dict[str, int]:
        """Name to duration mapping for every known service type."""
        return {item.name: item.duration_minutes for item in await self.list_service_types()}

    async def duration_of(self, name: str) -> int:
        """Duration of a service type; unknown names get the default duration."""
        return (await self.durations()).get(name, self.default_duration)

    async def price_of(self, name: str) -> Decimal:
        for item in await self.list_service_types():
            if item.name == name:
                return item.price
        return Decimal("0")


class SqlContactDirectory:
    """Patients and doctors with their phone numbers."""

    def __init__(self, db: AsyncSession, country_code: str = "55"):
        """Initialize directory with database session."""
        self.db = db
        self.country_code = country_code

    async def get_people(self, person_ids: list[UUID]) -> list[Person]:
        if not person_ids:
            return []
        result = await self.db.execute(select(people).where(people.c.id.in_(person_ids)))
        found = {row.id: Person.model_validate(dict(row._mapping)) for row in result.fetchall()}

        missing = [str(person_id) for person_id in person_ids if person_id not in found]
        if missing:
            logger.warning("contacts_not_found", person_ids=missing)

        return [found[person_id] for person_id in person_ids if person_id in found]

    async def resolve_address(self, person_id: UUID) -> str | None:
        result = await self.db.execute(select(people.c.phone).where(people.c.id == person_id))
        phone = result.scalar_one_or_none()
        return normalize_phone(phone, self.country_code)

    async def add_person(self, values: dict[str, Any]) -> Person:
        person_id = values.get("id") or uuid4()
        await self.db.execute(insert(people).values(**{**values, "id": person_id}))
        await self.db.commit()
        return Person.model_validate({**values, "id": person_id})
