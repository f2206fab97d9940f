"""Schedule grid and service catalog endpoints."""

from fastapi import APIRouter, Query, status

from clinic_scheduler.dependencies import ServiceCatalogDep
from clinic_scheduler.schemas.catalog import ServiceType, SlotsResponse
from clinic_scheduler.services.time_grid import format_slots, legal_slots

router = APIRouter(tags=["Schedule"])


@router.get(
    "/schedule/slots",
    response_model=SlotsResponse,
    status_code=status.HTTP_200_OK,
    summary="Bookable slots for a date",
)
async def get_slots(
    day: str = Query(..., alias="date", description="YYYY-MM-DD"),
) -> SlotsResponse:
    """
    List the hourly booking slots of a date.

    Sundays and values that are not dates have no slots.

    Args:
        day: Calendar date

    Returns:
        ``HH:MM`` slot list
    """
    return SlotsResponse(date=day, slots=format_slots(legal_slots(day)))


@router.get(
    "/service-types",
    response_model=list[ServiceType],
    status_code=status.HTTP_200_OK,
    summary="List service types",
)
async def list_service_types(catalog: ServiceCatalogDep) -> list[ServiceType]:
    return await catalog.list_service_types()

