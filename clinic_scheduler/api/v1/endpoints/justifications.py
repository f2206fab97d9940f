"""Excused absence endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from clinic_scheduler.dependencies import Justifications
from clinic_scheduler.schemas.justifications import (
    JustificationCreate,
    JustificationListResponse,
    JustificationResult,
)

router = APIRouter(prefix="/justifications", tags=["Justifications"])


@router.post(
    "/",
    response_model=JustificationResult,
    status_code=status.HTTP_201_CREATED,
    summary="Justify an absence",
)
async def create_justification(
    data: JustificationCreate,
    service: Justifications,
) -> JustificationResult:
    """
    Mark an appointment as an excused absence.

    The appointment is cancelled and its doctors receive a reschedule
    notification.

    Args:
        data: Justification data
        service: Justification service

    Returns:
        Stored justification and the cancellation outcome
    """
    return await service.create(data)


@router.get(
    "/",
    response_model=JustificationListResponse,
    status_code=status.HTTP_200_OK,
    summary="List a doctor's justifications",
)
async def list_justifications(
    service: Justifications,
    doctor_id: UUID = Query(...),
) -> JustificationListResponse:
    items = await service.list_for_doctor(doctor_id)
    return JustificationListResponse(total=len(items), items=items)


@router.delete(
    "/{justification_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete justification",
)
async def delete_justification(
    justification_id: UUID,
    service: Justifications,
    doctor_id: UUID = Query(..., description="Author of the justification"),
) -> None:
    """
    Delete a justification and the reschedule notifications it created.

    Args:
        justification_id: Justification ID
        service: Justification service
        doctor_id: Requesting doctor; must be the author
    """
    await service.delete(justification_id, doctor_id)
