"""Appointment endpoints."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Query, status

from clinic_scheduler.dependencies import Scheduling
from clinic_scheduler.schemas.appointments import (
    Appointment,
    AppointmentCancel,
    AppointmentCreate,
    AppointmentFilters,
    AppointmentListResponse,
    AppointmentUpdate,
    MutationResult,
)

router = APIRouter()


@router.post(
    "/",
    response_model=MutationResult,
    status_code=status.HTTP_201_CREATED,
    tags=["Appointments"],
    summary="Create new appointment",
)
async def create_appointment(
    data: AppointmentCreate,
    service: Scheduling,
) -> MutationResult:
    """
    Create a new appointment.

    Args:
        data: Appointment creation data
        service: Scheduling service

    Returns:
        Created appointment, notification outcome and delivery warnings
    """
    return await service.create(data)


@router.get(
    "/",
    response_model=AppointmentListResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="List appointments",
)
async def list_appointments(
    service: Scheduling,
    from_date: date = Query(...),
    to_date: date = Query(...),
    doctor_id: UUID | None = Query(None),
    patient_id: UUID | None = Query(None),
    include_recurring: bool = Query(True),
) -> AppointmentListResponse:
    """
    List appointments within a date range, weekly occurrences included.

    Args:
        service: Scheduling service
        from_date: First date (inclusive)
        to_date: Last date (inclusive)
        doctor_id: Filter by doctor ID
        patient_id: Filter by patient ID
        include_recurring: Expand recurring appointments

    Returns:
        Appointments sorted by date and time
    """
    filters = AppointmentFilters(
        from_date=from_date,
        to_date=to_date,
        doctor_id=doctor_id,
        patient_id=patient_id,
        include_recurring=include_recurring,
    )
    items = await service.list_between(
        filters.from_date,
        filters.to_date,
        doctor_id=filters.doctor_id,
        patient_id=filters.patient_id,
        include_recurring=filters.include_recurring,
    )
    return AppointmentListResponse(total=len(items), items=items)


@router.get(
    "/{appointment_id}",
    response_model=Appointment,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Get appointment by ID",
)
async def get_appointment(appointment_id: str, service: Scheduling) -> Appointment:
    """
    Get a specific appointment by ID.

    Args:
        appointment_id: Appointment ID, or ``<id>::<YYYY-MM-DD>`` for a weekly occurrence
        service: Scheduling service

    Returns:
        Appointment details
    """
    return await service.get(appointment_id)


@router.put(
    "/{appointment_id}",
    response_model=MutationResult,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Update appointment",
)
async def update_appointment(
    appointment_id: str,
    data: AppointmentUpdate,
    service: Scheduling,
) -> MutationResult:
    """
    Update an appointment; changing date or time reschedules it.

    Args:
        appointment_id: Appointment ID
        data: Update data
        service: Scheduling service

    Returns:
        Updated appointment and notification outcome
    """
    return await service.update(appointment_id, data)


@router.post(
    "/{appointment_id}/cancel",
    response_model=MutationResult,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Cancel appointment",
)
async def cancel_appointment(
    appointment_id: str,
    service: Scheduling,
    data: AppointmentCancel | None = None,
) -> MutationResult:
    """
    Cancel an appointment.

    Args:
        appointment_id: Appointment ID
        service: Scheduling service
        data: Optional cancellation notes

    Returns:
        Cancelled appointment and notification outcome
    """
    return await service.cancel(appointment_id, notes=data.notes if data else None)


@router.delete(
    "/{appointment_id}",
    response_model=MutationResult,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Delete appointment",
)
async def delete_appointment(appointment_id: str, service: Scheduling) -> MutationResult:
    """
    Permanently delete an appointment with its links and notification records.

    Args:
        appointment_id: Appointment ID
        service: Scheduling service

    Returns:
        Removed appointment and cancellation message outcome
    """
    return await service.delete(appointment_id)
