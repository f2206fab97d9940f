"""API v1 router configuration."""

from fastapi import APIRouter

from clinic_scheduler.api.v1.endpoints import (
    appointments,
    health,
    justifications,
    notifications,
    schedule,
)

api_router = APIRouter()

# Include routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(appointments.router, prefix="/appointments", tags=["Appointments"])
api_router.include_router(schedule.router, tags=["Schedule"])
api_router.include_router(notifications.router, tags=["Notifications"])
api_router.include_router(justifications.router, tags=["Justifications"])
