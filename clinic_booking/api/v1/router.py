"""API router configuration."""

from fastapi import APIRouter

from clinic_booking.api.v1.endpoints import (
    appointments,
    auth,
    catalog,
    health,
    reports,
)

api_router = APIRouter()

# Include routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(catalog.router, tags=["Catalog"])
api_router.include_router(appointments.router, tags=["Appointments"])
api_router.include_router(reports.router, prefix="/reports", tags=["Reports"])
