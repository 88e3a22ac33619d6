"""Branch, doctor and slot listing endpoints."""

from datetime import date

from fastapi import APIRouter, Query

from clinic_booking.dependencies import Cache, DatabaseSession
from clinic_booking.schemas.catalog import BranchResponse, DoctorListResponse
from clinic_booking.schemas.slots import AvailableSlot
from clinic_booking.services.catalog_service import CatalogService
from clinic_booking.services.slot_service import SlotRegistry

router = APIRouter()


@router.get("/branches", response_model=list[BranchResponse], summary="List branches")
async def list_branches(db: DatabaseSession, cache: Cache) -> list[BranchResponse]:
    """List all branches."""
    branch_list = await CatalogService(cache).list_branches(db)
    return [BranchResponse.model_validate(b) for b in branch_list]


@router.get("/doctors", response_model=list[DoctorListResponse], summary="List doctors")
async def list_doctors(
    db: DatabaseSession,
    cache: Cache,
    branch_id: int | None = Query(None, description="Filter by branch"),
) -> list[DoctorListResponse]:
    """
    List active doctors with their specialties.

    - **branch_id**: Only doctors working at this branch
    """
    doctors_list = await CatalogService(cache).list_doctors(db, branch_id)
    return [DoctorListResponse.model_validate(d) for d in doctors_list]


@router.get(
    "/available-slots",
    response_model=list[AvailableSlot],
    summary="List open slots",
)
async def available_slots(
    db: DatabaseSession,
    doctor_id: int = Query(..., alias="doctorId", gt=0),
    slot_date: date = Query(..., alias="date"),
) -> list[AvailableSlot]:
    """
    List a doctor's open slots on a date, earliest first.

    - **doctorId**: Doctor ID
    - **date**: Date as YYYY-MM-DD
    """
    return await SlotRegistry(db).list_available(doctor_id, slot_date)
