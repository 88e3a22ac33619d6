"""Staff reporting endpoints."""

from datetime import date

from fastapi import APIRouter, Query

from clinic_booking.dependencies import CurrentStaff, DatabaseSession
from clinic_booking.schemas.reports import (
    BranchSummaryRow,
    DoctorRevenueRow,
    OutstandingBalanceRow,
)
from clinic_booking.services.report_service import ReportAggregator

router = APIRouter()


@router.get("/branch-summary", response_model=list[BranchSummaryRow])
async def branch_summary(
    current_staff: CurrentStaff,
    db: DatabaseSession,
    slot_date: date | None = Query(None, alias="date"),
) -> list[BranchSummaryRow]:
    """Appointment counts per branch and day."""
    return await ReportAggregator(db).branch_summary(slot_date)


@router.get("/doctor-revenue", response_model=list[DoctorRevenueRow])
async def doctor_revenue(
    current_staff: CurrentStaff,
    db: DatabaseSession,
    branch_id: int | None = Query(None),
) -> list[DoctorRevenueRow]:
    """Revenue per doctor from completed appointments."""
    return await ReportAggregator(db).doctor_revenue(branch_id)


@router.get("/outstanding-balance", response_model=list[OutstandingBalanceRow])
async def outstanding_balance(
    current_staff: CurrentStaff,
    db: DatabaseSession,
) -> list[OutstandingBalanceRow]:
    """Patients with unpaid completed appointments."""
    return await ReportAggregator(db).outstanding_balance()
