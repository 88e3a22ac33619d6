"""Read-only reporting projections over appointments."""

from datetime import date

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.models.appointments import appointments
from clinic_booking.models.branches import branches
from clinic_booking.models.patients import patients
from clinic_booking.models.staff import staff
from clinic_booking.models.time_slots import time_slots
from clinic_booking.schemas.reports import (
    BranchSummaryRow,
    DoctorRevenueRow,
    OutstandingBalanceRow,
)


def _count_status(status: str):
    return func.coalesce(func.sum(case((appointments.c.status == status, 1), else_=0)), 0)


class ReportAggregator:
    """Aggregates over finalized appointment data; never writes."""

    def __init__(self, db: AsyncSession):
        """Initialize aggregator with database session."""
        self.db = db

    async def branch_summary(self, slot_date: date | None = None) -> list[BranchSummaryRow]:
        """Appointment counts per branch and slot date."""
        stmt = (
            select(
                branches.c.id.label("branch_id"),
                branches.c.name.label("branch_name"),
                time_slots.c.slot_date,
                func.count(appointments.c.id).label("total_appointments"),
                _count_status("scheduled").label("scheduled"),
                _count_status("completed").label("completed"),
                _count_status("cancelled").label("cancelled"),
            )
            .select_from(
                appointments.join(time_slots, appointments.c.slot_id == time_slots.c.id)
                .join(staff, appointments.c.doctor_id == staff.c.id)
                .join(branches, staff.c.branch_id == branches.c.id)
            )
            .group_by(branches.c.id, branches.c.name, time_slots.c.slot_date)
            .order_by(time_slots.c.slot_date, branches.c.name)
        )
        if slot_date:
            stmt = stmt.where(time_slots.c.slot_date == slot_date)

        result = await self.db.execute(stmt)
        return [BranchSummaryRow.model_validate(dict(row)) for row in result.mappings().all()]

    async def doctor_revenue(self, branch_id: int | None = None) -> list[DoctorRevenueRow]:
        """Completed appointments and fee totals per doctor."""
        stmt = (
            select(
                staff.c.id.label("doctor_id"),
                staff.c.name.label("doctor_name"),
                branches.c.name.label("branch_name"),
                func.count(appointments.c.id).label("completed_appointments"),
                func.coalesce(func.sum(appointments.c.fee), 0).label("total_revenue"),
            )
            .select_from(
                appointments.join(staff, appointments.c.doctor_id == staff.c.id).outerjoin(
                    branches, staff.c.branch_id == branches.c.id
                )
            )
            .where(appointments.c.status == "completed")
            .group_by(staff.c.id, staff.c.name, branches.c.name)
            .order_by(staff.c.name)
        )
        if branch_id is not None:
            stmt = stmt.where(staff.c.branch_id == branch_id)

        result = await self.db.execute(stmt)
        return [DoctorRevenueRow.model_validate(dict(row)) for row in result.mappings().all()]

    async def outstanding_balance(self) -> list[OutstandingBalanceRow]:
        """Patients who owe money for completed appointments."""
        balance = func.sum(appointments.c.fee - appointments.c.amount_paid)
        stmt = (
            select(
                patients.c.id.label("patient_id"),
                patients.c.patient_number,
                patients.c.name.label("patient_name"),
                balance.label("outstanding_balance"),
            )
            .select_from(appointments.join(patients, appointments.c.patient_id == patients.c.id))
            .where(appointments.c.status == "completed")
            .group_by(patients.c.id, patients.c.patient_number, patients.c.name)
            .having(balance > 0)
            .order_by(patients.c.name)
        )

        result = await self.db.execute(stmt)
        return [OutstandingBalanceRow.model_validate(dict(row)) for row in result.mappings().all()]
