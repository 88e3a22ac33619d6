"""Reporting projection schemas."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, field_serializer


class BranchSummaryRow(BaseModel):
    """Appointment counts for one branch on one day."""

    branch_id: int
    branch_name: str
    slot_date: date
    total_appointments: int
    scheduled: int
    completed: int
    cancelled: int


class DoctorRevenueRow(BaseModel):
    """Revenue earned by one doctor from completed appointments."""

    doctor_id: int
    doctor_name: str
    branch_name: str | None = None
    completed_appointments: int
    total_revenue: Decimal

    @field_serializer("total_revenue", when_used="json")
    def serialize_revenue(self, value: Decimal) -> float:
        """Serialize Decimal to float for JSON."""
        return float(value)


class OutstandingBalanceRow(BaseModel):
    """Unpaid amount owed by one patient."""

    patient_id: int
    patient_number: str
    patient_name: str
    outstanding_balance: Decimal

    @field_serializer("outstanding_balance", when_used="json")
    def serialize_balance(self, value: Decimal) -> float:
        """Serialize Decimal to float for JSON."""
        return float(value)
