"""Appointment schemas for request/response validation."""

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_serializer


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED})


class BookingRequest(BaseModel):
    """Schema for booking a slot."""

    doctor_id: int = Field(..., gt=0)
    slot_id: int = Field(..., gt=0)
    appointment_type: str = Field(..., min_length=1, max_length=50)


class BookingResult(BaseModel):
    """Schema returned after a successful booking."""

    success: bool = True
    appointment_id: int
    appointment_number: str
    message: str = "Appointment booked successfully"


class AppointmentStatusUpdate(BaseModel):
    """Schema for a doctor changing appointment status."""

    status: AppointmentStatus
    consultation_notes: str | None = Field(None, max_length=5000)
    diagnosis: str | None = Field(None, max_length=2000)


class AppointmentResponse(BaseModel):
    """Schema for a stored appointment."""

    id: int
    appointment_number: str
    patient_id: int
    doctor_id: int
    slot_id: int
    appointment_type: str
    status: AppointmentStatus
    consultation_notes: str | None = None
    diagnosis: str | None = None
    fee: Decimal = Decimal("0")
    created_at: datetime
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None

    model_config = {"from_attributes": True}

    @field_serializer("fee", when_used="json")
    def serialize_fee(self, value: Decimal) -> float:
        """Serialize Decimal to float for JSON."""
        return float(value)


class PatientAppointmentResponse(AppointmentResponse):
    """Appointment as shown in a patient's booking history."""

    doctor_name: str
    branch_name: str | None = None
    slot_date: date
    slot_time: time
    duration_minutes: int


class DoctorAppointmentResponse(AppointmentResponse):
    """Appointment as shown on a doctor's schedule."""

    patient_name: str
    patient_number: str
    slot_date: date
    slot_time: time
    duration_minutes: int
