"""Appointment booking and lifecycle endpoints."""

from datetime import date

from fastapi import APIRouter, Query, status

from clinic_booking.dependencies import CurrentDoctor, CurrentPatient, DatabaseSession
from clinic_booking.schemas.appointments import (
    AppointmentResponse,
    AppointmentStatusUpdate,
    BookingRequest,
    BookingResult,
    DoctorAppointmentResponse,
    PatientAppointmentResponse,
)
from clinic_booking.services.appointment_service import AppointmentLifecycle
from clinic_booking.services.booking_service import BookingService

router = APIRouter()


@router.post(
    "/book-appointment",
    response_model=BookingResult,
    status_code=status.HTTP_201_CREATED,
    summary="Book an appointment",
)
async def book_appointment(
    data: BookingRequest,
    current_patient: CurrentPatient,
    db: DatabaseSession,
) -> BookingResult:
    """
    Book a doctor's slot for the logged-in patient.

    Args:
        data: Doctor, slot and appointment type
        current_patient: Authenticated patient
        db: Database session

    Returns:
        The generated appointment number
    """
    return await BookingService(db).book(current_patient.patient_id, data)


@router.get(
    "/my-appointments",
    response_model=list[PatientAppointmentResponse],
    summary="Patient booking history",
)
async def my_appointments(
    current_patient: CurrentPatient,
    db: DatabaseSession,
) -> list[PatientAppointmentResponse]:
    """Booking history of the logged-in patient."""
    return await AppointmentLifecycle(db).list_for_patient(current_patient.patient_id)


@router.get(
    "/doctor-appointments",
    response_model=list[DoctorAppointmentResponse],
    summary="Doctor schedule",
)
async def doctor_appointments(
    current_doctor: CurrentDoctor,
    db: DatabaseSession,
    slot_date: date | None = Query(None, alias="date"),
) -> list[DoctorAppointmentResponse]:
    """
    Appointments of the logged-in doctor.

    - **date**: Only appointments on this day (YYYY-MM-DD)
    """
    return await AppointmentLifecycle(db).list_for_doctor(current_doctor.staff_id, slot_date)


@router.put(
    "/appointments/{appointment_id}/status",
    response_model=AppointmentResponse,
    summary="Complete or cancel an appointment",
)
async def update_appointment_status(
    appointment_id: int,
    data: AppointmentStatusUpdate,
    current_doctor: CurrentDoctor,
    db: DatabaseSession,
) -> AppointmentResponse:
    """
    Move a scheduled appointment to completed or cancelled.

    Args:
        appointment_id: Appointment ID
        data: Target status, consultation notes and diagnosis
        current_doctor: Authenticated doctor owning the appointment
        db: Database session

    Returns:
        Updated appointment
    """
    return await AppointmentLifecycle(db).update_status(
        appointment_id, current_doctor.staff_id, data
    )
