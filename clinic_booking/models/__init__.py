"""Database models."""

from clinic_booking.models.appointments import appointments
from clinic_booking.models.base import metadata
from clinic_booking.models.branches import branches
from clinic_booking.models.patients import patients
from clinic_booking.models.sequences import identifier_sequences
from clinic_booking.models.staff import DOCTOR_ROLE, doctor_specialties, specialties, staff
from clinic_booking.models.time_slots import time_slots

__all__ = [
    "DOCTOR_ROLE",
    "appointments",
    "branches",
    "doctor_specialties",
    "identifier_sequences",
    "metadata",
    "patients",
    "specialties",
    "staff",
    "time_slots",
]
