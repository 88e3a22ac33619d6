"""Booking service: turns a slot into an appointment in one transaction."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.core.exceptions import (
    DoctorSlotMismatchException,
    NotFoundException,
    PersistenceException,
    SlotUnavailableException,
)
from clinic_booking.models.appointments import appointments
from clinic_booking.models.branches import branches
from clinic_booking.models.staff import DOCTOR_ROLE, staff
from clinic_booking.schemas.appointments import AppointmentStatus, BookingRequest, BookingResult
from clinic_booking.services.identifier_service import IdentifierGenerator
from clinic_booking.services.slot_service import SlotRegistry

logger = structlog.get_logger()


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(UTC)


class BookingService:
    """Service for booking appointments."""

    def __init__(
        self,
        db: AsyncSession,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize service with database session.

        Args:
            db: Session whose transaction scopes the whole booking
            clock: Source of the booking timestamp (and date)
        """
        self.db = db
        self.clock = clock
        self.slots = SlotRegistry(db)
        self.identifiers = IdentifierGenerator(db)

    async def book(self, patient_id: int, data: BookingRequest) -> BookingResult:
        """
        Book a slot for a patient.

        All writes (sequence increment, slot claim, appointment insert)
        commit together or not at all.

        Args:
            patient_id: ID of the booking patient
            data: Doctor, slot and appointment type

        Returns:
            The new appointment's ID and number

        Raises:
            SlotUnavailableException: If the slot is absent, taken or lost to a concurrent booking
            DoctorSlotMismatchException: If the slot belongs to another doctor
            NotFoundException: If the doctor does not exist or is inactive
            PersistenceException: If storage fails
        """
        try:
            booking = await self._book(patient_id, data)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "booking_failed",
                patient_id=patient_id,
                slot_id=data.slot_id,
                error=str(e),
            )
            raise PersistenceException() from e
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "appointment_booked",
            appointment_id=booking.appointment_id,
            appointment_number=booking.appointment_number,
            patient_id=patient_id,
            doctor_id=data.doctor_id,
            slot_id=data.slot_id,
        )
        return booking

    async def _book(self, patient_id: int, data: BookingRequest) -> BookingResult:
        slot = await self.slots.get_slot(data.slot_id)
        if slot is None or not slot["is_available"]:
            raise SlotUnavailableException()

        if slot["doctor_id"] != data.doctor_id:
            raise DoctorSlotMismatchException()

        doctor = await self._get_doctor(data.doctor_id)
        if doctor is None:
            raise NotFoundException("Doctor not found")

        now = self.clock()
        appointment_number = await self.identifiers.next_appointment_number(
            doctor["branch_name"], now.date()
        )

        # The earlier read may be stale; the claim decides
        if not await self.slots.claim(data.slot_id, data.doctor_id):
            raise SlotUnavailableException()

        appointment_id = await self._insert_appointment(
            {
                "appointment_number": appointment_number,
                "patient_id": patient_id,
                "doctor_id": data.doctor_id,
                "slot_id": data.slot_id,
                "appointment_type": data.appointment_type,
                "status": AppointmentStatus.SCHEDULED.value,
                "fee": doctor["consultation_fee"],
                "created_at": now,
            }
        )

        return BookingResult(
            appointment_id=appointment_id,
            appointment_number=appointment_number,
        )

    async def _get_doctor(self, doctor_id: int) -> dict | None:
        stmt = (
            select(
                staff.c.id,
                staff.c.consultation_fee,
                branches.c.name.label("branch_name"),
            )
            .select_from(staff.join(branches, staff.c.branch_id == branches.c.id))
            .where(
                and_(
                    staff.c.id == doctor_id,
                    staff.c.role == DOCTOR_ROLE,
                    staff.c.is_active.is_(True),
                )
            )
        )
        result = await self.db.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row else None

    async def _insert_appointment(self, values: dict[str, Any]) -> int:
        result = await self.db.execute(
            appointments.insert().values(**values).returning(appointments.c.id)
        )
        return int(result.scalar_one())
