"""Appointment lifecycle and appointment history queries."""

from collections.abc import Callable
from datetime import date, datetime
from typing import Any

import structlog
from sqlalchemy import and_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.config import settings
from clinic_booking.core.exceptions import (
    InvalidTransitionException,
    NotFoundException,
    PersistenceException,
)
from clinic_booking.models.appointments import appointments
from clinic_booking.models.branches import branches
from clinic_booking.models.patients import patients
from clinic_booking.models.staff import staff
from clinic_booking.models.time_slots import time_slots
from clinic_booking.schemas.appointments import (
    TERMINAL_STATUSES,
    AppointmentResponse,
    AppointmentStatus,
    AppointmentStatusUpdate,
    DoctorAppointmentResponse,
    PatientAppointmentResponse,
)
from clinic_booking.services.booking_service import utc_now
from clinic_booking.services.slot_service import SlotRegistry

logger = structlog.get_logger()


class AppointmentLifecycle:
    """
    Governs what happens to an appointment after booking.

    ``scheduled`` may move to ``completed`` or ``cancelled``; both are
    terminal. Only the appointment's own doctor may move it.
    """

    def __init__(
        self,
        db: AsyncSession,
        clock: Callable[[], datetime] = utc_now,
        release_slot_on_cancel: bool | None = None,
    ):
        """Initialize service with database session."""
        self.db = db
        self.clock = clock
        self.release_slot_on_cancel = (
            settings.release_slot_on_cancel
            if release_slot_on_cancel is None
            else release_slot_on_cancel
        )

    async def update_status(
        self,
        appointment_id: int,
        doctor_id: int,
        data: AppointmentStatusUpdate,
    ) -> AppointmentResponse:
        """
        Complete or cancel a scheduled appointment.

        Args:
            appointment_id: Appointment ID
            doctor_id: ID of the doctor making the change
            data: Target status and, for completion, consultation outcome

        Returns:
            Updated appointment

        Raises:
            InvalidTransitionException: If the target is not terminal or the appointment is
                no longer scheduled
            NotFoundException: If the doctor has no such appointment
        """
        if data.status not in TERMINAL_STATUSES:
            raise InvalidTransitionException("Appointments can only be completed or cancelled")

        now = self.clock()
        values: dict[str, Any] = {"status": data.status.value}
        if data.status == AppointmentStatus.COMPLETED:
            values["consultation_notes"] = data.consultation_notes or ""
            values["diagnosis"] = data.diagnosis or ""
            values["completed_at"] = now
        else:
            values["cancelled_at"] = now

        # Guarded on the current status so concurrent transitions cannot both win
        stmt = (
            update(appointments)
            .where(
                and_(
                    appointments.c.id == appointment_id,
                    appointments.c.doctor_id == doctor_id,
                    appointments.c.status == AppointmentStatus.SCHEDULED.value,
                )
            )
            .values(**values)
            .returning(appointments)
        )

        try:
            result = await self.db.execute(stmt)
            row = result.mappings().first()

            if row is None:
                await self.db.rollback()
                await self._raise_for_rejected(appointment_id, doctor_id, data.status)

            if data.status == AppointmentStatus.CANCELLED and self.release_slot_on_cancel:
                await SlotRegistry(self.db).release(row["slot_id"])

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "appointment_status_update_failed",
                appointment_id=appointment_id,
                error=str(e),
            )
            raise PersistenceException() from e

        logger.info(
            "appointment_status_changed",
            appointment_id=appointment_id,
            doctor_id=doctor_id,
            status=data.status.value,
        )
        return AppointmentResponse.model_validate(dict(row))

    async def _raise_for_rejected(
        self,
        appointment_id: int,
        doctor_id: int,
        requested: AppointmentStatus,
    ) -> None:
        result = await self.db.execute(
            select(appointments.c.status).where(
                and_(
                    appointments.c.id == appointment_id,
                    appointments.c.doctor_id == doctor_id,
                )
            )
        )
        current = result.scalar_one_or_none()
        if current is None:
            raise NotFoundException("Appointment not found")

        logger.info(
            "invalid_status_transition",
            appointment_id=appointment_id,
            current=current,
            requested=requested.value,
        )
        raise InvalidTransitionException(f"Cannot change status of a {current} appointment")

    async def list_for_patient(self, patient_id: int) -> list[PatientAppointmentResponse]:
        """
        Booking history of a patient, most recent slot first.

        Args:
            patient_id: Patient ID

        Returns:
            Appointments with doctor, branch and slot details
        """
        stmt = (
            select(
                appointments,
                staff.c.name.label("doctor_name"),
                branches.c.name.label("branch_name"),
                time_slots.c.slot_date,
                time_slots.c.slot_time,
                time_slots.c.duration_minutes,
            )
            .select_from(
                appointments.join(staff, appointments.c.doctor_id == staff.c.id)
                .join(time_slots, appointments.c.slot_id == time_slots.c.id)
                .outerjoin(branches, staff.c.branch_id == branches.c.id)
            )
            .where(appointments.c.patient_id == patient_id)
            .order_by(time_slots.c.slot_date.desc(), time_slots.c.slot_time.desc())
        )

        rows = await self._fetch(stmt)
        return [PatientAppointmentResponse.model_validate(row) for row in rows]

    async def list_for_doctor(
        self,
        doctor_id: int,
        slot_date: date | None = None,
    ) -> list[DoctorAppointmentResponse]:
        """
        A doctor's appointments, optionally limited to one day.

        Args:
            doctor_id: Doctor (staff) ID
            slot_date: Only appointments whose slot falls on this date

        Returns:
            Appointments with patient and slot details, in schedule order
        """
        conditions = [appointments.c.doctor_id == doctor_id]
        if slot_date:
            conditions.append(time_slots.c.slot_date == slot_date)

        stmt = (
            select(
                appointments,
                patients.c.name.label("patient_name"),
                patients.c.patient_number,
                time_slots.c.slot_date,
                time_slots.c.slot_time,
                time_slots.c.duration_minutes,
            )
            .select_from(
                appointments.join(patients, appointments.c.patient_id == patients.c.id).join(
                    time_slots, appointments.c.slot_id == time_slots.c.id
                )
            )
            .where(and_(*conditions))
            .order_by(time_slots.c.slot_date.asc(), time_slots.c.slot_time.asc())
        )

        rows = await self._fetch(stmt)
        return [DoctorAppointmentResponse.model_validate(row) for row in rows]

    async def _fetch(self, stmt) -> list[dict]:
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("appointment_query_failed", error=str(e))
            raise PersistenceException() from e
        return [dict(row) for row in result.mappings().all()]

