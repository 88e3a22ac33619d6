"""Slot registry: availability queries and the atomic slot claim."""

from datetime import date

import structlog
from sqlalchemy import and_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.core.exceptions import PersistenceException
from clinic_booking.models.time_slots import time_slots
from clinic_booking.schemas.slots import AvailableSlot

logger = structlog.get_logger()


class SlotRegistry:
    """Owns time slot rows for the duration of one unit of work."""

    def __init__(self, db: AsyncSession):
        """Initialize registry with database session."""
        self.db = db

    async def list_available(self, doctor_id: int, slot_date: date) -> list[AvailableSlot]:
        """
        List open slots for a doctor on a date, earliest first.

        Args:
            doctor_id: Doctor (staff) ID
            slot_date: Calendar date of the slots

        Returns:
            Open slots ordered by time; empty when there are none

        Raises:
            PersistenceException: If the query fails
        """
        stmt = (
            select(
                time_slots.c.id.label("slot_id"),
                time_slots.c.slot_time.label("time"),
                time_slots.c.duration_minutes,
            )
            .where(
                and_(
                    time_slots.c.doctor_id == doctor_id,
                    time_slots.c.slot_date == slot_date,
                    time_slots.c.is_available.is_(True),
                )
            )
            .order_by(time_slots.c.slot_time.asc())
        )

        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("slot_listing_failed", doctor_id=doctor_id, error=str(e))
            raise PersistenceException() from e

        return [AvailableSlot.model_validate(dict(row)) for row in result.mappings().all()]

    async def get_slot(self, slot_id: int) -> dict | None:
        """Read a slot row without locking it."""
        result = await self.db.execute(select(time_slots).where(time_slots.c.id == slot_id))
        row = result.mappings().first()
        return dict(row) if row else None

    async def claim(self, slot_id: int, expected_doctor_id: int) -> bool:
        """
        Atomically mark a slot as taken.

        The conditional UPDATE is the compare-and-set: the database
        serialises writers on the row, so among concurrent callers for the
        same slot exactly one sees a changed row. Runs in the caller's
        transaction and is undone by its rollback.

        Returns:
            True if this call claimed the slot, False otherwise
        """
        stmt = (
            update(time_slots)
            .where(
                and_(
                    time_slots.c.id == slot_id,
                    time_slots.c.doctor_id == expected_doctor_id,
                    time_slots.c.is_available.is_(True),
                )
            )
            .values(is_available=False)
        )

        result = await self.db.execute(stmt)
        claimed = result.rowcount == 1  # type: ignore[attr-defined]

        if not claimed:
            logger.info("slot_claim_conflict", slot_id=slot_id, doctor_id=expected_doctor_id)

        return claimed

    async def release(self, slot_id: int) -> None:
        """Make a claimed slot bookable again."""
        await self.db.execute(
            update(time_slots).where(time_slots.c.id == slot_id).values(is_available=True)
        )
