"""Tests for patient and appointment number generation."""

from datetime import date

import pytest
from sqlalchemy import insert, select

from clinic_booking.core.exceptions import SequenceExhaustedException
from clinic_booking.models import appointments, identifier_sequences, time_slots
from clinic_booking.services.identifier_service import (
    IdentifierGenerator,
    branch_code,
    format_appointment_number,
    format_patient_number,
)


@pytest.mark.parametrize(
    "name,code",
    [
        ("General", "GEN"),
        ("westside", "WES"),
        ("St. Mary's", "STM"),
        ("A1", "AXX"),
    ],
)
def test_branch_code(name: str, code: str) -> None:
    assert branch_code(name) == code


def test_format_appointment_number() -> None:
    assert format_appointment_number("GEN", date(2024, 5, 1), 1) == "GEN2405010001"
    assert format_appointment_number("WES", date(2024, 12, 31), 123) == "WES2412310123"


def test_format_patient_number() -> None:
    assert format_patient_number(42) == "PAT000042"


@pytest.mark.asyncio
async def test_numbers_are_sequential(db_session) -> None:
    generator = IdentifierGenerator(db_session)

    first = await generator.next_appointment_number("General", date(2024, 7, 1))
    second = await generator.next_appointment_number("Westside", date(2024, 7, 1))
    next_day = await generator.next_appointment_number("General", date(2024, 7, 2))
    await db_session.commit()

    assert (first, second, next_day) == ("GEN2407010001", "WES2407010002", "GEN2407020001")


@pytest.mark.asyncio
async def test_patient_numbers_continue_from_counter(db_session) -> None:
    """Two patients are seeded, so the next number is 3."""
    generator = IdentifierGenerator(db_session)
    assert await generator.next_patient_number() == "PAT000003"
    assert await generator.next_patient_number() == "PAT000004"


@pytest.mark.asyncio
async def test_rolled_back_numbers_are_reissued(session_factory) -> None:
    async with session_factory() as session:
        await IdentifierGenerator(session).next_patient_number()
        await session.rollback()

    async with session_factory() as session:
        assert await IdentifierGenerator(session).next_patient_number() == "PAT000003"


@pytest.mark.asyncio
async def test_full_day_rejects_booking_and_keeps_slot(book, session_factory) -> None:
    """Once the day reaches 9999 the next booking fails and claims nothing."""
    async with session_factory() as session:
        await session.execute(
            insert(identifier_sequences).values(
                name="appointment", period="2024-05-01", last_value=9999
            )
        )
        await session.commit()

    with pytest.raises(SequenceExhaustedException):
        await book(slot_id=42)

    async with session_factory() as session:
        slot = await session.execute(
            select(time_slots.c.is_available).where(time_slots.c.id == 42)
        )
        assert slot.scalar_one() is True

        counter = await session.execute(
            select(identifier_sequences.c.last_value).where(
                identifier_sequences.c.name == "appointment"
            )
        )
        assert counter.scalar_one() == 9999

        booked = await session.execute(select(appointments.c.id))
        assert booked.first() is None
