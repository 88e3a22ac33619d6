"""Generation of human-readable patient and appointment numbers."""

from datetime import date

import structlog
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.config import settings
from clinic_booking.core.exceptions import SequenceExhaustedException
from clinic_booking.models.sequences import identifier_sequences

logger = structlog.get_logger()

APPOINTMENT_SEQUENCE = "appointment"
PATIENT_SEQUENCE = "patient"
PATIENT_PREFIX = "PAT"


def branch_code(branch_name: str) -> str:
    """
    Derive the three-letter code of a branch.

    Only letters count; short names are padded with ``X``.

    >>> branch_code("General")
    'GEN'
    """
    letters = "".join(ch for ch in branch_name if ch.isalpha())
    return letters[:3].upper().ljust(3, "X")


def format_appointment_number(code: str, booking_date: date, sequence: int) -> str:
    """Format ``<code><YYMMDD><sequence>``, e.g. ``GEN2405010001``."""
    width = settings.appointment_sequence_width
    return f"{code}{booking_date:%y%m%d}{sequence:0{width}d}"


def format_patient_number(sequence: int) -> str:
    """Format ``PAT<sequence>``, e.g. ``PAT000001``."""
    return f"{PATIENT_PREFIX}{sequence:0{settings.patient_number_width}d}"


class IdentifierGenerator:
    """
    Hands out identifiers from database-backed counters.

    Each call is a single upsert that increments and returns the counter,
    so concurrent callers never read the same value. The increment belongs
    to the caller's transaction and disappears with its rollback.
    """

    def __init__(self, db: AsyncSession):
        """Initialize generator with database session."""
        self.db = db

    async def _next_value(self, name: str, period: str) -> int:
        dialect = self.db.get_bind().dialect.name
        insert_fn = sqlite_insert if dialect == "sqlite" else pg_insert

        stmt = insert_fn(identifier_sequences).values(name=name, period=period, last_value=1)
        stmt = stmt.on_conflict_do_update(
            index_elements=[identifier_sequences.c.name, identifier_sequences.c.period],
            set_={"last_value": identifier_sequences.c.last_value + 1},
        ).returning(identifier_sequences.c.last_value)

        result = await self.db.execute(stmt)
        return int(result.scalar_one())

    async def next_appointment_number(self, branch_name: str, booking_date: date) -> str:
        """
        Next appointment number for a branch on the booking date.

        Raises:
            SequenceExhaustedException: If the day's counter outgrew its width
        """
        sequence = await self._next_value(APPOINTMENT_SEQUENCE, booking_date.isoformat())
        if sequence >= 10**settings.appointment_sequence_width:
            logger.warning("appointment_sequence_exhausted", booking_date=booking_date.isoformat())
            raise SequenceExhaustedException()
        return format_appointment_number(branch_code(branch_name), booking_date, sequence)

    async def next_patient_number(self) -> str:
        """Next patient number."""
        sequence = await self._next_value(PATIENT_SEQUENCE, "")
        return format_patient_number(sequence)
