"""Time slot table model using SQLAlchemy Core."""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Table,
    Time,
    UniqueConstraint,
    func,
    text,
)

from clinic_booking.models.base import metadata

time_slots = Table(
    "time_slots",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("doctor_id", Integer, ForeignKey("staff.id"), nullable=False),
    Column("slot_date", Date, nullable=False),
    Column("slot_time", Time, nullable=False),
    Column("duration_minutes", Integer, nullable=False, server_default=text("30")),
    # Flipped to false exactly once, by the booking claim
    Column("is_available", Boolean, nullable=False, server_default=text("true")),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    UniqueConstraint("doctor_id", "slot_date", "slot_time", name="uq_time_slots_doctor_date_time"),
)
