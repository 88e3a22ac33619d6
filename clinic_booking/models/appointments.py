"""Appointments table model using SQLAlchemy Core."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    func,
    text,
)

from clinic_booking.models.base import metadata

# Appointments table
appointments = Table(
    "appointments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("appointment_number", String(20), nullable=False, unique=True),
    # Ownership / references
    Column("patient_id", Integer, ForeignKey("patients.id"), nullable=False, index=True),
    Column("doctor_id", Integer, ForeignKey("staff.id"), nullable=False, index=True),
    Column("slot_id", Integer, ForeignKey("time_slots.id"), nullable=False),
    Column("appointment_type", String(50), nullable=False),
    # Status management
    Column(
        "status",
        String(20),
        nullable=False,
        server_default="scheduled",
        index=True,
    ),
    # Consultation outcome
    Column("consultation_notes", Text),
    Column("diagnosis", Text),
    # Billing snapshot
    Column("fee", Numeric(10, 2), nullable=False, server_default=text("0")),
    Column("amount_paid", Numeric(10, 2), nullable=False, server_default=text("0")),
    # Audit fields
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("completed_at", DateTime(timezone=True), nullable=True),
    Column("cancelled_at", DateTime(timezone=True), nullable=True),
    # Constraints
    CheckConstraint(
        "status IN ('scheduled', 'completed', 'cancelled')",
        name="status_check",
    ),
    # At most one live appointment per slot
    Index(
        "uq_appointments_active_slot",
        "slot_id",
        unique=True,
        postgresql_where=text("status <> 'cancelled'"),
        sqlite_where=text("status <> 'cancelled'"),
    ),
)
