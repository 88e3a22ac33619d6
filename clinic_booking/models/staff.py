"""Staff, specialty and doctor-specialty tables using SQLAlchemy Core."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    func,
    text,
)

from clinic_booking.models.base import metadata

DOCTOR_ROLE = "doctor"

staff = Table(
    "staff",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("employee_id", String(50), nullable=False, unique=True, index=True),
    Column("name", String(200), nullable=False),
    # "doctor" or any other staff role
    Column("role", String(50), nullable=False, index=True),
    Column("branch_id", Integer, ForeignKey("branches.id"), nullable=True, index=True),
    Column("consultation_fee", Numeric(10, 2), nullable=False, server_default=text("0")),
    Column("is_active", Boolean, nullable=False, server_default=text("true")),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)

specialties = Table(
    "specialties",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False, unique=True),
)

doctor_specialties = Table(
    "doctor_specialties",
    metadata,
    Column(
        "doctor_id",
        Integer,
        ForeignKey("staff.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "specialty_id",
        Integer,
        ForeignKey("specialties.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)
