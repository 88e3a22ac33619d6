"""Patient model definition using SQLAlchemy Core."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    Table,
    Text,
    func,
    text,
)

from clinic_booking.models.base import metadata

patients = Table(
    "patients",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("patient_number", String(20), nullable=False, unique=True),
    Column("name", String(200), nullable=False),
    Column("email", String(255), nullable=False, unique=True, index=True),
    Column("phone", String(20)),
    # bcrypt hash, never the plaintext password
    Column("password_hash", Text, nullable=False),
    Column("is_active", Boolean, nullable=False, server_default=text("true")),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
