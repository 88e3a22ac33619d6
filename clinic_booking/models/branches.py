"""Branch table model using SQLAlchemy Core."""

from sqlalchemy import Column, DateTime, Integer, String, Table, Text, func

from clinic_booking.models.base import metadata

branches = Table(
    "branches",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False, unique=True),
    Column("location", Text),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
