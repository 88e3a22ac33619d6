"""Counters backing generated identifiers."""

from sqlalchemy import Column, Integer, String, Table, text

from clinic_booking.models.base import metadata

# One row per (counter name, period); incremented in the caller's transaction
identifier_sequences = Table(
    "identifier_sequences",
    metadata,
    Column("name", String(50), primary_key=True),
    # e.g. "2024-05-01" for daily counters, "" for never-resetting ones
    Column("period", String(20), primary_key=True),
    Column("last_value", Integer, nullable=False, server_default=text("0")),
)
