"""Initial schema - branches, staff, patients, slots, appointments and report views.

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        "branches",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("location", sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_branches"),
        sa.UniqueConstraint("name", name="uq_branches_name"),
    )

    op.create_table(
        "staff",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("employee_id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False),
        sa.Column("branch_id", sa.Integer(), nullable=True),
        sa.Column(
            "consultation_fee", sa.Numeric(10, 2), server_default=sa.text("0"), nullable=False
        ),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(
            ["branch_id"], ["branches.id"], name="fk_staff_branch_id_branches"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_staff"),
    )
    op.create_index("ix_staff_employee_id", "staff", ["employee_id"], unique=True)
    op.create_index("ix_staff_role", "staff", ["role"])
    op.create_index("ix_staff_branch_id", "staff", ["branch_id"])

    op.create_table(
        "specialties",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_specialties"),
        sa.UniqueConstraint("name", name="uq_specialties_name"),
    )

    op.create_table(
        "doctor_specialties",
        sa.Column("doctor_id", sa.Integer(), nullable=False),
        sa.Column("specialty_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["doctor_id"],
            ["staff.id"],
            name="fk_doctor_specialties_doctor_id_staff",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["specialty_id"],
            ["specialties.id"],
            name="fk_doctor_specialties_specialty_id_specialties",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("doctor_id", "specialty_id", name="pk_doctor_specialties"),
    )

    op.create_table(
        "patients",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("patient_number", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_patients"),
        sa.UniqueConstraint("patient_number", name="uq_patients_patient_number"),
    )
    op.create_index("ix_patients_email", "patients", ["email"], unique=True)

    op.create_table(
        "time_slots",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("doctor_id", sa.Integer(), nullable=False),
        sa.Column("slot_date", sa.Date(), nullable=False),
        sa.Column("slot_time", sa.Time(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), server_default=sa.text("30"), nullable=False),
        sa.Column("is_available", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(["doctor_id"], ["staff.id"], name="fk_time_slots_doctor_id_staff"),
        sa.PrimaryKeyConstraint("id", name="pk_time_slots"),
        sa.UniqueConstraint(
            "doctor_id", "slot_date", "slot_time", name="uq_time_slots_doctor_date_time"
        ),
    )

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("appointment_number", sa.String(length=20), nullable=False),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("doctor_id", sa.Integer(), nullable=False),
        sa.Column("slot_id", sa.Integer(), nullable=False),
        sa.Column("appointment_type", sa.String(length=50), nullable=False),
        sa.Column("status", sa.String(length=20), server_default="scheduled", nullable=False),
        sa.Column("consultation_notes", sa.Text(), nullable=True),
        sa.Column("diagnosis", sa.Text(), nullable=True),
        sa.Column("fee", sa.Numeric(10, 2), server_default=sa.text("0"), nullable=False),
        sa.Column("amount_paid", sa.Numeric(10, 2), server_default=sa.text("0"), nullable=False),
        _created_at(),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('scheduled', 'completed', 'cancelled')",
            name="ck_appointments_status_check",
        ),
        sa.ForeignKeyConstraint(
            ["patient_id"], ["patients.id"], name="fk_appointments_patient_id_patients"
        ),
        sa.ForeignKeyConstraint(["doctor_id"], ["staff.id"], name="fk_appointments_doctor_id_staff"),
        sa.ForeignKeyConstraint(
            ["slot_id"], ["time_slots.id"], name="fk_appointments_slot_id_time_slots"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_appointments"),
        sa.UniqueConstraint("appointment_number", name="uq_appointments_appointment_number"),
    )
    op.create_index("ix_appointments_patient_id", "appointments", ["patient_id"])
    op.create_index("ix_appointments_doctor_id", "appointments", ["doctor_id"])
    op.create_index("ix_appointments_status", "appointments", ["status"])
    # At most one live appointment per slot
    op.create_index(
        "uq_appointments_active_slot",
        "appointments",
        ["slot_id"],
        unique=True,
        postgresql_where=sa.text("status <> 'cancelled'"),
        sqlite_where=sa.text("status <> 'cancelled'"),
    )

    op.create_table(
        "identifier_sequences",
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("period", sa.String(length=20), nullable=False),
        sa.Column("last_value", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.PrimaryKeyConstraint("name", "period", name="pk_identifier_sequences"),
    )

    # Reporting views
    op.execute(
        """
        CREATE VIEW v_branch_appointment_summary AS
        SELECT
            b.id AS branch_id,
            b.name AS branch_name,
            ts.slot_date,
            COUNT(a.id) AS total_appointments,
            SUM(CASE WHEN a.status = 'scheduled' THEN 1 ELSE 0 END) AS scheduled,
            SUM(CASE WHEN a.status = 'completed' THEN 1 ELSE 0 END) AS completed,
            SUM(CASE WHEN a.status = 'cancelled' THEN 1 ELSE 0 END) AS cancelled
        FROM appointments a
        JOIN time_slots ts ON a.slot_id = ts.id
        JOIN staff s ON a.doctor_id = s.id
        JOIN branches b ON s.branch_id = b.id
        GROUP BY b.id, b.name, ts.slot_date
        """
    )
    op.execute(
        """
        CREATE VIEW v_doctor_revenue AS
        SELECT
            s.id AS doctor_id,
            s.name AS doctor_name,
            b.name AS branch_name,
            COUNT(a.id) AS completed_appointments,
            COALESCE(SUM(a.fee), 0) AS total_revenue
        FROM appointments a
        JOIN staff s ON a.doctor_id = s.id
        LEFT JOIN branches b ON s.branch_id = b.id
        WHERE a.status = 'completed'
        GROUP BY s.id, s.name, b.name
        """
    )
    op.execute(
        """
        CREATE VIEW v_patient_outstanding_balance AS
        SELECT
            p.id AS patient_id,
            p.patient_number,
            p.name AS patient_name,
            SUM(a.fee - a.amount_paid) AS outstanding_balance
        FROM appointments a
        JOIN patients p ON a.patient_id = p.id
        WHERE a.status = 'completed'
        GROUP BY p.id, p.patient_number, p.name
        HAVING SUM(a.fee - a.amount_paid) > 0
        """
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.execute("DROP VIEW IF EXISTS v_patient_outstanding_balance")
    op.execute("DROP VIEW IF EXISTS v_doctor_revenue")
    op.execute("DROP VIEW IF EXISTS v_branch_appointment_summary")

    op.drop_table("identifier_sequences")

    op.drop_index("uq_appointments_active_slot", table_name="appointments")
    op.drop_index("ix_appointments_status", table_name="appointments")
    op.drop_index("ix_appointments_doctor_id", table_name="appointments")
    op.drop_index("ix_appointments_patient_id", table_name="appointments")
    op.drop_table("appointments")

    op.drop_table("time_slots")

    op.drop_index("ix_patients_email", table_name="patients")
    op.drop_table("patients")

    op.drop_table("doctor_specialties")
    op.drop_table("specialties")

    op.drop_index("ix_staff_branch_id", table_name="staff")
    op.drop_index("ix_staff_role", table_name="staff")
    op.drop_index("ix_staff_employee_id", table_name="staff")
    op.drop_table("staff")

    op.drop_table("branches")
