"""Create scheduling tables.

Revision ID: 001
Revises:
Create Date: 2026-01-12 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    """Upgrade database schema."""
    # Appointments
    op.create_table(
        "appointments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("patient_id", sa.Uuid(), nullable=False),
        sa.Column("doctor_id", sa.Uuid(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time", sa.Time(), nullable=False),
        sa.Column("service_type", sa.Text(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), server_default="0", nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_recurring", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("status", sa.Text(), server_default="pending", nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'completed', 'cancelled')",
            name="appointments_status_check",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_appointments_date", "appointments", ["date"])
    op.create_index("idx_appointments_doctor_date", "appointments", ["doctor_id", "date"])

    # Link tables
    for table, column in (
        ("appointment_patients", "patient_id"),
        ("appointment_doctors", "doctor_id"),
    ):
        op.create_table(
            table,
            sa.Column("appointment_id", sa.Uuid(), nullable=False),
            sa.Column(column, sa.Uuid(), nullable=False),
            sa.Column("position", sa.Integer(), server_default="0", nullable=False),
            sa.ForeignKeyConstraint(["appointment_id"], ["appointments.id"]),
            sa.PrimaryKeyConstraint("appointment_id", column, name=f"{table}_pkey"),
        )
    op.create_index("idx_appointment_patients_patient", "appointment_patients", ["patient_id"])
    op.create_index("idx_appointment_doctors_doctor", "appointment_doctors", ["doctor_id"])

    # Catalog and directory
    op.create_table(
        "service_types",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), server_default="60", nullable=False),
        sa.Column("price", sa.Numeric(10, 2), server_default="0", nullable=False),
        sa.Column("category", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_table(
        "people",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("phone", sa.String(length=30), nullable=True),
        sa.CheckConstraint("role IN ('patient', 'doctor')", name="people_role_check"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_people_role", "people", ["role"])

    # Notification records and justifications
    op.create_table(
        "notification_records",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("recipient_id", sa.Uuid(), nullable=False),
        sa.Column("appointment_id", sa.Uuid(), nullable=True),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        _timestamp("created_at"),
        sa.CheckConstraint(
            "kind IN ('create', 'update', 'cancel', 'reschedule')",
            name="notification_records_kind_check",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_notification_records_recipient", "notification_records", ["recipient_id"]
    )
    op.create_index(
        "idx_notification_records_appointment", "notification_records", ["appointment_id"]
    )

    op.create_table(
        "justifications",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("appointment_id", sa.Uuid(), nullable=False),
        sa.Column("doctor_id", sa.Uuid(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_justifications_doctor", "justifications", ["doctor_id"])
    op.create_index("idx_justifications_appointment", "justifications", ["appointment_id"])


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table("justifications")
    op.drop_table("notification_records")
    op.drop_table("people")
    op.drop_table("service_types")
    op.drop_table("appointment_doctors")
    op.drop_table("appointment_patients")
    op.drop_table("appointments")
