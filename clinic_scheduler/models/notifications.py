"""Notification records addressed to doctors."""

from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Index,
    String,
    Table,
    Text,
    Uuid,
    text,
)

from clinic_scheduler.models.appointments import metadata

# Appointment id is a plain column: records outlive the appointment until
# they are deleted alongside it.
notification_records = Table(
    "notification_records",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column("recipient_id", Uuid, nullable=False),
    Column("appointment_id", Uuid, nullable=True),
    Column("kind", String(20), nullable=False),
    Column("message", Text, nullable=False),
    Column(
        "created_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    ),
    CheckConstraint(
        "kind IN ('create', 'update', 'cancel', 'reschedule')",
        name="notification_records_kind_check",
    ),
    Index("idx_notification_records_recipient", "recipient_id"),
    Index("idx_notification_records_appointment", "appointment_id"),
)
