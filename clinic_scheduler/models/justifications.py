"""Excused absence records authored by doctors."""

from uuid import uuid4

from sqlalchemy import Column, Date, DateTime, Index, Table, Text, Uuid, text

from clinic_scheduler.models.appointments import metadata

justifications = Table(
    "justifications",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column("appointment_id", Uuid, nullable=False),
    Column("doctor_id", Uuid, nullable=False),
    Column("reason", Text, nullable=False),
    Column("description", Text, nullable=False),
    Column("date", Date, nullable=False),
    Column(
        "created_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    ),
    Index("idx_justifications_doctor", "doctor_id"),
    Index("idx_justifications_appointment", "appointment_id"),
)
