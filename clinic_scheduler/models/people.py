"""Contact directory for patients and doctors."""

from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, Index, String, Table, Text, Uuid

from clinic_scheduler.models.appointments import metadata

people = Table(
    "people",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column("name", Text, nullable=False),
    Column("role", String(20), nullable=False),
    Column("phone", String(30), nullable=True),
    CheckConstraint("role IN ('patient', 'doctor')", name="people_role_check"),
    Index("idx_people_role", "role"),
)
