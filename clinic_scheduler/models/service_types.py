"""Service type catalog table."""

from uuid import uuid4

from sqlalchemy import Column, Integer, Numeric, Table, Text, Uuid

from clinic_scheduler.models.appointments import metadata

service_types = Table(
    "service_types",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column("name", Text, nullable=False, unique=True),
    Column("duration_minutes", Integer, nullable=False, server_default="60"),
    Column("price", Numeric(10, 2), nullable=False, server_default="0"),
    Column("category", Text, nullable=True),
)
