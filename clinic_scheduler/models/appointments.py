"""Appointment tables using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    PrimaryKeyConstraint,
    Table,
    Text,
    Time,
    Uuid,
    false,
    text,
)

# Metadata for all tables
metadata = MetaData()

# Appointments table
appointments = Table(
    "appointments",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    # Primary patient/doctor, mirrored from the first entry of each link list
    Column("patient_id", Uuid, nullable=False),
    Column("doctor_id", Uuid, nullable=False),
    # Slot
    Column("date", Date, nullable=False),
    Column("time", Time, nullable=False),
    # Service snapshot
    Column("service_type", Text, nullable=False),
    Column("price", Numeric(10, 2), nullable=False, server_default="0"),
    Column("notes", Text, nullable=True),
    Column("is_recurring", Boolean, nullable=False, server_default=false()),
    # Status management
    Column("status", Text, nullable=False, server_default="pending"),
    # Audit fields
    Column(
        "created_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    ),
    Column(
        "updated_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    ),
    CheckConstraint(
        "status IN ('pending', 'confirmed', 'completed', 'cancelled')",
        name="appointments_status_check",
    ),
    Index("idx_appointments_date", "date"),
    Index("idx_appointments_doctor_date", "doctor_id", "date"),
)

# Patients linked to an appointment, in booking order
appointment_patients = Table(
    "appointment_patients",
    metadata,
    Column("appointment_id", Uuid, ForeignKey("appointments.id"), nullable=False),
    Column("patient_id", Uuid, nullable=False),
    Column("position", Integer, nullable=False, server_default="0"),
    PrimaryKeyConstraint("appointment_id", "patient_id", name="appointment_patients_pkey"),
    Index("idx_appointment_patients_patient", "patient_id"),
)

# Doctors linked to an appointment, in booking order
appointment_doctors = Table(
    "appointment_doctors",
    metadata,
    Column("appointment_id", Uuid, ForeignKey("appointments.id"), nullable=False),
    Column("doctor_id", Uuid, nullable=False),
    Column("position", Integer, nullable=False, server_default="0"),
    PrimaryKeyConstraint("appointment_id", "doctor_id", name="appointment_doctors_pkey"),
    Index("idx_appointment_doctors_doctor", "doctor_id"),
)
