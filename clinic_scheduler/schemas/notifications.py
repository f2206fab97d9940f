"""Notification record and dispatch schemas."""

from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class NotificationKind(str, Enum):
    """What happened to the appointment a notification is about."""

    CREATE = "create"
    UPDATE = "update"
    CANCEL = "cancel"
    RESCHEDULE = "reschedule"


class NotificationRecord(BaseModel):
    """Durable notification addressed to a doctor."""

    id: UUID = Field(default_factory=uuid4)
    recipient_id: UUID
    appointment_id: UUID | None = None
    kind: NotificationKind
    message: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    """Schema for a doctor's notification inbox."""

    total: int
    items: list[NotificationRecord]


class OutboundMessage(BaseModel):
    """Rendered message for one recipient."""

    recipient_id: UUID
    recipient_name: str
    role: str
    text: str


class DispatchWarning(BaseModel):
    """Recipients that could not be messaged; the mutation still succeeded."""

    message: str
    recipients: list[str] = Field(default_factory=list)


class DispatchReport(BaseModel):
    """Fan-out summary for one mutation."""

    kind: NotificationKind
    patient_messages: list[OutboundMessage] = Field(default_factory=list)
    doctor_messages: list[OutboundMessage] = Field(default_factory=list)
    records: list[NotificationRecord] = Field(default_factory=list)
    sent: int = 0
    failed: int = 0
    warnings: list[DispatchWarning] = Field(default_factory=list)
