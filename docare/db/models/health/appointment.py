# docare/db/models/health/appointment.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

APPOINTMENT_TYPES = ("video", "in-person", "phone", "chat")
APPOINTMENT_STATUSES = ("scheduled", "confirmed", "in-progress", "completed", "cancelled", "no-show")
# Statuses that hold a provider's time slot
ACTIVE_APPOINTMENT_STATUSES = ("scheduled", "confirmed", "in-progress")


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    patient_id: str = Field(foreign_key="users.id", index=True)
    provider_id: str = Field(foreign_key="users.id", index=True)
    appointment_type: str = Field(max_length=20)
    status: str = Field(default="scheduled", max_length=20, index=True)
    scheduled_start: datetime = Field(index=True)
    scheduled_end: datetime
    reason: Optional[str] = Field(default=None)
    notes: Optional[str] = Field(default=None)
    location: Optional[str] = Field(default=None, max_length=255)
    video_room_id: Optional[str] = Field(default=None, max_length=255)
    cancellation_reason: Optional[str] = Field(default=None)
    cancelled_by: Optional[str] = Field(default=None, foreign_key="users.id")
    cancelled_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
