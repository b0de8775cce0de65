# docare/schemas/appointments/appointment.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

AppointmentType = Literal["video", "in-person", "phone", "chat"]
AppointmentStatus = Literal["scheduled", "confirmed", "in-progress", "completed", "cancelled", "no-show"]


class AppointmentCreate(BaseModel):
    provider_id: str = Field(..., min_length=1)
    appointment_type: AppointmentType
    scheduled_start: datetime
    scheduled_end: datetime
    reason: Optional[str] = Field(None, max_length=2000)
    notes: Optional[str] = Field(None, max_length=5000)
    location: Optional[str] = Field(None, max_length=255)


class AppointmentUpdate(BaseModel):
    scheduled_start: Optional[datetime] = None
    scheduled_end: Optional[datetime] = None
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = Field(None, max_length=5000)
    cancellation_reason: Optional[str] = Field(None, max_length=2000)


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    patient_id: str
    provider_id: str
    appointment_type: str
    status: str
    scheduled_start: datetime
    scheduled_end: datetime
    reason: Optional[str] = None
    notes: Optional[str] = None
    location: Optional[str] = None
    video_room_id: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_by: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TimeSlot(BaseModel):
    start: datetime
    end: datetime
