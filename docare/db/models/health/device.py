# docare/db/models/health/device.py
from typing import List, Optional
from sqlmodel import SQLModel, Field, Column, JSON
from datetime import datetime
import uuid

DEVICE_TYPES = ("fitbit", "apple-health", "google-fit", "withings", "garmin", "oura")


class Device(SQLModel, table=True):
    __tablename__ = "devices"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    device_type: str = Field(max_length=50)
    device_name: str = Field(max_length=255)
    is_active: bool = Field(default=True)
    access_token_encrypted: Optional[str] = Field(default=None)
    refresh_token_encrypted: Optional[str] = Field(default=None)
    token_expires_at: Optional[datetime] = Field(default=None)
    last_sync_at: Optional[datetime] = Field(default=None)
    sync_frequency_minutes: int = Field(default=60)
    permissions_granted: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
