# docare/schemas/devices/device.py
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

DeviceType = Literal["fitbit", "apple-health", "google-fit", "withings", "garmin", "oura"]


class DeviceCreate(BaseModel):
    device_type: DeviceType
    device_name: str = Field(..., min_length=1, max_length=255)
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_expires_at: Optional[datetime] = None
    sync_frequency_minutes: int = Field(60, ge=5, le=1440)
    permissions_granted: List[str] = []


class DeviceUpdate(BaseModel):
    device_name: Optional[str] = Field(None, min_length=1, max_length=255)
    is_active: Optional[bool] = None
    sync_frequency_minutes: Optional[int] = Field(None, ge=5, le=1440)
    permissions_granted: Optional[List[str]] = None


class DeviceResponse(BaseModel):
    """OAuth tokens are write-only and never serialised."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    device_type: str
    device_name: str
    is_active: bool
    token_expires_at: Optional[datetime] = None
    last_sync_at: Optional[datetime] = None
    sync_frequency_minutes: int
    permissions_granted: List[str] = []
    created_at: datetime
    updated_at: datetime
