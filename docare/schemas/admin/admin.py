# docare/schemas/admin/admin.py
from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..common.common import validate_email_address

UserRole = Literal["patient", "provider", "admin", "super_admin"]
UserStatus = Literal["active", "suspended", "deactivated"]


class AdminUserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
    email_verified: Optional[bool] = None
    mfa_enabled: Optional[bool] = None
    unlock: bool = False


class ProviderCreate(BaseModel):
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    name: str = Field(..., min_length=1, max_length=255)
    specialty: Optional[str] = Field(None, max_length=255)
    license_number: Optional[str] = Field(None, max_length=100)
    years_experience: Optional[int] = Field(None, ge=0, le=80)
    bio: Optional[str] = Field(None, max_length=2000)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email_address(v)


class SettingsUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    symptom_checker_emergency_threshold: Optional[int] = Field(None, ge=1, le=10)
    default_appointment_duration_minutes: Optional[int] = Field(None, ge=5, le=240)
    max_appointments_per_day: Optional[int] = Field(None, ge=1, le=100)
    clinic_open_hour: Optional[int] = Field(None, ge=0, le=23)
    clinic_close_hour: Optional[int] = Field(None, ge=1, le=24)
    require_mfa_for_providers: Optional[bool] = None
    session_timeout_minutes: Optional[int] = Field(None, ge=1, le=1440)


class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    action: str
    resource_type: Optional[str] = None
    resource_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    request_id: Optional[str] = None
    status: str
    error_message: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias="meta")
    created_at: datetime
