# docare/schemas/users/user.py
from datetime import date
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from ..common.common import validate_email_address, validate_phone_number

BloodType = Literal["A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"]


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)

    gender: Optional[str] = Field(None, max_length=50)
    preferred_language: Optional[str] = Field(None, max_length=10)
    timezone: Optional[str] = Field(None, max_length=50)
    avatar_url: Optional[str] = Field(None, max_length=500)
    bio: Optional[str] = Field(None, max_length=2000)
    insurance_provider: Optional[str] = Field(None, max_length=255)
    primary_physician: Optional[str] = Field(None, max_length=255)
    allergies: Optional[str] = None
    medical_conditions: Optional[str] = None
    blood_type: Optional[BloodType] = None
    height_cm: Optional[float] = Field(None, gt=0, lt=300)
    weight_kg: Optional[float] = Field(None, gt=0, lt=700)
    emergency_contact_name: Optional[str] = Field(None, max_length=255)
    emergency_contact_phone: Optional[str] = None
    emergency_contact_relationship: Optional[str] = Field(None, max_length=100)
    data_sharing_consent: Optional[bool] = None
    marketing_consent: Optional[bool] = None
    telemetry_consent: Optional[bool] = None

    # Stored encrypted
    date_of_birth: Optional[date] = None
    phone: Optional[str] = None
    address: Optional[Union[Dict[str, Any], str]] = None
    insurance_policy_number: Optional[str] = Field(None, max_length=100)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email_address(v) if v is not None else v

    @field_validator("phone", "emergency_contact_phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_phone_number(v)

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v):
        if v is not None and v > date.today():
            raise ValueError("Date of birth cannot be in the future")
        return v
