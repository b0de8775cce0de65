# docare/db/models/users/profile.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid


class UserProfile(SQLModel, table=True):
    __tablename__ = "user_profiles"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True)

    # Stored as iv:tag:ciphertext
    date_of_birth_encrypted: Optional[str] = Field(default=None)
    phone_encrypted: Optional[str] = Field(default=None)
    address_encrypted: Optional[str] = Field(default=None)
    insurance_policy_number_encrypted: Optional[str] = Field(default=None)

    gender: Optional[str] = Field(default=None, max_length=50)
    preferred_language: str = Field(default="en", max_length=10)
    timezone: str = Field(default="UTC", max_length=50)
    avatar_url: Optional[str] = Field(default=None, max_length=500)
    bio: Optional[str] = Field(default=None)
    insurance_provider: Optional[str] = Field(default=None, max_length=255)
    primary_physician: Optional[str] = Field(default=None, max_length=255)
    allergies: Optional[str] = Field(default=None)
    medical_conditions: Optional[str] = Field(default=None)
    blood_type: Optional[str] = Field(default=None, max_length=5)
    height_cm: Optional[float] = Field(default=None)
    weight_kg: Optional[float] = Field(default=None)
    emergency_contact_name: Optional[str] = Field(default=None, max_length=255)
    emergency_contact_phone: Optional[str] = Field(default=None, max_length=50)
    emergency_contact_relationship: Optional[str] = Field(default=None, max_length=100)

    # Provider-only
    specialty: Optional[str] = Field(default=None, max_length=255, index=True)
    license_number: Optional[str] = Field(default=None, max_length=100)
    years_experience: Optional[int] = Field(default=None)

    data_sharing_consent: bool = Field(default=False)
    marketing_consent: bool = Field(default=False)
    telemetry_consent: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
