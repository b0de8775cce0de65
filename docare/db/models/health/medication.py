# docare/db/models/health/medication.py
from typing import List, Optional
from sqlmodel import SQLModel, Field, Column, JSON
from datetime import datetime
import uuid

MEDICATION_ROUTES = ("oral", "topical", "injection", "inhalation", "other")
MEDICATION_STATUSES = ("active", "completed", "discontinued")


class Medication(SQLModel, table=True):
    __tablename__ = "medications"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    prescribed_by: Optional[str] = Field(default=None, foreign_key="users.id")
    name: str = Field(max_length=255)
    generic_name: Optional[str] = Field(default=None, max_length=255)
    dosage: str = Field(max_length=100)
    frequency: str = Field(max_length=100)
    route: str = Field(default="oral", max_length=20)
    start_date: datetime
    end_date: Optional[datetime] = Field(default=None)
    pharmacy: Optional[str] = Field(default=None, max_length=255)
    refills_remaining: int = Field(default=0, ge=0)
    instructions: Optional[str] = Field(default=None)
    side_effects: Optional[str] = Field(default=None)
    reminder_enabled: bool = Field(default=False)
    reminder_times: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    status: str = Field(default="active", max_length=20, index=True)
    notes: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
