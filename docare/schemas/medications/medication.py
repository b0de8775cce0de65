# docare/schemas/medications/medication.py
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

MedicationRoute = Literal["oral", "topical", "injection", "inhalation", "other"]
MedicationStatus = Literal["active", "completed", "discontinued"]


class MedicationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    generic_name: Optional[str] = Field(None, max_length=255)
    dosage: str = Field(..., min_length=1, max_length=100)
    frequency: str = Field(..., min_length=1, max_length=100)
    route: MedicationRoute = "oral"
    start_date: datetime
    end_date: Optional[datetime] = None
    pharmacy: Optional[str] = Field(None, max_length=255)
    refills_remaining: int = Field(0, ge=0)
    instructions: Optional[str] = None
    side_effects: Optional[str] = None
    reminder_enabled: bool = False
    reminder_times: List[str] = []
    notes: Optional[str] = None
    prescribed_by: Optional[str] = None


class MedicationUpdate(BaseModel):
    dosage: Optional[str] = Field(None, min_length=1, max_length=100)
    frequency: Optional[str] = Field(None, min_length=1, max_length=100)
    route: Optional[MedicationRoute] = None
    end_date: Optional[datetime] = None
    pharmacy: Optional[str] = Field(None, max_length=255)
    refills_remaining: Optional[int] = Field(None, ge=0)
    instructions: Optional[str] = None
    side_effects: Optional[str] = None
    reminder_enabled: Optional[bool] = None
    reminder_times: Optional[List[str]] = None
    status: Optional[MedicationStatus] = None
    notes: Optional[str] = None


class MedicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    prescribed_by: Optional[str] = None
    name: str
    generic_name: Optional[str] = None
    dosage: str
    frequency: str
    route: str
    start_date: datetime
    end_date: Optional[datetime] = None
    pharmacy: Optional[str] = None
    refills_remaining: int
    instructions: Optional[str] = None
    side_effects: Optional[str] = None
    reminder_enabled: bool
    reminder_times: List[str] = []
    status: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
