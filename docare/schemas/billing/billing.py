# docare/schemas/billing/billing.py
from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

TransactionType = Literal["consultation", "prescription", "lab-test", "copay", "other"]
TransactionStatus = Literal["pending", "completed", "failed", "refunded"]
PaymentMethod = Literal["card", "insurance", "bank_transfer", "cash", "other"]


class TransactionCreate(BaseModel):
    amount_cents: int = Field(..., ge=0)
    type: TransactionType
    payment_method: PaymentMethod
    currency: Literal["USD"] = "USD"
    description: Optional[str] = Field(None, max_length=1000)
    appointment_id: Optional[str] = None
    metadata: Dict[str, Any] = {}


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    appointment_id: Optional[str] = None
    amount_cents: int
    currency: str
    type: str
    status: str
    payment_method: str
    description: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias="meta")
    processed_at: Optional[datetime] = None
    created_at: datetime
