# docare/db/models/billing/transaction.py
from typing import Any, Dict, Optional
from sqlmodel import SQLModel, Field, Column, JSON
from datetime import datetime
import uuid

TRANSACTION_TYPES = ("consultation", "prescription", "lab-test", "copay", "other")
TRANSACTION_STATUSES = ("pending", "completed", "failed", "refunded")
PAYMENT_METHODS = ("card", "insurance", "bank_transfer", "cash", "other")


class Transaction(SQLModel, table=True):
    __tablename__ = "transactions"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    appointment_id: Optional[str] = Field(default=None, foreign_key="appointments.id")
    amount_cents: int = Field(ge=0)
    currency: str = Field(default="USD", max_length=3)
    type: str = Field(max_length=20)
    status: str = Field(default="pending", max_length=20, index=True)
    payment_method: str = Field(max_length=20)
    description: Optional[str] = Field(default=None)
    # "metadata" is reserved on declarative classes
    meta: Dict[str, Any] = Field(default_factory=dict, sa_column=Column("metadata", JSON))
    processed_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
