# docare/db/models/audit/audit_log.py
from typing import Any, Dict, Optional
from sqlmodel import SQLModel, Field, Column, JSON
from datetime import datetime
import uuid


class AuditLog(SQLModel, table=True):
    """Append-only record of an action taken against the API."""

    __tablename__ = "audit_logs"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: Optional[str] = Field(default=None, index=True)
    action: str = Field(max_length=100, index=True)
    resource_type: Optional[str] = Field(default=None, max_length=100)
    resource_id: Optional[str] = Field(default=None, max_length=36)
    ip_address: Optional[str] = Field(default=None, max_length=45)
    user_agent: Optional[str] = Field(default=None)
    request_id: Optional[str] = Field(default=None, max_length=36)
    status: str = Field(default="success", max_length=20)
    error_message: Optional[str] = Field(default=None)
    # "metadata" is reserved on declarative classes
    meta: Dict[str, Any] = Field(default_factory=dict, sa_column=Column("metadata", JSON))
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
