# docare/db/models/messaging/message.py
from typing import List, Optional
from sqlmodel import SQLModel, Field, Column, JSON
from datetime import datetime
import uuid

MESSAGE_STATUSES = ("sent", "delivered", "read", "archived")
MESSAGE_PRIORITIES = ("low", "normal", "high", "urgent")


class Message(SQLModel, table=True):
    __tablename__ = "messages"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    thread_id: str = Field(max_length=36, index=True)
    sender_id: str = Field(foreign_key="users.id", index=True)
    recipient_id: str = Field(foreign_key="users.id", index=True)
    content_encrypted: str
    status: str = Field(default="sent", max_length=20)
    read_at: Optional[datetime] = Field(default=None)
    is_system_message: bool = Field(default=False)
    reply_to_message_id: Optional[str] = Field(default=None, foreign_key="messages.id")
    attachments: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    priority: str = Field(default="normal", max_length=10)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
