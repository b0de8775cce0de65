# docare/schemas/messages/message.py
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

MessageStatus = Literal["sent", "delivered", "read", "archived"]
MessagePriority = Literal["low", "normal", "high", "urgent"]


class MessageCreate(BaseModel):
    recipient_id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, max_length=10000)
    thread_id: Optional[str] = Field(None, max_length=36)
    priority: MessagePriority = "normal"
    reply_to_message_id: Optional[str] = None
    attachments: List[Dict[str, Any]] = []


class MessageStatusUpdate(BaseModel):
    status: MessageStatus
