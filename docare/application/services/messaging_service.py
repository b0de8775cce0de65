from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging
import uuid

from ...db.models.messaging import Message
from ...exceptions import APIException
from ...infrastructure.security import encryption
from ..ports.messages_repo import MessagesRepository
from ..ports.user_repo import UserRepository

logger = logging.getLogger(__name__)

UNDECRYPTABLE_PLACEHOLDER = "[Message content unavailable]"


def safe_decrypt(value: str) -> str:
    try:
        return encryption.decrypt(value) or ""
    except encryption.EncryptionError as e:
        logger.error(f"Failed to decrypt message content: {e}")
        return UNDECRYPTABLE_PLACEHOLDER


def message_view(message: Message) -> Dict[str, Any]:
    return {
        "id": message.id,
        "thread_id": message.thread_id,
        "sender_id": message.sender_id,
        "recipient_id": message.recipient_id,
        "content": safe_decrypt(message.content_encrypted),
        "status": message.status,
        "priority": message.priority,
        "read_at": message.read_at,
        "is_system_message": message.is_system_message,
        "reply_to_message_id": message.reply_to_message_id,
        "attachments": message.attachments or [],
        "created_at": message.created_at,
    }


@dataclass
class MessagingService:
    repo: MessagesRepository
    user_repo: UserRepository

    def list_threads(self, user_id: str) -> List[Dict[str, Any]]:
        threads: Dict[str, Dict[str, Any]] = {}
        # Newest first, so the first message seen per thread is its latest
        for m in self.repo.list_for_participant(user_id):
            entry = threads.get(m.thread_id)
            if entry is None:
                entry = {
                    "thread_id": m.thread_id,
                    "participant_id": m.recipient_id if m.sender_id == user_id else m.sender_id,
                    "last_message": message_view(m),
                    "unread_count": 0,
                }
                threads[m.thread_id] = entry
            if m.recipient_id == user_id and m.status == "sent":
                entry["unread_count"] += 1
        return list(threads.values())

    def get_thread(self, user_id: str, thread_id: str) -> List[Dict[str, Any]]:
        messages = self.repo.list_thread(thread_id, user_id)
        now = datetime.utcnow()
        unread = [m for m in messages if m.recipient_id == user_id and m.status == "sent"]
        for m in unread:
            m.status = "read"
            m.read_at = now
        if unread:
            self.repo.save_all(unread)
        return [message_view(m) for m in messages]

    def send(
        self,
        sender_id: str,
        recipient_id: str,
        content: str,
        thread_id: Optional[str] = None,
        priority: str = "normal",
        reply_to_message_id: Optional[str] = None,
        attachments: Optional[List[dict]] = None,
    ) -> Message:
        if not content or not content.strip():
            raise APIException(400, "Message content is required")
        if recipient_id == sender_id:
            raise APIException(400, "Cannot send a message to yourself")
        recipient = self.user_repo.get_by_id(recipient_id)
        if not recipient or not recipient.is_active:
            raise APIException(404, "Recipient not found")

        message = Message(
            thread_id=thread_id or str(uuid.uuid4()),
            sender_id=sender_id,
            recipient_id=recipient_id,
            content_encrypted=encryption.encrypt(content),
            priority=priority or "normal",
            reply_to_message_id=reply_to_message_id,
            attachments=list(attachments or []),
            status="sent",
        )
        return self.repo.add(message)

    def update_status(self, user_id: str, message_id: str, status: str) -> Message:
        message = self.repo.get_by_id(message_id)
        if not message:
            raise APIException(404, "Message not found")
        if message.recipient_id != user_id:
            raise APIException(403, "Only the recipient can update message status")
        message.status = status
        if status == "read" and message.read_at is None:
            message.read_at = datetime.utcnow()
        self.repo.save_all([message])
        return message

    def mark_read(self, user_id: str, message_id: str) -> Message:
        return self.update_status(user_id, message_id, "read")
