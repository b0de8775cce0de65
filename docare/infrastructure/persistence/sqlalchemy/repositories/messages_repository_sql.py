from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_
from sqlmodel import Session, select

from .....db.models.messaging import Message
from .....application.ports.messages_repo import MessagesRepository


class SqlMessagesRepository(MessagesRepository):
    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, message_id: str) -> Optional[Message]:
        return self.session.get(Message, message_id)

    def list_for_participant(self, user_id: str) -> List[Message]:
        return list(self.session.exec(
            select(Message)
            .where(or_(Message.sender_id == user_id, Message.recipient_id == user_id))
            .order_by(Message.created_at.desc())
        ).all())

    def list_thread(self, thread_id: str, user_id: str) -> List[Message]:
        return list(self.session.exec(
            select(Message)
            .where(Message.thread_id == thread_id)
            .where(or_(Message.sender_id == user_id, Message.recipient_id == user_id))
            .order_by(Message.created_at.asc())
        ).all())

    def add(self, message: Message) -> Message:
        self.session.add(message)
        self.session.commit()
        self.session.refresh(message)
        return message

    def save_all(self, messages: List[Message]) -> None:
        now = datetime.utcnow()
        for m in messages:
            m.updated_at = now
            self.session.add(m)
        self.session.commit()
        for m in messages:
            self.session.refresh(m)
