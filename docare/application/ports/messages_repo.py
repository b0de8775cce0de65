from typing import List, Optional

from ...db.models.messaging import Message


class MessagesRepository:
    def get_by_id(self, message_id: str) -> Optional[Message]:
        ...

    def list_for_participant(self, user_id: str) -> List[Message]:
        ...

    def list_thread(self, thread_id: str, user_id: str) -> List[Message]:
        ...

    def add(self, message: Message) -> Message:
        ...

    def save_all(self, messages: List[Message]) -> None:
        ...
