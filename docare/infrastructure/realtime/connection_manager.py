import logging
from typing import Any, Dict, Iterable, Optional

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)


class ConnectionManager:
    """In-memory map of online users to their socket.

    One socket per user; a new connection replaces the previous one. State is
    local to this process and lost on restart.
    """

    def __init__(self) -> None:
        self.active_connections: Dict[str, WebSocket] = {}

    def connect(self, user_id: str, websocket: WebSocket) -> Optional[WebSocket]:
        previous = self.active_connections.get(user_id)
        self.active_connections[user_id] = websocket
        logger.info(f"User {user_id} connected to realtime channel")
        return previous

    def disconnect(self, user_id: str, websocket: Optional[WebSocket] = None) -> None:
        current = self.active_connections.get(user_id)
        # Ignore a stale socket closing after it was replaced
        if websocket is not None and current is not websocket:
            return
        self.active_connections.pop(user_id, None)
        logger.info(f"User {user_id} disconnected from realtime channel")

    def is_online(self, user_id: str) -> bool:
        return user_id in self.active_connections

    def online_users(self) -> list:
        return list(self.active_connections)

    async def send_to_user(self, user_id: str, event: str, data: Any) -> bool:
        websocket = self.active_connections.get(user_id)
        if websocket is None:
            return False
        try:
            await websocket.send_json({"event": event, "data": jsonable_encoder(data)})
            return True
        except Exception as e:
            logger.warning(f"Dropping realtime connection for {user_id}: {e}")
            self.disconnect(user_id, websocket)
            return False

    async def broadcast(self, event: str, data: Any, exclude: Iterable[str] = ()) -> int:
        skip = set(exclude)
        delivered = 0
        for user_id in list(self.active_connections):
            if user_id in skip:
                continue
            if await self.send_to_user(user_id, event, data):
                delivered += 1
        return delivered


manager = ConnectionManager()
