import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from ..application.services.messaging_service import MessagingService, message_view
from ..db.session import engine
from ..dependencies import authenticate_token
from ..exceptions import APIException
from ..infrastructure.persistence.sqlalchemy.repositories.messages_repository_sql import SqlMessagesRepository
from ..infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from ..infrastructure.realtime.connection_manager import ConnectionManager, manager
from ..schemas.messages.message import MessageCreate

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])

# Close code for a rejected handshake
POLICY_VIOLATION = 1008


def _authenticate(token: Optional[str]) -> str:
    if not token:
        raise APIException(401, "No authentication token provided")
    with Session(engine) as session:
        return authenticate_token(token, session).id


def _send_message(sender_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    payload = MessageCreate(**data)
    with Session(engine) as session:
        service = MessagingService(repo=SqlMessagesRepository(session), user_repo=SqlUserRepository(session))
        message = service.send(
            sender_id,
            payload.recipient_id,
            payload.content,
            thread_id=payload.thread_id,
            priority=payload.priority,
            reply_to_message_id=payload.reply_to_message_id,
            attachments=payload.attachments,
        )
        return message_view(message)


def _mark_read(user_id: str, message_id: str) -> Dict[str, Any]:
    with Session(engine) as session:
        service = MessagingService(repo=SqlMessagesRepository(session), user_repo=SqlUserRepository(session))
        return message_view(service.mark_read(user_id, message_id))


class RealtimeSession:
    """Dispatches the events of one connected user."""

    def __init__(self, user_id: str, websocket: WebSocket, connections: ConnectionManager):
        self.user_id = user_id
        self.websocket = websocket
        self.connections = connections

    async def reply(self, event: str, data: Any) -> None:
        await self.websocket.send_json({"event": event, "data": jsonable_encoder(data)})

    async def handle(self, event: Optional[str], data: Dict[str, Any]) -> None:
        if event == "message:send":
            view = await run_in_threadpool(_send_message, self.user_id, data)
            await self.connections.send_to_user(view["recipient_id"], "message:received", view)
            await self.reply("message:sent", view)
        elif event in ("typing:start", "typing:stop"):
            recipient_id = data.get("recipient_id")
            if recipient_id:
                await self.connections.send_to_user(recipient_id, event, {
                    "user_id": self.user_id,
                    "thread_id": data.get("thread_id"),
                })
        elif event == "message:read":
            message_id = data.get("message_id")
            if not message_id:
                raise APIException(400, "message_id is required")
            view = await run_in_threadpool(_mark_read, self.user_id, message_id)
            await self.connections.send_to_user(view["sender_id"], "message:read", {
                "message_id": view["id"],
                "thread_id": view["thread_id"],
                "read_by": self.user_id,
                "read_at": view["read_at"],
            })
        elif event == "presence:update":
            await self.connections.broadcast(
                "presence:changed",
                {"user_id": self.user_id, "status": data.get("status", "online")},
                exclude=[self.user_id],
            )
        else:
            raise APIException(400, f"Unknown event: {event}")


@router.websocket("/ws")
async def realtime(websocket: WebSocket, token: Optional[str] = Query(None)):
    try:
        user_id = await run_in_threadpool(_authenticate, token)
    except APIException as e:
        logger.info(f"Rejected realtime connection: {e.detail}")
        await websocket.close(code=POLICY_VIOLATION, reason=str(e.detail))
        return

    await websocket.accept()
    previous = manager.connect(user_id, websocket)
    if previous is not None:
        try:
            await previous.close()
        except RuntimeError:
            # Already closed by the client
            pass
    session = RealtimeSession(user_id, websocket, manager)
    await session.reply("connected", {"user_id": user_id})
    await manager.broadcast("presence:changed", {"user_id": user_id, "status": "online"}, exclude=[user_id])

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
                data = (frame.get("data") or {}) if isinstance(frame, dict) else None
                if not isinstance(data, dict):
                    raise ValueError("frame must be an object with object data")
                await session.handle(frame.get("event"), data)
            except APIException as e:
                await session.reply("error", {"status": e.status_code, "message": e.detail})
            except ValidationError as e:
                await session.reply("error", {"status": 422, "message": "Validation failed", "errors": [
                    {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]} for err in e.errors()
                ]})
            except ValueError:
                await session.reply("error", {"status": 400, "message": "Invalid message format"})
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(user_id, websocket)
        if not manager.is_online(user_id):
            await manager.broadcast("presence:changed", {"user_id": user_id, "status": "offline"}, exclude=[user_id])
