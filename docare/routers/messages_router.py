import logging

from fastapi import APIRouter, Depends, status
from starlette.concurrency import run_in_threadpool

from ..application.services.messaging_service import MessagingService, message_view
from ..db.models.users import User
from ..dependencies import get_current_user, get_messaging_service
from ..exceptions import create_success_response
from ..infrastructure.realtime.connection_manager import manager
from ..schemas.messages.message import MessageCreate, MessageStatusUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messages", tags=["Messages"])


@router.get("/threads")
def list_threads(
    current_user: User = Depends(get_current_user),
    messaging_service: MessagingService = Depends(get_messaging_service),
):
    threads = messaging_service.list_threads(current_user.id)
    return create_success_response(threads, count=len(threads))


@router.get("/{thread_id}")
def get_thread(
    thread_id: str,
    current_user: User = Depends(get_current_user),
    messaging_service: MessagingService = Depends(get_messaging_service),
):
    messages = messaging_service.get_thread(current_user.id, thread_id)
    return create_success_response(messages, count=len(messages))


@router.post("/", status_code=status.HTTP_201_CREATED)
async def send_message(
    payload: MessageCreate,
    current_user: User = Depends(get_current_user),
    messaging_service: MessagingService = Depends(get_messaging_service),
):
    message = await run_in_threadpool(
        messaging_service.send,
        current_user.id,
        payload.recipient_id,
        payload.content,
        thread_id=payload.thread_id,
        priority=payload.priority,
        reply_to_message_id=payload.reply_to_message_id,
        attachments=payload.attachments,
    )
    view = message_view(message)
    delivered = await manager.send_to_user(message.recipient_id, "message:received", view)
    if delivered:
        logger.debug(f"Message {message.id} pushed to online recipient")
    return create_success_response(view)


@router.patch("/{message_id}")
async def update_message_status(
    message_id: str,
    payload: MessageStatusUpdate,
    current_user: User = Depends(get_current_user),
    messaging_service: MessagingService = Depends(get_messaging_service),
):
    message = await run_in_threadpool(messaging_service.update_status, current_user.id, message_id, payload.status)
    if payload.status == "read":
        await manager.send_to_user(message.sender_id, "message:read", {
            "message_id": message.id,
            "thread_id": message.thread_id,
            "read_by": current_user.id,
            "read_at": message.read_at.isoformat() if message.read_at else None,
        })
    return create_success_response(message_view(message))
