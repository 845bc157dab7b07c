# marketplace/api/v1/routers/chats.py
from fastapi import APIRouter, Depends, Response, status

from marketplace.api.v1.deps import get_current_user
from marketplace.models.user import User
from marketplace.schemas.chat import ArchiveIn, SendMessageIn
from marketplace.services import chat as chat_service

router = APIRouter(prefix="/chats", tags=["chats"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def send_message(body: SendMessageIn, response: Response, user: User = Depends(get_current_user)):
    """
    Send a message to another user.

    The first message between two users opens their thread (optionally tied
    to a product); later messages in either direction append to it.

    Args:
        body: Request body containing:
            - receiverId: str (required)
            - text: str (required, non-blank)
            - productId: str | None (used only when the thread is created)

    Returns:
        dict: data = {"thread": {..., "messages": [...]}, "message": {...}, "created": bool}
        Status 201 when a thread was opened, 200 when appended.

    Error codes:
        - VALIDATION_ERROR (400): Missing receiver/text, or messaging yourself
        - USER_NOT_FOUND / PRODUCT_NOT_FOUND (404)
    """
    thread, message, created = await chat_service.send_message(
        user, body.receiver_id, body.text, product_id=body.product_id,
    )
    messages = await chat_service.thread_messages(thread)
    if not created:
        response.status_code = status.HTTP_200_OK
    return {
        "success": True,
        "message": "Message sent",
        "data": {
            "thread": chat_service.thread_to_dict(thread, messages),
            "message": chat_service.message_to_dict(message),
            "created": created,
        },
    }


@router.get("")
async def inbox(user: User = Depends(get_current_user)):
    """Threads the user takes part in, most recently active first."""
    data = await chat_service.list_conversations(user)
    return {"success": True, "message": "OK", "data": data}


@router.get("/{thread_id}")
async def thread_messages(thread_id: str, user: User = Depends(get_current_user)):
    """
    Messages of one thread in the order they were sent.

    Error codes:
        - THREAD_NOT_FOUND (404): Unknown or malformed id
        - THREAD_FORBIDDEN (403): Caller is not a participant
    """
    data = await chat_service.get_thread_messages(user, thread_id)
    return {"success": True, "message": "OK", "data": data}


@router.patch("/{thread_id}/read")
async def mark_read(thread_id: str, user: User = Depends(get_current_user)):
    """Mark every message the caller did not write as read; returns how many changed."""
    updated = await chat_service.mark_read(user, thread_id)
    return {"success": True, "message": "Messages marked as read", "data": {"updated": updated}}


@router.patch("/{thread_id}/archive")
async def archive_thread(thread_id: str, body: ArchiveIn | None = None, user: User = Depends(get_current_user)):
    archived = body.archived if body is not None else True
    thread = await chat_service.set_archived(user, thread_id, archived)
    return {"success": True, "message": "Conversation updated", "data": chat_service.thread_to_dict(thread)}
