# marketplace/api/v1/routers/ai_chats.py
from fastapi import APIRouter, Depends, Query, status

from marketplace.api.v1.deps import get_current_user
from marketplace.models.user import User
from marketplace.schemas.chat import AiMessageIn, AiSessionIn, ArchiveIn
from marketplace.services import ai_chat as ai_service

router = APIRouter(prefix="/ai-chats", tags=["ai-chats"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def start_session(body: AiSessionIn | None = None, user: User = Depends(get_current_user)):
    topic = body.topic if body else None
    session_id = body.session_id if body else None
    session = await ai_service.start_session(user, topic=topic, session_id=session_id)
    return {"success": True, "message": "Session started", "data": ai_service.ai_session_to_dict(session)}


@router.get("")
async def list_sessions(
    include_archived: bool = Query(default=False, alias="includeArchived"),
    user: User = Depends(get_current_user),
):
    """The caller's assistant sessions, most recently active first."""
    rows = await ai_service.list_sessions(user, include_archived=include_archived)
    return {"success": True, "message": "OK", "data": [ai_service.ai_session_to_dict(s) for s in rows]}


@router.get("/{session_id}")
async def get_session(session_id: str, user: User = Depends(get_current_user)):
    session = await ai_service.get_session_for(user, session_id)
    messages = await ai_service.session_messages(session)
    return {"success": True, "message": "OK", "data": ai_service.ai_session_to_dict(session, messages)}


@router.post("/{session_id}/messages", status_code=status.HTTP_201_CREATED)
async def append_message(session_id: str, body: AiMessageIn, user: User = Depends(get_current_user)):
    """
    Log one turn of the conversation.

    Args:
        body: {"role": "user" | "assistant", "content": str}
    """
    message = await ai_service.append_message(user, session_id, body.role, body.content)
    return {"success": True, "message": "Message saved", "data": ai_service.ai_message_to_dict(message)}


@router.patch("/{session_id}/archive")
async def archive_session(session_id: str, body: ArchiveIn | None = None, user: User = Depends(get_current_user)):
    archived = body.archived if body is not None else True
    session = await ai_service.set_archived(user, session_id, archived)
    return {"success": True, "message": "Session updated", "data": ai_service.ai_session_to_dict(session)}


@router.delete("/{session_id}")
async def delete_session(session_id: str, user: User = Depends(get_current_user)):
    await ai_service.delete_session(user, session_id)
    return {"success": True, "message": "Session deleted", "data": None}
