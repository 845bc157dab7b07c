# marketplace/services/ai_chat.py
"""AI assistant chat log: sessions owned by one user, with ordered messages."""
from tortoise.transactions import in_transaction

from marketplace.core.errors import Forbidden, NotFound, ValidationError, parse_id
from marketplace.core.timeutil import iso
from marketplace.models.ai_chat import AI_ROLES, AiChatMessage, AiChatSession
from marketplace.models.user import User


def ai_message_to_dict(m: AiChatMessage) -> dict:
    return {"id": m.id, "role": m.role, "content": m.content, "createdAt": iso(m.created_at)}


def ai_session_to_dict(s: AiChatSession, messages: list[AiChatMessage] | None = None) -> dict:
    data = {
        "id": str(s.id),
        "sessionId": s.session_id,
        "topic": s.topic,
        "isArchived": s.is_archived,
        "createdAt": iso(s.created_at),
        "updatedAt": iso(s.updated_at),
    }
    if messages is not None:
        data["messages"] = [ai_message_to_dict(m) for m in messages]
    return data


async def start_session(user: User, topic: str | None = None, session_id: str | None = None) -> AiChatSession:
    return await AiChatSession.create(user_id=user.id, topic=topic, session_id=session_id)


async def list_sessions(user: User, include_archived: bool = False) -> list[AiChatSession]:
    qs = AiChatSession.filter(user_id=user.id)
    if not include_archived:
        qs = qs.filter(is_archived=False)
    return await qs.order_by("-updated_at")


async def get_session_for(user: User, session_id) -> AiChatSession:
    session = await AiChatSession.get_or_none(id=parse_id(session_id, "Session"))
    if not session:
        raise NotFound("Session not found", code="AI_SESSION_NOT_FOUND")
    if str(session.user_id) != str(user.id):
        raise Forbidden("Access denied", code="AI_SESSION_FORBIDDEN")
    return session


async def session_messages(session: AiChatSession) -> list[AiChatMessage]:
    return await AiChatMessage.filter(session_id=session.id).order_by("created_at", "id")


async def append_message(user: User, session_id, role: str | None, content: str | None) -> AiChatMessage:
    if role not in AI_ROLES:
        raise ValidationError(f"Invalid role: {role}")
    content = (content or "").strip()
    if not content:
        raise ValidationError("Message content is required")
    session = await get_session_for(user, session_id)
    async with in_transaction() as conn:
        message = await AiChatMessage.create(session_id=session.id, role=role, content=content, using_db=conn)
        await session.save(update_fields=["updated_at"], using_db=conn)
    return message


async def set_archived(user: User, session_id, archived: bool) -> AiChatSession:
    session = await get_session_for(user, session_id)
    session.is_archived = archived
    await session.save(update_fields=["is_archived", "updated_at"])
    return session


async def delete_session(user: User, session_id) -> None:
    session = await get_session_for(user, session_id)
    await session.delete()
