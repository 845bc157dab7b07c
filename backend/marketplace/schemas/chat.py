# marketplace/schemas/chat.py
"""
Pydantic schemas for user chat and AI chat endpoints.
"""
from typing import Optional

from .base import CamelModel

__all__ = ["SendMessageIn", "ArchiveIn", "AiSessionIn", "AiMessageIn"]


class SendMessageIn(CamelModel):
    """
    Body of POST /chats.
    receiverId and text are required (checked by the service so the
    response carries a readable message).
    """
    receiver_id: Optional[str] = None
    text: Optional[str] = None
    product_id: Optional[str] = None  # only used when the thread is created


class ArchiveIn(CamelModel):
    archived: bool = True


class AiSessionIn(CamelModel):
    topic: Optional[str] = None
    session_id: Optional[str] = None


class AiMessageIn(CamelModel):
    role: Optional[str] = None  # "user" | "assistant"
    content: Optional[str] = None
