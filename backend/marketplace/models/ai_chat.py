# marketplace/models/ai_chat.py
import uuid
from tortoise import fields, models

AI_ROLES = ("user", "assistant")

class AiChatSession(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    user = fields.ForeignKeyField("models.User", related_name="ai_sessions", on_delete=fields.CASCADE)
    session_id = fields.CharField(max_length=128, null=True)  # client-side session handle
    topic = fields.CharField(max_length=256, null=True)
    is_archived = fields.BooleanField(default=False)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "ai_chat_sessions"


class AiChatMessage(models.Model):
    id = fields.IntField(pk=True)
    session = fields.ForeignKeyField("models.AiChatSession", related_name="messages", on_delete=fields.CASCADE)
    role = fields.CharField(max_length=16)  # "user" | "assistant"
    content = fields.TextField()
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "ai_chat_messages"
