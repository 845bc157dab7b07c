# marketplace/models/chat.py
"""
Database models for user-to-user chat.
A ChatThread belongs to exactly one unordered pair of users; its messages
live in ChatMessage rows ordered by creation time.
"""
import uuid
from tortoise import fields, models

def make_pair_key(a, b) -> str:
    """Order-independent key for a pair of participant ids."""
    first, second = sorted((str(a), str(b)))
    return f"{first}:{second}"

class ChatThread(models.Model):
    """
    Chat thread database model.

    - sender_root / receiver_root: participants, fixed at creation (order not meaningful)
    - pair_key: sorted participant ids; the unique index allows one thread per pair
    - product: optional product context, only set when the thread is created
    - updated_at: bumped whenever a message is appended (inbox ordering)
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    sender_root = fields.ForeignKeyField("models.User", related_name="threads_started", on_delete=fields.CASCADE)
    receiver_root = fields.ForeignKeyField("models.User", related_name="threads_received", on_delete=fields.CASCADE)
    pair_key = fields.CharField(max_length=80, unique=True)
    product = fields.ForeignKeyField("models.Product", related_name="chat_threads", null=True, on_delete=fields.SET_NULL)
    is_archived = fields.BooleanField(default=False)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "chat_threads"

    def has_participant(self, user_id) -> bool:
        uid = str(user_id)
        return uid in (str(self.sender_root_id), str(self.receiver_root_id))


class ChatMessage(models.Model):
    id = fields.IntField(pk=True)  # monotonic, breaks created_at ties
    thread = fields.ForeignKeyField("models.ChatThread", related_name="messages", on_delete=fields.CASCADE)
    author = fields.ForeignKeyField("models.User", related_name="chat_messages", on_delete=fields.CASCADE)
    text = fields.TextField()
    is_read = fields.BooleanField(default=False)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "chat_messages"
