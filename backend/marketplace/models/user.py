# marketplace/models/user.py
"""
Database model for marketplace users (pengguna).
Users are the actors of chat threads, AI chat sessions and ledger transactions.
"""
import uuid
from tortoise import fields, models

USER_ROLES = ("pembeli", "penjual", "keduanya")  # buyer, seller, both
USER_STATUSES = ("aktif", "nonaktif", "banned")

class User(models.Model):
    """
    User database model.

    Relationships:
    - Has many ChatThreads (as either participant)
    - Has many Transactions and AiChatSessions

    Security:
    - Password is stored as a hash (never store plain text passwords)
    - Email must be unique across all users
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    full_name = fields.CharField(max_length=128)
    email = fields.CharField(max_length=256, unique=True, index=True)
    password_hash = fields.CharField(max_length=255)
    phone = fields.CharField(max_length=32, null=True)
    photo_url = fields.CharField(max_length=1024, null=True)
    role = fields.CharField(max_length=16, default="pembeli")
    status = fields.CharField(max_length=16, default="aktif")
    last_login_at = fields.DatetimeField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"
