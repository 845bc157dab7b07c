# marketplace/models/admin.py
"""
Database model for administrators.
Admins manage the catalog (provinces, products, promotions) and the ledger.
"""
import uuid
from tortoise import fields, models

ADMIN_ROLES = ("super_admin", "moderator")
ADMIN_STATUSES = ("aktif", "nonaktif")

class Admin(models.Model):
    """
    Admin database model.

    Security:
    - Password is stored as an argon2 hash and never serialised
    - Email must be unique across all admins
    - status="nonaktif" blocks login
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    name = fields.CharField(max_length=128)
    email = fields.CharField(max_length=256, unique=True, index=True)
    password_hash = fields.CharField(max_length=255)
    role = fields.CharField(max_length=16, default="moderator")  # "super_admin" | "moderator"
    status = fields.CharField(max_length=16, default="aktif")  # "aktif" | "nonaktif"
    photo_url = fields.CharField(max_length=1024, null=True)
    last_login_at = fields.DatetimeField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "admins"
