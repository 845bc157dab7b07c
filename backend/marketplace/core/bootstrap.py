# marketplace/core/bootstrap.py
"""
Bootstrap module for application initialization.
Creates the first super admin on startup when the admin directory is empty.
"""
import logging

from marketplace.config import settings
from marketplace.core.security import hash_password
from marketplace.models.admin import Admin

logger = logging.getLogger("uvicorn.error")

async def ensure_default_admin() -> Admin | None:
    """
    If no admin exists in the database, create a super admin from settings.
    Only takes effect under the following conditions:
      - Currently no admin at all
      - And ADMIN_PASSWORD is set (to avoid using default weak password)
    Environment variables:
      ADMIN_NAME     (default: "Super Admin")
      ADMIN_EMAIL    (default: "admin@example.com")
      ADMIN_PASSWORD (required, otherwise won't create)
    """
    if await Admin.all().exists():
        return None

    if not settings.bootstrap_admin_password:
        logger.warning("[bootstrap] No admin present, but ADMIN_PASSWORD not set -> skip creating default admin.")
        return None

    admin = await Admin.create(
        name=settings.bootstrap_admin_name,
        email=settings.bootstrap_admin_email.strip().lower(),
        password_hash=hash_password(settings.bootstrap_admin_password),
        role="super_admin",
        status="aktif",
    )
    logger.warning("[bootstrap] Created default super admin -> email=%s id=%s", admin.email, admin.id)
    return admin
