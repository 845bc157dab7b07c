# marketplace/services/admins.py
"""
Admin directory: registration, login, partial update and removal of
back-office accounts.

Passwords are only ever stored as argon2 hashes and never leave this module;
``admin_to_dict`` is the only serialisation used by the API.
"""
import logging

from tortoise.exceptions import IntegrityError
from tortoise.expressions import Q

from marketplace.core.errors import Conflict, Forbidden, NotFound, Unauthorized, ValidationError, parse_id
from marketplace.core.security import KIND_ADMIN, create_access_token, hash_password, verify_password
from marketplace.core.timeutil import iso, utc_now
from marketplace.models.admin import ADMIN_ROLES, ADMIN_STATUSES, Admin

logger = logging.getLogger("uvicorn.error")

INVALID_CREDENTIALS = "Incorrect email or password"

# Fields an admin record may change through the generic update. Password
# rotation is deliberately absent.
UPDATABLE_FIELDS = ("name", "email", "role", "status", "photo_url")


def admin_to_dict(a: Admin) -> dict:
    return {
        "id": str(a.id),
        "name": a.name,
        "email": a.email,
        "role": a.role,
        "status": a.status,
        "photoUrl": a.photo_url,
        "lastLoginAt": iso(a.last_login_at),
        "createdAt": iso(a.created_at),
        "updatedAt": iso(a.updated_at),
    }


def _check_enum(value: str, allowed: tuple, field: str) -> None:
    if value not in allowed:
        raise ValidationError(f"Invalid {field}: {value}", code="INVALID_FIELD")


async def any_admin_exists() -> bool:
    return await Admin.all().exists()


async def register(name: str | None, email: str | None, password: str | None,
                   role: str | None = None, status: str | None = None,
                   photo_url: str | None = None) -> Admin:
    """
    Register a new admin.

    Args:
        name, email, password: required
        role: "super_admin" | "moderator" (default "moderator")
        status: "aktif" | "nonaktif" (default "aktif")

    Raises:
        ValidationError: required field missing or enum value unknown
        Conflict: email already registered
    """
    name = (name or "").strip()
    email = (email or "").strip().lower()
    if not name or not email or not password:
        raise ValidationError("Name, email and password are required")
    role = role or "moderator"
    status = status or "aktif"
    _check_enum(role, ADMIN_ROLES, "role")
    _check_enum(status, ADMIN_STATUSES, "status")

    if await Admin.filter(email=email).exists():
        raise Conflict("Email already registered", code="EMAIL_EXISTS")
    try:
        admin = await Admin.create(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role,
            status=status,
            photo_url=photo_url,
        )
    except IntegrityError:
        raise Conflict("Email already registered", code="EMAIL_EXISTS")
    logger.info("[admins] registered admin id=%s role=%s", admin.id, admin.role)
    return admin


async def login(email: str | None, password: str | None) -> tuple[Admin, str]:
    """
    Authenticate an admin and issue a one-day access token.

    Raises:
        ValidationError: email or password missing
        Unauthorized: unknown email or wrong password (same message for both)
        Forbidden: account is nonaktif
    """
    if not email or not password:
        raise ValidationError("Email and password are required")
    admin = await Admin.get_or_none(email=email.strip().lower())
    if not admin or not verify_password(password, admin.password_hash):
        raise Unauthorized(INVALID_CREDENTIALS, code="AUTH_INVALID_CREDENTIALS")
    if admin.status == "nonaktif":
        raise Forbidden("Your account has been deactivated", code="ACCOUNT_INACTIVE")

    admin.last_login_at = utc_now()
    await admin.save(update_fields=["last_login_at"])
    logger.info("[admins] login id=%s", admin.id)
    return admin, create_access_token(str(admin.id), admin.role, KIND_ADMIN)


async def list_admins(offset: int, limit: int, q: str | None = None) -> tuple[list[Admin], int]:
    qs = Admin.all().order_by("-created_at")
    if q:
        qs = qs.filter(Q(name__icontains=q) | Q(email__icontains=q))
    total = await qs.count()
    rows = await qs.offset(offset).limit(limit)
    return rows, total


async def get_admin(admin_id) -> Admin:
    admin = await Admin.get_or_none(id=parse_id(admin_id, "Admin"))
    if not admin:
        raise NotFound("Admin not found", code="ADMIN_NOT_FOUND")
    return admin


async def _count_active_super_admins() -> int:
    return await Admin.filter(role="super_admin", status="aktif").count()


async def update_admin(admin_id, changes: dict, current: Admin | None = None) -> Admin:
    """
    Apply a partial update. Keys outside UPDATABLE_FIELDS (password included)
    are ignored.

    Demoting to moderator and deactivating are both refused for the caller's
    own account and for the last active super admin.

    Raises:
        NotFound: id does not resolve
        Conflict: new email belongs to another admin
        ValidationError: unknown role/status, blank name/email, or a demotion
            that would leave no active super admin
    """
    admin = await get_admin(admin_id)
    changes = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}

    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationError("Name cannot be empty")
        admin.name = name
    if "email" in changes:
        email = (changes["email"] or "").strip().lower()
        if not email:
            raise ValidationError("Email cannot be empty")
        if email != admin.email:
            if await Admin.filter(email=email).exclude(id=admin.id).exists():
                raise Conflict("Email already in use", code="EMAIL_EXISTS")
            admin.email = email
    if changes.get("role") is not None:
        _check_enum(changes["role"], ADMIN_ROLES, "role")
    if changes.get("status") is not None:
        _check_enum(changes["status"], ADMIN_STATUSES, "status")

    # Cannot demote/deactivate self; cannot demote/deactivate the last super admin
    new_role = changes.get("role") or admin.role
    new_status = changes.get("status") or admin.status
    was_active_super = admin.role == "super_admin" and admin.status == "aktif"
    stays_active_super = new_role == "super_admin" and new_status == "aktif"
    if was_active_super and not stays_active_super:
        if current is not None and current.id == admin.id:
            raise ValidationError("Cannot demote or deactivate yourself", code="CANNOT_DEMOTE_SELF")
        if await _count_active_super_admins() <= 1:
            raise ValidationError("Cannot demote or deactivate the last super admin", code="LAST_ADMIN_FORBIDDEN")
    admin.role = new_role
    admin.status = new_status

    if "photo_url" in changes:
        admin.photo_url = changes["photo_url"]

    try:
        await admin.save()
    except IntegrityError:
        raise Conflict("Email already in use", code="EMAIL_EXISTS")
    return admin


async def delete_admin(admin_id, current: Admin) -> None:
    """
    Remove an admin account.

    Raises:
        NotFound: id does not resolve
        ValidationError: deleting yourself, or the last super admin
    """
    admin = await get_admin(admin_id)
    if admin.id == current.id:
        raise ValidationError("Cannot delete yourself", code="CANNOT_DELETE_SELF")
    if admin.role == "super_admin":
        if await Admin.filter(role="super_admin").count() <= 1:
            raise ValidationError("Cannot delete the last super admin", code="LAST_ADMIN_FORBIDDEN")
    await admin.delete()
    logger.warning("[admins] admin id=%s deleted by id=%s", admin_id, current.id)
