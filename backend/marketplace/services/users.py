# marketplace/services/users.py
"""
Marketplace user accounts: registration, login and public summaries.
"""
import logging

from tortoise.exceptions import IntegrityError

from marketplace.core.errors import Conflict, Forbidden, Unauthorized, ValidationError
from marketplace.core.security import KIND_USER, create_access_token, hash_password, verify_password
from marketplace.core.timeutil import iso, utc_now
from marketplace.models.user import USER_ROLES, User

logger = logging.getLogger("uvicorn.error")

INVALID_CREDENTIALS = "Incorrect email or password"


def user_to_dict(u: User) -> dict:
    return {
        "id": str(u.id),
        "fullName": u.full_name,
        "email": u.email,
        "phone": u.phone,
        "photoUrl": u.photo_url,
        "role": u.role,
        "status": u.status,
        "lastLoginAt": iso(u.last_login_at),
        "createdAt": iso(u.created_at),
    }


def user_summary(u: User | None) -> dict | None:
    """The subset of a user that other participants are allowed to see."""
    if u is None:
        return None
    return {"id": str(u.id), "fullName": u.full_name, "photoUrl": u.photo_url}


async def register(full_name: str | None, email: str | None, password: str | None,
                   phone: str | None = None, role: str | None = None) -> User:
    """
    Create a marketplace user.

    Raises:
        ValidationError: full name, email or password missing, or unknown role
        Conflict: email already registered
    """
    full_name = (full_name or "").strip()
    email = (email or "").strip().lower()
    if not full_name or not email or not password:
        raise ValidationError("Full name, email and password are required")
    role = role or "pembeli"
    if role not in USER_ROLES:
        raise ValidationError(f"Invalid role: {role}")

    if await User.filter(email=email).exists():
        raise Conflict("Email already registered", code="EMAIL_EXISTS")
    try:
        return await User.create(
            full_name=full_name,
            email=email,
            password_hash=hash_password(password),
            phone=phone,
            role=role,
            status="aktif",
        )
    except IntegrityError:
        # Lost a race with a concurrent registration of the same email
        raise Conflict("Email already registered", code="EMAIL_EXISTS")


async def login(email: str | None, password: str | None) -> tuple[User, str]:
    """
    Authenticate a user by email/password and issue an access token.

    Unknown email and wrong password raise the same Unauthorized error so the
    response cannot be used to probe for accounts.
    """
    if not email or not password:
        raise ValidationError("Email and password are required")
    user = await User.get_or_none(email=email.strip().lower())
    if not user or not verify_password(password, user.password_hash):
        raise Unauthorized(INVALID_CREDENTIALS, code="AUTH_INVALID_CREDENTIALS")
    if user.status != "aktif":
        raise Forbidden("Account is not active", code="ACCOUNT_INACTIVE")

    user.last_login_at = utc_now()
    await user.save(update_fields=["last_login_at"])
    logger.info("[auth] user login id=%s", user.id)
    return user, create_access_token(str(user.id), user.role, KIND_USER)
