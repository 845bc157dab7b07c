from fastapi import Depends, Header, Query, Request
from marketplace.config import settings
from marketplace.core.errors import Forbidden, Unauthorized
from marketplace.core.security import KIND_ADMIN, KIND_USER, decode_access_token
from marketplace.models.admin import Admin
from marketplace.models.user import User


def _extract_token(request: Request, authorization: str | None) -> str:
    token = None
    # 1) Prioritize Authorization: Bearer xxx
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    # 2) Secondly HttpOnly Cookie: accessToken
    if not token:
        token = request.cookies.get("accessToken")
    if not token:
        raise Unauthorized("Authentication required", code="AUTH_REQUIRED")
    return token


async def get_token_payload(
    request: Request,
    authorization: str | None = Header(default=None),
) -> dict:
    """
    Decode the bearer credential of the current request.

    The token is read from the Authorization header (Bearer) first and from
    the HttpOnly ``accessToken`` cookie as a fallback.

    Raises:
        Unauthorized (401): No token, or the token is invalid/expired
    """
    token = _extract_token(request, authorization)
    try:
        return decode_access_token(token)
    except Exception:
        raise Unauthorized("Invalid or expired token", code="AUTH_INVALID_TOKEN")


async def get_current_admin(payload: dict = Depends(get_token_payload)) -> Admin:
    """
    FastAPI dependency resolving the authenticated admin.

    Raises:
        Forbidden (403): Token belongs to a marketplace user, or the admin is nonaktif
        Unauthorized (401): Admin no longer exists
    """
    if payload.get("kind") != KIND_ADMIN:
        raise Forbidden("Admin access only", code="FORBIDDEN_ADMIN_ONLY")
    admin = await Admin.get_or_none(id=payload.get("sub"))
    if not admin:
        raise Unauthorized("Account not found", code="AUTH_USER_NOT_FOUND")
    if admin.status != "aktif":
        raise Forbidden("Account is deactivated", code="ACCOUNT_INACTIVE")
    return admin


async def require_super_admin(current: Admin = Depends(get_current_admin)) -> Admin:
    """Admin dependency that additionally requires role="super_admin"."""
    if current.role != "super_admin":
        raise Forbidden("Super admin access only", code="FORBIDDEN_SUPER_ADMIN_ONLY")
    return current


async def get_current_user(payload: dict = Depends(get_token_payload)) -> User:
    """
    FastAPI dependency resolving the authenticated marketplace user.

    Usage:
        @router.get("/chats")
        async def inbox(user: User = Depends(get_current_user)):
            ...
    """
    if payload.get("kind") != KIND_USER:
        raise Forbidden("User access only", code="FORBIDDEN_USER_ONLY")
    user = await User.get_or_none(id=payload.get("sub"))
    if not user:
        raise Unauthorized("Account not found", code="AUTH_USER_NOT_FOUND")
    if user.status != "aktif":
        raise Forbidden("Account is not active", code="ACCOUNT_INACTIVE")
    return user


async def get_optional_admin(
    request: Request,
    authorization: str | None = Header(default=None),
) -> Admin | None:
    """
    Resolve the admin behind the request if there is one, else None.
    Used by admin registration, which is open until the first admin exists.
    """
    try:
        payload = decode_access_token(_extract_token(request, authorization))
    except Exception:
        return None
    if payload.get("kind") != KIND_ADMIN:
        return None
    return await Admin.get_or_none(id=payload.get("sub"))


def pagination(
    offset: int = Query(0, ge=0),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
) -> tuple[int, int]:
    return offset, limit


async def get_current_principal(payload: dict = Depends(get_token_payload)) -> Admin | User:
    """Either kind of account: admins are resolved as admins, everyone else as users."""
    if payload.get("kind") == KIND_ADMIN:
        return await get_current_admin(payload)
    return await get_current_user(payload)
