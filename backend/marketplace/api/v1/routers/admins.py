# marketplace/api/v1/routers/admins.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from marketplace.api.v1.deps import (
    get_current_admin,
    get_optional_admin,
    pagination,
    require_super_admin,
)
from marketplace.core.errors import Forbidden, Unauthorized
from marketplace.models.admin import Admin
from marketplace.schemas.admin import AdminRegisterIn, AdminUpdateIn
from marketplace.schemas.auth import LoginRequest
from marketplace.services import admins as admins_service

router = APIRouter(prefix="/admins", tags=["admins"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_admin(
    body: AdminRegisterIn,
    current: Optional[Admin] = Depends(get_optional_admin),
):
    """
    Register a new admin account.

    Registration is open while the directory is empty; the first admin is
    always created as super_admin. Once any admin exists, only an active
    super_admin may register further admins.

    Args:
        body: Request body containing:
            - name, email, password: required
            - role: "super_admin" | "moderator" (default "moderator")
            - status: "aktif" | "nonaktif" (default "aktif")
            - photoUrl: optional

    Returns:
        dict: data = admin record (never includes the password hash)

    Error codes:
        - AUTH_REQUIRED (401): Admins exist and no admin token was sent
        - FORBIDDEN_SUPER_ADMIN_ONLY (403): Caller is not an active super_admin
        - VALIDATION_ERROR (400): Missing required field
        - EMAIL_EXISTS (400): Email already registered
    """
    role = body.role
    if await admins_service.any_admin_exists():
        if current is None:
            raise Unauthorized("Authentication required", code="AUTH_REQUIRED")
        if current.role != "super_admin" or current.status != "aktif":
            raise Forbidden("Super admin access only", code="FORBIDDEN_SUPER_ADMIN_ONLY")
    else:
        role = "super_admin"

    admin = await admins_service.register(
        body.name, body.email, body.password,
        role=role, status=body.status, photo_url=body.photo_url,
    )
    return {"success": True, "message": "Admin registered", "data": admins_service.admin_to_dict(admin)}


@router.post("/login")
async def login_admin(payload: LoginRequest, response: Response):
    """
    Authenticate an admin.

    The issued token carries kind="admin" and expires after exactly one day.
    It is returned in the body and set as the "accessToken" HttpOnly cookie.

    Error codes:
        - AUTH_INVALID_CREDENTIALS (401): Unknown email or wrong password
        - ACCOUNT_INACTIVE (403): Admin status is nonaktif
    """
    admin, token = await admins_service.login(payload.email, payload.password)
    response.set_cookie("accessToken", token, httponly=True, secure=False, samesite="lax")
    return {
        "success": True,
        "message": "Login successful",
        "data": {"admin": admins_service.admin_to_dict(admin), "accessToken": token},
    }


@router.get("", dependencies=[Depends(get_current_admin)])
async def list_admins(
    q: str | None = Query(default=None, description="Fuzzy search by name/email"),
    page: tuple[int, int] = Depends(pagination),
):
    """
    Paginated admin directory, newest first.

    Returns:
        dict: data = {"items": [...], "total": int, "offset": int, "limit": int}
    """
    offset, limit = page
    rows, total = await admins_service.list_admins(offset, limit, q)
    return {
        "success": True,
        "message": "OK",
        "data": {
            "items": [admins_service.admin_to_dict(a) for a in rows],
            "total": total,
            "offset": offset,
            "limit": limit,
        },
    }


@router.get("/{admin_id}", dependencies=[Depends(get_current_admin)])
async def get_admin(admin_id: str):
    admin = await admins_service.get_admin(admin_id)
    return {"success": True, "message": "OK", "data": admins_service.admin_to_dict(admin)}


@router.put("/{admin_id}")
@router.patch("/{admin_id}")
async def update_admin(admin_id: str, body: AdminUpdateIn, current: Admin = Depends(require_super_admin)):
    """
    Partially update an admin (super_admin only).

    Only name, email, role, status and photoUrl are applied; a password in
    the body is ignored.

    Error codes:
        - ADMIN_NOT_FOUND (404)
        - EMAIL_EXISTS (400): Email belongs to another admin
        - CANNOT_DEMOTE_SELF (400): Demoting or deactivating your own account
        - LAST_ADMIN_FORBIDDEN (400): Would leave no active super_admin
    """
    admin = await admins_service.update_admin(admin_id, body.changes(), current)
    return {"success": True, "message": "Admin updated", "data": admins_service.admin_to_dict(admin)}


@router.delete("/{admin_id}")
async def delete_admin(admin_id: str, current: Admin = Depends(require_super_admin)):
    """
    Delete an admin (super_admin only).

    Error codes:
        - CANNOT_DELETE_SELF (400)
        - LAST_ADMIN_FORBIDDEN (400): Would remove the last super_admin
        - ADMIN_NOT_FOUND (404)
    """
    await admins_service.delete_admin(admin_id, current)
    return {"success": True, "message": "Admin deleted", "data": None}
