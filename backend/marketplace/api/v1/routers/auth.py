# marketplace/api/v1/routers/auth.py
from fastapi import APIRouter, Depends, Response, status

from marketplace.api.v1.deps import get_current_user
from marketplace.models.user import User
from marketplace.schemas.auth import LoginRequest, UserRegisterIn
from marketplace.services import users as users_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: UserRegisterIn):
    """
    Register a new marketplace user.

    The email is stored lowercased and must be unique. The password is
    hashed with argon2 before storage and never returned.

    Args:
        body: Request body containing:
            - fullName: str (required)
            - email: str (required, unique)
            - password: str (required)
            - phone: str | None
            - role: "pembeli" | "penjual" | "keduanya" (default "pembeli")

    Returns:
        dict: {"success": True, "message": ..., "data": user}

    Error codes:
        - VALIDATION_ERROR (400): Missing name, email or password
        - EMAIL_EXISTS (400): Email already registered
    """
    user = await users_service.register(
        body.full_name, body.email, body.password, phone=body.phone, role=body.role,
    )
    return {"success": True, "message": "Registration successful", "data": users_service.user_to_dict(user)}


@router.post("/login")
async def login(payload: LoginRequest, response: Response):
    """
    Authenticate a user and create an access token.

    The token is returned in the body and also set as an HttpOnly cookie
    named "accessToken" for browser clients.

    Returns:
        dict: data = {"user": {...}, "accessToken": str}

    Error codes:
        - AUTH_INVALID_CREDENTIALS (401): Unknown email or wrong password (same message)
        - ACCOUNT_INACTIVE (403): Account is not aktif
    """
    user, token = await users_service.login(payload.email, payload.password)
    response.set_cookie("accessToken", token, httponly=True, secure=False, samesite="lax")
    return {
        "success": True,
        "message": "Login successful",
        "data": {"user": users_service.user_to_dict(user), "accessToken": token},
    }


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    """Profile of the authenticated user."""
    return {"success": True, "message": "OK", "data": users_service.user_to_dict(user)}


@router.post("/logout")
async def logout(response: Response):
    """
    Clear the access token cookie.

    Note:
        The JWT itself stays valid until it expires.
    """
    response.delete_cookie("accessToken")
    return {"success": True, "message": "Logged out", "data": None}
