# marketplace/schemas/auth.py
"""
Pydantic schemas for marketplace user authentication endpoints.
"""
from typing import Optional

from .base import CamelModel

__all__ = ["LoginRequest", "UserRegisterIn"]


class LoginRequest(CamelModel):
    """
    Request model for both user and admin login.
    Fields are optional so a missing value is reported as a 400 by the service.
    """
    email: Optional[str] = None
    password: Optional[str] = None


class UserRegisterIn(CamelModel):
    full_name: Optional[str] = None  # JSON: fullName
    email: Optional[str] = None
    password: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None  # "pembeli" (default) | "penjual" | "keduanya"
