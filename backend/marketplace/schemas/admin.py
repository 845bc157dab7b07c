# marketplace/schemas/admin.py
"""
Pydantic schemas for admin directory endpoints.
"""
from typing import Optional, Literal

from .base import CamelModel

__all__ = ["AdminRegisterIn", "AdminUpdateIn"]


class AdminRegisterIn(CamelModel):
    """
    Request model for admin registration.
    name, email and password are required (checked by the service).
    """
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[Literal["super_admin", "moderator"]] = None  # default "moderator"
    status: Optional[Literal["aktif", "nonaktif"]] = None  # default "aktif"
    photo_url: Optional[str] = None


class AdminUpdateIn(CamelModel):
    """
    Request model for partial admin updates.
    Any other key (password included) is dropped.
    """
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[Literal["super_admin", "moderator"]] = None
    status: Optional[Literal["aktif", "nonaktif"]] = None
    photo_url: Optional[str] = None
