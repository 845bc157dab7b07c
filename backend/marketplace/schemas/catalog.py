# marketplace/schemas/catalog.py
"""
Pydantic schemas for province and product endpoints.
"""
from typing import Optional

from pydantic import Field

from .base import CamelModel

__all__ = ["CoordinatesIn", "ProvinceIn", "ProductIn"]


class CoordinatesIn(CamelModel):
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)


class ProvinceIn(CamelModel):
    """Used for create (name required by the service) and partial update."""
    name: Optional[str] = None
    code: Optional[str] = None
    island: Optional[str] = None
    capital: Optional[str] = None
    coordinates: Optional[CoordinatesIn] = None
    map_image_url: Optional[str] = None

    def changes(self) -> dict:
        data = super().changes()
        coords = data.pop("coordinates", None)
        if coords is not None:
            data.update(coords)
        return data


class ProductIn(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    stock: Optional[int] = None
    category_id: Optional[str] = None
    status: Optional[str] = None
    province_id: Optional[str] = None
