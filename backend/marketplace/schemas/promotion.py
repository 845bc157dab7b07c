# marketplace/schemas/promotion.py
"""
Pydantic schemas for promotions, product links and promo code validation.
"""
import datetime as dt
from typing import List, Optional

from pydantic import Field

from .base import CamelModel

__all__ = ["PromotionIn", "PromotionProductIn", "BasketItemIn", "ValidatePromoIn"]


class PromotionIn(CamelModel):
    """
    Create/update body. On create the service requires code, name,
    discountType, discountValue, startsAt and endsAt.
    """
    code: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    discount_type: Optional[str] = None  # "persen" | "nominal" | "beli_x_gratis_y"
    discount_value: Optional[float] = None
    buy_qty: Optional[int] = Field(default=None, ge=1)
    free_qty: Optional[int] = Field(default=None, ge=1)
    min_purchase: Optional[float] = None
    max_discount: Optional[float] = None
    quota: Optional[int] = Field(default=None, ge=0)
    starts_at: Optional[dt.datetime] = None
    ends_at: Optional[dt.datetime] = None
    category_ids: Optional[List[str]] = None
    status: Optional[str] = None


class PromotionProductIn(CamelModel):
    product_id: Optional[str] = None
    promotion_id: Optional[str] = None


class BasketItemIn(CamelModel):
    product_id: Optional[str] = None
    category_id: Optional[str] = None
    price: float = Field(ge=0)
    qty: int = Field(ge=0)


class ValidatePromoIn(CamelModel):
    code: Optional[str] = None
    subtotal: Optional[float] = None
    items: Optional[List[BasketItemIn]] = None
