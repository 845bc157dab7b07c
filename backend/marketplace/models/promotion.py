# marketplace/models/promotion.py
"""
Database models for promotions and their product links.
"""
import uuid
from tortoise import fields, models

DISCOUNT_TYPES = ("persen", "nominal", "beli_x_gratis_y")  # percent, fixed amount, buy X get Y
PROMOTION_STATUSES = ("aktif", "nonaktif", "expired")

class Promotion(models.Model):
    """
    Promotion database model.

    Applicability:
    - Products linked through PromotionProduct
    - Category ids listed in category_ids
    - Neither set: the promotion applies to the whole basket

    quota is None for an unlimited promotion.
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    code = fields.CharField(max_length=64, unique=True, index=True)  # stored upper-case
    name = fields.CharField(max_length=128)
    description = fields.TextField(null=True)

    discount_type = fields.CharField(max_length=24)
    discount_value = fields.DecimalField(max_digits=14, decimal_places=2)
    buy_qty = fields.IntField(null=True)
    free_qty = fields.IntField(null=True)

    min_purchase = fields.DecimalField(max_digits=14, decimal_places=2, default=0)
    max_discount = fields.DecimalField(max_digits=14, decimal_places=2, null=True)
    quota = fields.IntField(null=True)
    quota_used = fields.IntField(default=0)
    starts_at = fields.DatetimeField()
    ends_at = fields.DatetimeField()

    category_ids = fields.JSONField(default=list)
    status = fields.CharField(max_length=16, default="aktif")

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "promotions"


class PromotionProduct(models.Model):
    """Join entity: one row per (product, promotion) pair."""
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    product = fields.ForeignKeyField("models.Product", related_name="promotion_links", on_delete=fields.CASCADE)
    promotion = fields.ForeignKeyField("models.Promotion", related_name="product_links", on_delete=fields.CASCADE)
    added_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "promotion_products"
        unique_together = (("product", "promotion"),)
