# marketplace/models/product.py
import uuid
from tortoise import fields, models

PRODUCT_STATUSES = ("aktif", "nonaktif", "sold_out")

class Product(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    name = fields.CharField(max_length=256)
    description = fields.TextField(null=True)
    price = fields.DecimalField(max_digits=14, decimal_places=2)
    stock = fields.IntField(default=0)
    category_id = fields.CharField(max_length=64, null=True, index=True)  # opaque category reference
    status = fields.CharField(max_length=16, default="aktif")

    # No database constraint: deleting a province leaves province_id dangling on purpose
    province = fields.ForeignKeyField(
        "models.Province",
        related_name="products",
        null=True,
        on_delete=fields.NO_ACTION,
        db_constraint=False,
    )

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "products"
