# marketplace/services/products.py
from decimal import Decimal

from tortoise.expressions import Q

from marketplace.core.errors import NotFound, ValidationError, parse_id
from marketplace.core.timeutil import iso
from marketplace.models.product import PRODUCT_STATUSES, Product
from marketplace.models.province import Province

FIELDS = ("name", "description", "price", "stock", "category_id", "status", "province_id")


def product_to_dict(p: Product) -> dict:
    return {
        "id": str(p.id),
        "name": p.name,
        "description": p.description,
        "price": float(p.price),
        "stock": p.stock,
        "categoryId": p.category_id,
        "status": p.status,
        "provinceId": str(p.province_id) if p.province_id else None,
        "createdAt": iso(p.created_at),
        "updatedAt": iso(p.updated_at),
    }


def product_summary(p: Product | None) -> dict | None:
    if p is None:
        return None
    return {"id": str(p.id), "name": p.name, "price": float(p.price), "stock": p.stock}


async def _validate(data: dict) -> dict:
    data = {k: v for k, v in data.items() if k in FIELDS}
    if "name" in data:
        data["name"] = (data["name"] or "").strip()
        if not data["name"]:
            raise ValidationError("Product name is required")
    if "price" in data:
        if data["price"] is None or Decimal(str(data["price"])) < 0:
            raise ValidationError("Price must be zero or more")
        data["price"] = Decimal(str(data["price"]))
    if "stock" in data:
        if data["stock"] is None or data["stock"] < 0:
            raise ValidationError("Stock must be zero or more")
    if "status" in data and data["status"] not in PRODUCT_STATUSES:
        raise ValidationError(f"Invalid status: {data['status']}")
    if data.get("province_id") is not None:
        province_id = parse_id(data["province_id"], "Province")
        if not await Province.filter(id=province_id).exists():
            raise NotFound("Province not found", code="PROVINCE_NOT_FOUND")
        data["province_id"] = province_id
    return data


async def list_products(offset: int, limit: int, q: str | None = None,
                        province_id: str | None = None) -> tuple[list[Product], int]:
    qs = Product.all().order_by("-created_at")
    if q:
        qs = qs.filter(Q(name__icontains=q) | Q(description__icontains=q))
    if province_id:
        qs = qs.filter(province_id=parse_id(province_id, "Province"))
    total = await qs.count()
    rows = await qs.offset(offset).limit(limit)
    return rows, total


async def get_product(product_id) -> Product:
    product = await Product.get_or_none(id=parse_id(product_id, "Product"))
    if not product:
        raise NotFound("Product not found", code="PRODUCT_NOT_FOUND")
    return product


async def create_product(data: dict) -> Product:
    if not data.get("name") or data.get("price") is None:
        raise ValidationError("Product name and price are required")
    data = await _validate(data)
    return await Product.create(**data)


async def update_product(product_id, data: dict) -> Product:
    product = await get_product(product_id)
    data = await _validate(data)
    for key, value in data.items():
        setattr(product, key, value)
    await product.save()
    return product


async def delete_product(product_id) -> None:
    product = await get_product(product_id)
    await product.delete()
