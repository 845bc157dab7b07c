# marketplace/services/promotions.py
"""
Promotions, their product links, and checkout-time promo code validation.

Uniqueness (promo code, product<->promotion pair) is left to the database:
the unique constraints turn a duplicate into IntegrityError, which is
reported as Conflict. There is no check-then-insert window.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP

from tortoise.exceptions import IntegrityError

from marketplace.core.errors import Conflict, NotFound, ValidationError, parse_id
from marketplace.core.timeutil import as_utc, iso, utc_now
from marketplace.models.product import Product
from marketplace.models.promotion import DISCOUNT_TYPES, PROMOTION_STATUSES, Promotion, PromotionProduct
from marketplace.services.products import product_summary

logger = logging.getLogger("uvicorn.error")

FIELDS = (
    "code", "name", "description", "discount_type", "discount_value", "buy_qty", "free_qty",
    "min_purchase", "max_discount", "quota", "starts_at", "ends_at", "category_ids", "status",
)
REQUIRED = ("code", "name", "discount_type", "discount_value", "starts_at", "ends_at")
MONEY_FIELDS = ("discount_value", "min_purchase", "max_discount")


def _money(value) -> float | None:
    return float(value) if value is not None else None


def promotion_to_dict(p: Promotion) -> dict:
    return {
        "id": str(p.id),
        "code": p.code,
        "name": p.name,
        "description": p.description,
        "discountType": p.discount_type,
        "discountValue": _money(p.discount_value),
        "buyQty": p.buy_qty,
        "freeQty": p.free_qty,
        "minPurchase": _money(p.min_purchase),
        "maxDiscount": _money(p.max_discount),
        "quota": p.quota,
        "quotaUsed": p.quota_used,
        "startsAt": iso(p.starts_at),
        "endsAt": iso(p.ends_at),
        "categoryIds": list(p.category_ids or []),
        "status": p.status,
        "createdAt": iso(p.created_at),
        "updatedAt": iso(p.updated_at),
    }


def promotion_public_dict(p: Promotion) -> dict:
    """What shoppers get to see of an active promotion."""
    return {
        "code": p.code,
        "name": p.name,
        "description": p.description,
        "discountType": p.discount_type,
        "discountValue": _money(p.discount_value),
        "minPurchase": _money(p.min_purchase),
        "maxDiscount": _money(p.max_discount),
    }


def _clean(data: dict) -> dict:
    data = {k: v for k, v in data.items() if k in FIELDS}
    if "code" in data:
        code = (data["code"] or "").strip().upper()
        if not code:
            raise ValidationError("Promo code cannot be empty")
        data["code"] = code
    if "discount_type" in data and data["discount_type"] not in DISCOUNT_TYPES:
        raise ValidationError(f"Invalid discount type: {data['discount_type']}")
    if "status" in data and data["status"] not in PROMOTION_STATUSES:
        raise ValidationError(f"Invalid status: {data['status']}")
    for key in MONEY_FIELDS:
        if data.get(key) is not None:
            data[key] = Decimal(str(data[key]))
            if data[key] < 0:
                raise ValidationError(f"{key} must be zero or more")
    if data.get("min_purchase", 0) is None:
        data["min_purchase"] = Decimal("0")
    for key in ("starts_at", "ends_at"):
        if key in data:
            data[key] = as_utc(data[key])
    if "category_ids" in data:
        data["category_ids"] = [str(c) for c in (data["category_ids"] or [])]
    return data


def _check_window(starts_at, ends_at) -> None:
    if starts_at and ends_at and as_utc(ends_at) < as_utc(starts_at):
        raise ValidationError("End date must not be before start date")


# ------------------------------------------------------------------------------
# Admin CRUD
# ------------------------------------------------------------------------------
async def create_promotion(data: dict) -> Promotion:
    missing = [k for k in REQUIRED if data.get(k) in (None, "")]
    if missing:
        raise ValidationError("Required fields missing: " + ", ".join(missing))
    data = _clean(data)
    _check_window(data["starts_at"], data["ends_at"])
    try:
        promo = await Promotion.create(**data)
    except IntegrityError:
        raise Conflict("Promo code already exists", code="PROMO_CODE_EXISTS")
    logger.info("[promotions] created code=%s id=%s", promo.code, promo.id)
    return promo


async def list_promotions(offset: int, limit: int) -> tuple[list[Promotion], int]:
    qs = Promotion.all().order_by("-created_at")
    total = await qs.count()
    rows = await qs.offset(offset).limit(limit)
    return rows, total


async def get_promotion(promotion_id) -> Promotion:
    promo = await Promotion.get_or_none(id=parse_id(promotion_id, "Promotion"))
    if not promo:
        raise NotFound("Promotion not found", code="PROMOTION_NOT_FOUND")
    return promo


async def update_promotion(promotion_id, data: dict) -> Promotion:
    promo = await get_promotion(promotion_id)
    data = _clean(data)
    for key in ("name", "discount_type", "discount_value", "starts_at", "ends_at"):
        if key in data and data[key] in (None, ""):
            raise ValidationError(f"{key} cannot be empty")
    _check_window(data.get("starts_at", promo.starts_at), data.get("ends_at", promo.ends_at))
    for key, value in data.items():
        setattr(promo, key, value)
    try:
        await promo.save()
    except IntegrityError:
        raise Conflict("Promo code already exists", code="PROMO_CODE_EXISTS")
    return promo


async def delete_promotion(promotion_id) -> None:
    promo = await get_promotion(promotion_id)
    await promo.delete()


async def list_active() -> list[Promotion]:
    """Promotions a shopper can use right now: aktif, in window, quota left."""
    now = utc_now()
    rows = await Promotion.filter(
        status="aktif", starts_at__lte=now, ends_at__gte=now,
    ).order_by("ends_at")
    return [p for p in rows if p.quota is None or p.quota_used < p.quota]


# ------------------------------------------------------------------------------
# Product links
# ------------------------------------------------------------------------------
async def link_product(product_id, promotion_id) -> PromotionProduct:
    """
    Attach a product to a promotion.

    Raises:
        ValidationError: either id missing
        NotFound: product or promotion does not exist
        Conflict: the pair is already linked
    """
    if not product_id or not promotion_id:
        raise ValidationError("Product id and promotion id are required")
    product_uuid = parse_id(product_id, "Product")
    promotion_uuid = parse_id(promotion_id, "Promotion")
    if not await Product.filter(id=product_uuid).exists():
        raise NotFound("Product not found", code="PRODUCT_NOT_FOUND")
    if not await Promotion.filter(id=promotion_uuid).exists():
        raise NotFound("Promotion not found", code="PROMOTION_NOT_FOUND")
    try:
        return await PromotionProduct.create(product_id=product_uuid, promotion_id=promotion_uuid)
    except IntegrityError:
        raise Conflict("Product is already part of this promotion", code="PROMO_PRODUCT_EXISTS")


async def unlink_product(link_id) -> None:
    link = await PromotionProduct.get_or_none(id=parse_id(link_id, "Promotion product"))
    if not link:
        raise NotFound("Promotion product link not found", code="PROMO_PRODUCT_NOT_FOUND")
    await link.delete()


async def products_for_promotion(promotion_id) -> list[dict]:
    promo = await get_promotion(promotion_id)
    links = await PromotionProduct.filter(promotion_id=promo.id).order_by("added_at").prefetch_related("product")
    return [{"linkId": str(link.id), **product_summary(link.product)} for link in links]


async def promotions_for_product(product_id) -> list[dict]:
    product_uuid = parse_id(product_id, "Product")
    if not await Product.filter(id=product_uuid).exists():
        raise NotFound("Product not found", code="PRODUCT_NOT_FOUND")
    links = await PromotionProduct.filter(product_id=product_uuid).order_by("added_at").prefetch_related("promotion")
    return [
        {
            "linkId": str(link.id),
            "id": str(link.promotion.id),
            "code": link.promotion.code,
            "name": link.promotion.name,
            "discountType": link.promotion.discount_type,
            "discountValue": _money(link.promotion.discount_value),
        }
        for link in links
    ]


# ------------------------------------------------------------------------------
# Checkout validation
# ------------------------------------------------------------------------------
def _reject(message: str, code: str):
    return ValidationError(message, code=code, data={"isValid": False})


def eligible_total(subtotal: Decimal, items: list[dict], product_ids: set[str], category_ids: set[str]) -> Decimal:
    """
    Sum of basket lines the promotion applies to.

    With no product and no category scoping the whole subtotal is eligible.
    """
    if not product_ids and not category_ids:
        return subtotal
    total = Decimal("0")
    for item in items:
        if str(item.get("product_id")) in product_ids or str(item.get("category_id")) in category_ids:
            total += Decimal(str(item.get("price", 0))) * int(item.get("qty", 0))
    return total


def compute_discount(discount_type: str, value: Decimal, eligible: Decimal,
                     max_discount: Decimal | None) -> int:
    """
    Discount for an eligible amount, rounded half-up to a whole number.

    - persen: percentage of the eligible amount, capped by max_discount when set (> 0)
    - nominal: fixed amount, never more than the eligible amount
    """
    if discount_type == "persen":
        discount = eligible * value / Decimal(100)
        if max_discount and max_discount > 0 and discount > max_discount:
            discount = max_discount
    elif discount_type == "nominal":
        discount = min(value, eligible)
    else:
        raise _reject("This promotion type cannot be applied with a code", "PROMO_TYPE_UNSUPPORTED")
    return int(discount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


async def validate_code(code: str | None, subtotal, items: list[dict] | None) -> dict:
    """
    Check a promo code against a basket without consuming it.

    Args:
        code: promo code as typed by the shopper (case-insensitive)
        subtotal: basket product total
        items: basket lines [{product_id, category_id, price, qty}]

    Returns:
        dict with isValid, promotionId, code and discount

    Raises:
        ValidationError / NotFound carrying data={"isValid": False}
    """
    if not code or subtotal is None or items is None:
        raise _reject("Promo code, subtotal and items are required", "VALIDATION_ERROR")
    promo = await Promotion.get_or_none(code=code.strip().upper())
    if not promo:
        raise NotFound("Promo code not found", code="PROMO_NOT_FOUND", data={"isValid": False})

    now = utc_now()
    subtotal = Decimal(str(subtotal))
    if promo.status != "aktif":
        raise _reject("Promotion is not active", "PROMO_INACTIVE")
    if now < as_utc(promo.starts_at):
        raise _reject("Promotion has not started yet", "PROMO_NOT_STARTED")
    if now > as_utc(promo.ends_at):
        raise _reject("Promotion has expired", "PROMO_EXPIRED")
    if promo.quota is not None and promo.quota_used >= promo.quota:
        raise _reject("Promotion quota is used up", "PROMO_QUOTA_EXHAUSTED")
    if subtotal < promo.min_purchase:
        raise _reject(f"Minimum purchase for this promotion is {promo.min_purchase}", "PROMO_MIN_PURCHASE")

    linked = await PromotionProduct.filter(promotion_id=promo.id).values_list("product_id", flat=True)
    product_ids = {str(pid) for pid in linked}
    category_ids = {str(c) for c in (promo.category_ids or [])}
    eligible = eligible_total(subtotal, items, product_ids, category_ids)
    if (product_ids or category_ids) and eligible <= 0:
        raise _reject("No item in the basket qualifies for this promotion", "PROMO_NO_ELIGIBLE_ITEMS")

    discount = compute_discount(promo.discount_type, promo.discount_value, eligible, promo.max_discount)
    return {
        "isValid": True,
        "promotionId": str(promo.id),
        "code": promo.code,
        "discount": discount,
    }
