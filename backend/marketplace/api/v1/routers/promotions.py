# marketplace/api/v1/routers/promotions.py
from fastapi import APIRouter, Depends, status

from marketplace.api.v1.deps import get_current_admin, get_current_user, pagination
from marketplace.schemas.promotion import PromotionIn, PromotionProductIn, ValidatePromoIn
from marketplace.services import promotions as promotions_service

router = APIRouter(tags=["promotions"])


# ==============================================================================
# I. Shopper-facing
#     Prefix: /api/v1/promotions
# ==============================================================================
@router.get("/promotions/active")
async def active_promotions():
    """
    Promotions usable right now (public).

    A promotion is listed when its status is aktif, the current time is
    inside [startsAt, endsAt] and its quota is unlimited or not used up.
    """
    rows = await promotions_service.list_active()
    return {"success": True, "message": "OK", "data": [promotions_service.promotion_public_dict(p) for p in rows]}


@router.post("/promotions/validate", dependencies=[Depends(get_current_user)])
async def validate_promotion(body: ValidatePromoIn):
    """
    Check a promo code against the shopper's basket without consuming it.

    Args:
        body: Request body containing:
            - code: str
            - subtotal: number (basket product total)
            - items: [{productId, categoryId, price, qty}]

    Returns:
        dict: data = {"isValid": True, "promotionId", "code", "discount"}

    Error codes (each response carries data.isValid = false):
        - PROMO_NOT_FOUND (404)
        - PROMO_INACTIVE / PROMO_NOT_STARTED / PROMO_EXPIRED (400)
        - PROMO_QUOTA_EXHAUSTED / PROMO_MIN_PURCHASE (400)
        - PROMO_NO_ELIGIBLE_ITEMS / PROMO_TYPE_UNSUPPORTED (400)
    """
    items = None
    if body.items is not None:
        items = [item.model_dump() for item in body.items]
    result = await promotions_service.validate_code(body.code, body.subtotal, items)
    return {"success": True, "message": "Promo code applied", "data": result}


# ==============================================================================
# II. Promotion management (admin)
#     Prefix: /api/v1/promotions
# ==============================================================================
@router.post("/promotions", status_code=status.HTTP_201_CREATED, dependencies=[Depends(get_current_admin)])
async def create_promotion(body: PromotionIn):
    """
    Create a promotion.

    Required: code, name, discountType, discountValue, startsAt, endsAt.
    The code is stored uppercased and must be unique.

    Error codes:
        - VALIDATION_ERROR (400): Missing field, unknown enum, endsAt before startsAt
        - PROMO_CODE_EXISTS (400)
    """
    promo = await promotions_service.create_promotion(body.changes())
    return {"success": True, "message": "Promotion created", "data": promotions_service.promotion_to_dict(promo)}


@router.get("/promotions", dependencies=[Depends(get_current_admin)])
async def list_promotions(page: tuple[int, int] = Depends(pagination)):
    offset, limit = page
    rows, total = await promotions_service.list_promotions(offset, limit)
    return {
        "success": True,
        "message": "OK",
        "data": {
            "items": [promotions_service.promotion_to_dict(p) for p in rows],
            "total": total,
            "offset": offset,
            "limit": limit,
        },
    }


@router.get("/promotions/{promotion_id}", dependencies=[Depends(get_current_admin)])
async def get_promotion(promotion_id: str):
    promo = await promotions_service.get_promotion(promotion_id)
    return {"success": True, "message": "OK", "data": promotions_service.promotion_to_dict(promo)}


@router.put("/promotions/{promotion_id}", dependencies=[Depends(get_current_admin)])
@router.patch("/promotions/{promotion_id}", dependencies=[Depends(get_current_admin)])
async def update_promotion(promotion_id: str, body: PromotionIn):
    promo = await promotions_service.update_promotion(promotion_id, body.changes())
    return {"success": True, "message": "Promotion updated", "data": promotions_service.promotion_to_dict(promo)}


@router.delete("/promotions/{promotion_id}", dependencies=[Depends(get_current_admin)])
async def delete_promotion(promotion_id: str):
    await promotions_service.delete_promotion(promotion_id)
    return {"success": True, "message": "Promotion deleted", "data": None}


# ==============================================================================
# III. Promotion <-> product links (admin)
# ==============================================================================
@router.get("/promotions/{promotion_id}/products", dependencies=[Depends(get_current_admin)])
async def promotion_products(promotion_id: str):
    """Products attached to the promotion, each with the linkId used to detach it."""
    data = await promotions_service.products_for_promotion(promotion_id)
    return {"success": True, "message": "OK", "data": data}


@router.post("/promotion-products", status_code=status.HTTP_201_CREATED, dependencies=[Depends(get_current_admin)])
async def link_product(body: PromotionProductIn):
    """
    Attach a product to a promotion.

    Error codes:
        - PRODUCT_NOT_FOUND / PROMOTION_NOT_FOUND (404)
        - PROMO_PRODUCT_EXISTS (400): Pair already linked
    """
    link = await promotions_service.link_product(body.product_id, body.promotion_id)
    return {
        "success": True,
        "message": "Product added to promotion",
        "data": {
            "id": str(link.id),
            "productId": str(link.product_id),
            "promotionId": str(link.promotion_id),
        },
    }


@router.delete("/promotion-products/{link_id}", dependencies=[Depends(get_current_admin)])
async def unlink_product(link_id: str):
    await promotions_service.unlink_product(link_id)
    return {"success": True, "message": "Product removed from promotion", "data": None}
