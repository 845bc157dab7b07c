# marketplace/api/v1/routers/products.py
from fastapi import APIRouter, Depends, Query, status

from marketplace.api.v1.deps import get_current_admin, pagination
from marketplace.schemas.catalog import ProductIn
from marketplace.services import products as products_service
from marketplace.services import promotions as promotions_service

router = APIRouter(prefix="/products", tags=["products"])


@router.get("")
async def list_products(
    q: str | None = Query(default=None, description="Search by name/description"),
    province_id: str | None = Query(default=None, alias="provinceId"),
    page: tuple[int, int] = Depends(pagination),
):
    """
    Public product catalog, newest first.

    Returns:
        dict: data = {"items": [...], "total": int, "offset": int, "limit": int}
    """
    offset, limit = page
    rows, total = await products_service.list_products(offset, limit, q=q, province_id=province_id)
    return {
        "success": True,
        "message": "OK",
        "data": {
            "items": [products_service.product_to_dict(p) for p in rows],
            "total": total,
            "offset": offset,
            "limit": limit,
        },
    }


@router.get("/{product_id}")
async def get_product(product_id: str):
    product = await products_service.get_product(product_id)
    return {"success": True, "message": "OK", "data": products_service.product_to_dict(product)}


@router.get("/{product_id}/promotions")
async def product_promotions(product_id: str):
    """Promotions the product is linked to."""
    data = await promotions_service.promotions_for_product(product_id)
    return {"success": True, "message": "OK", "data": data}


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(get_current_admin)])
async def create_product(body: ProductIn):
    """
    Create a product (admin only).

    Error codes:
        - VALIDATION_ERROR (400): Name/price missing, negative price or stock, bad status
        - PROVINCE_NOT_FOUND (404): provinceId does not resolve
    """
    product = await products_service.create_product(body.changes())
    return {"success": True, "message": "Product created", "data": products_service.product_to_dict(product)}


@router.put("/{product_id}", dependencies=[Depends(get_current_admin)])
@router.patch("/{product_id}", dependencies=[Depends(get_current_admin)])
async def update_product(product_id: str, body: ProductIn):
    product = await products_service.update_product(product_id, body.changes())
    return {"success": True, "message": "Product updated", "data": products_service.product_to_dict(product)}


@router.delete("/{product_id}", dependencies=[Depends(get_current_admin)])
async def delete_product(product_id: str):
    await products_service.delete_product(product_id)
    return {"success": True, "message": "Product deleted", "data": None}
