# marketplace/api/v1/routers/provinces.py
from fastapi import APIRouter, Depends, status

from marketplace.api.v1.deps import get_current_admin
from marketplace.schemas.catalog import ProvinceIn
from marketplace.services import provinces as provinces_service

router = APIRouter(prefix="/provinces", tags=["provinces"])


@router.get("")
async def list_provinces():
    """All provinces, sorted by name. Public."""
    rows = await provinces_service.list_provinces()
    return {"success": True, "message": "OK", "data": [provinces_service.province_to_dict(p) for p in rows]}


@router.get("/{province_id}")
async def get_province(province_id: str):
    province = await provinces_service.get_province(province_id)
    return {"success": True, "message": "OK", "data": provinces_service.province_to_dict(province)}


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(get_current_admin)])
async def create_province(body: ProvinceIn):
    """
    Create a province (admin only).

    Error codes:
        - VALIDATION_ERROR (400): Name missing
        - PROVINCE_NAME_EXISTS / PROVINCE_CODE_EXISTS (400)
    """
    province = await provinces_service.create_province(body.changes())
    return {"success": True, "message": "Province created", "data": provinces_service.province_to_dict(province)}


@router.put("/{province_id}", dependencies=[Depends(get_current_admin)])
@router.patch("/{province_id}", dependencies=[Depends(get_current_admin)])
async def update_province(province_id: str, body: ProvinceIn):
    province = await provinces_service.update_province(province_id, body.changes())
    return {"success": True, "message": "Province updated", "data": provinces_service.province_to_dict(province)}


@router.delete("/{province_id}", dependencies=[Depends(get_current_admin)])
async def delete_province(province_id: str):
    """
    Hard-delete a province (admin only).

    Products referencing the province are left untouched; their count is
    returned as data.danglingProducts.
    """
    dangling = await provinces_service.delete_province(province_id)
    return {"success": True, "message": "Province deleted", "data": {"danglingProducts": dangling}}
