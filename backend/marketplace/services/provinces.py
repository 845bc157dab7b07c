# marketplace/services/provinces.py
"""
Province directory.

Name and code uniqueness are checked before every write (excluding the
record itself on update) and backed by the unique columns. Deleting a
province is a hard delete that leaves referencing products untouched.
"""
import logging

from tortoise.exceptions import IntegrityError

from marketplace.core.errors import Conflict, NotFound, ValidationError, parse_id
from marketplace.core.timeutil import iso
from marketplace.models.product import Product
from marketplace.models.province import Province

logger = logging.getLogger("uvicorn.error")

FIELDS = ("name", "code", "island", "capital", "latitude", "longitude", "map_image_url")


def province_to_dict(p: Province) -> dict:
    return {
        "id": str(p.id),
        "name": p.name,
        "code": p.code,
        "island": p.island,
        "capital": p.capital,
        "coordinates": {"latitude": p.latitude, "longitude": p.longitude},
        "mapImageUrl": p.map_image_url,
        "createdAt": iso(p.created_at),
        "updatedAt": iso(p.updated_at),
    }


async def _ensure_unique(name: str | None, code: str | None, exclude_id=None) -> None:
    if name:
        qs = Province.filter(name=name)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        if await qs.exists():
            raise Conflict("Province name already exists", code="PROVINCE_NAME_EXISTS")
    if code:
        qs = Province.filter(code=code)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        if await qs.exists():
            raise Conflict("Province code already exists", code="PROVINCE_CODE_EXISTS")


def _clean(data: dict) -> dict:
    cleaned = {k: v for k, v in data.items() if k in FIELDS}
    for key in ("name", "code"):
        if isinstance(cleaned.get(key), str):
            cleaned[key] = cleaned[key].strip() or None
    return cleaned


async def list_provinces() -> list[Province]:
    return await Province.all().order_by("name")


async def get_province(province_id) -> Province:
    province = await Province.get_or_none(id=parse_id(province_id, "Province"))
    if not province:
        raise NotFound("Province not found", code="PROVINCE_NOT_FOUND")
    return province


async def create_province(data: dict) -> Province:
    data = _clean(data)
    if not data.get("name"):
        raise ValidationError("Province name is required")
    await _ensure_unique(data["name"], data.get("code"))
    try:
        return await Province.create(**data)
    except IntegrityError:
        raise Conflict("Province name or code already exists", code="PROVINCE_EXISTS")


async def update_province(province_id, data: dict) -> Province:
    province = await get_province(province_id)
    data = _clean(data)
    if "name" in data and not data["name"]:
        raise ValidationError("Province name cannot be empty")
    await _ensure_unique(data.get("name"), data.get("code"), exclude_id=province.id)
    province.update_from_dict(data)
    try:
        await province.save()
    except IntegrityError:
        raise Conflict("Province name or code already exists", code="PROVINCE_EXISTS")
    return province


async def delete_province(province_id) -> int:
    """
    Hard-delete a province.

    Products referencing it keep their province_id; the number of such
    products is returned so callers can report the dangling references.
    """
    province = await get_province(province_id)
    dangling = await Product.filter(province_id=province.id).count()
    await province.delete()
    if dangling:
        logger.warning("[provinces] deleted province id=%s still referenced by %d product(s)",
                       province.id, dangling)
    return dangling
