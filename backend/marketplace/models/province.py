# marketplace/models/province.py
import uuid
from tortoise import fields, models

class Province(models.Model):
    """
    Province directory entry.
    - name: unique display name
    - code: optional short code, unique when present (NULLs never collide)
    - latitude / longitude: optional map centre
    - map_image_url: URL of an already-uploaded map image
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    name = fields.CharField(max_length=128, unique=True)
    code = fields.CharField(max_length=16, unique=True, null=True)
    island = fields.CharField(max_length=64, null=True)
    capital = fields.CharField(max_length=128, null=True)
    latitude = fields.FloatField(null=True)
    longitude = fields.FloatField(null=True)
    map_image_url = fields.CharField(max_length=1024, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "provinces"
