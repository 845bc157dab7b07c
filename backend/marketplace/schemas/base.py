# marketplace/schemas/base.py
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Request body base: accepts camelCase JSON keys (as sent by the frontend)
    and exposes snake_case attributes matching the ORM models.
    """

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def changes(self) -> dict:
        """Only the fields the client actually sent, keyed by model field name."""
        return self.model_dump(exclude_unset=True)
