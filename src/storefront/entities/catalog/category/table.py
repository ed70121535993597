"""Category database table model."""

import sqlalchemy as sa
from sqlmodel import Field

from src.storefront.entities.core._base import EntityTable


class CategoryTable(EntityTable, table=True):
    """Persistence model for cached categories."""

    __tablename__ = "categories"

    name: str = ""
    image_url: str = ""
    brand_ids: list[str] = Field(default_factory=list, sa_type=sa.JSON)
    is_active: bool = True
