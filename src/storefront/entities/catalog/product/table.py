"""Product database table model."""

import sqlalchemy as sa
from sqlmodel import Field

from src.storefront.entities.core._base import EntityTable


class ProductTable(EntityTable, table=True):
    """Persistence model for cached products.

    ``keywords_index`` is the lowercased keyword list joined by a unit separator so
    that keyword search runs as a single LIKE.
    ``category_is_active`` mirrors the owning category's flag.
    """

    __tablename__ = "products"

    name: str = ""
    name_lower: str = Field(default="", index=True)
    description: str = ""
    category_id: str = Field(default="", index=True)
    brand_id: str = Field(default="", index=True)
    price: float = Field(default=0.0, index=True)
    image_url: str = ""
    is_active: bool = True
    category_is_active: bool = True
    keywords: list[str] = Field(default_factory=list, sa_type=sa.JSON)
    keywords_index: str = ""
