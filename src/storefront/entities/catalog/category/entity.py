"""Entity: Category."""

from pydantic import Field

from src.storefront.entities.core._base import Entity


class Category(Entity):
    """Catalog category with the brands it lists, in display order."""

    name: str = Field(default="", description="Display name")
    image_url: str = Field(default="", description="Image reference")
    brand_ids: list[str] = Field(default_factory=list, description="Associated brand ids")
    is_active: bool = Field(default=True, description="Whether the category is listed")
