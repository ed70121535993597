"""Entity: Brand."""

from pydantic import Field

from src.storefront.entities.core._base import Entity


class Brand(Entity):
    """Catalog brand."""

    name: str = Field(default="", description="Display name")
    image_url: str = Field(default="", description="Image reference")
    is_active: bool = Field(default=True, description="Whether the brand is listed")
