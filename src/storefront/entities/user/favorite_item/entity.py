"""Entity: FavoriteItem."""

from decimal import Decimal

from pydantic import Field

from src.storefront.entities.core._base import UserScopedEntity


class FavoriteItem(UserScopedEntity):
    """Product a user marked as favorite, with display fields."""

    brand_name: str = Field(default="", description="Brand name at add time")
    title: str = Field(default="", description="Product title at add time")
    price: Decimal = Field(default=Decimal("0"), ge=0, description="Unit price at add time")
    image_url: str | None = Field(default=None, description="Image reference")
