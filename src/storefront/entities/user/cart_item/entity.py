"""Entity: CartItem."""

from decimal import Decimal

from pydantic import Field

from src.storefront.entities.core._base import UserScopedEntity


class CartItem(UserScopedEntity):
    """Cart line for one user and product.

    Display fields are captured when the product is added so the cart renders
    without the catalog.
    """

    brand_name: str = Field(default="", description="Brand name at add time")
    title: str = Field(default="", description="Product title at add time")
    price: Decimal = Field(default=Decimal("0"), ge=0, description="Unit price at add time")
    image_url: str | None = Field(default=None, description="Image reference")
    quantity: int = Field(default=1, ge=1, description="Units in the cart")

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity
