"""Entity: Order."""

from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, Field

from src.storefront.entities.core._base import Entity


class OrderStatus(StrEnum):
    ASSEMBLING = "assembling"
    READY = "ready"
    DELIVERING = "delivering"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderItem(BaseModel):
    """Order line with the product details captured at checkout."""

    product_id: str
    title: str = ""
    brand_name: str = ""
    price: Decimal = Field(default=Decimal("0"), ge=0)
    image_url: str | None = None
    quantity: int = Field(default=1, ge=1)


class Order(Entity):
    """Placed order of one user."""

    user_id: str = Field(description="Owning user")
    status: OrderStatus = Field(default=OrderStatus.ASSEMBLING)
    receive_address: str = ""
    payment_method: str = ""
    comment: str = ""
    phone_e164: str | None = None
    items: list[OrderItem] = Field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((item.price * item.quantity for item in self.items), Decimal("0"))
