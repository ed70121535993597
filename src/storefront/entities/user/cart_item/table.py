"""Cart item database table model."""

from src.storefront.entities.core._base import UserScopedTable


class CartItemTable(UserScopedTable, table=True):
    """Persistence model for cart lines, partitioned by user."""

    __tablename__ = "cart_items"

    brand_name: str = ""
    title: str = ""
    price: float = 0.0
    image_url: str | None = None
    quantity: int = 1
