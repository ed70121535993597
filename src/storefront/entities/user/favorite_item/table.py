"""Favorite item database table model."""

from src.storefront.entities.core._base import UserScopedTable


class FavoriteItemTable(UserScopedTable, table=True):
    """Persistence model for favorites, partitioned by user."""

    __tablename__ = "favorite_items"

    brand_name: str = ""
    title: str = ""
    price: float = 0.0
    image_url: str | None = None
