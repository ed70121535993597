"""Local favorites cache."""

from __future__ import annotations

from typing import Any

from src.storefront.core.mapping import favorite_item_from_row, favorite_row_values
from src.storefront.core.models.dto import FavoriteDTO
from src.storefront.core.storage.user_store import UserItemsStore
from src.storefront.entities import FavoriteItem, FavoriteItemTable


class FavoritesStore(UserItemsStore[FavoriteItem]):
    name = "FavoritesStore"
    topic_prefix = "favorites"
    table = FavoriteItemTable

    def _row_values(self, dto: FavoriteDTO) -> dict[str, Any]:
        return favorite_row_values(dto)

    def _entity(self, row: FavoriteItemTable) -> FavoriteItem:
        return favorite_item_from_row(row)
