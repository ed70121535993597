"""Favorites of the signed-in user."""

from __future__ import annotations

from loguru import logger

from src.storefront.core.models.dto import FavoriteDTO
from src.storefront.core.remote.protocols import FavoritesRemoteSource
from src.storefront.core.repositories.base import UserRepository
from src.storefront.core.storage.catalog_store import CatalogStore
from src.storefront.core.storage.favorites_store import FavoritesStore
from src.storefront.core.streams import Observable
from src.storefront.entities import FavoriteItem
from src.storefront.entities.core._base import utcnow


class FavoritesRepository(UserRepository):
    name = "FavoritesRepository"

    def __init__(
        self, user_id: str, remote: FavoritesRemoteSource, store: FavoritesStore, catalog: CatalogStore
    ):
        super().__init__(user_id)
        self.remote = remote
        self.store = store
        self.catalog = catalog
        self._keep(remote.listen_favorites(user_id).subscribe(self._on_remote))

    def _on_remote(self, dtos: list[FavoriteDTO]) -> None:
        try:
            self.store.replace_all(self.user_id, dtos)
        except Exception as e:
            logger.error("Mirroring remote favorites of {} failed: {}", self.user_id, e)

    def observe_items(self) -> Observable[list[FavoriteItem]]:
        return self.store.observe_items(self.user_id)

    def observe_ids(self) -> Observable[frozenset[str]]:
        return self.observe_items().map(lambda items: frozenset(item.product_id for item in items))

    async def refresh(self) -> None:
        dtos = await self._remote("refresh", self.remote.fetch_favorites(self.user_id))
        self.store.replace_all(self.user_id, dtos)

    async def add(self, product_id: str) -> None:
        meta = self.catalog.meta(product_id)
        if meta is None:
            logger.debug("Not adding unknown product {} to favorites", product_id)
            return
        dto = FavoriteDTO(
            user_id=self.user_id,
            product_id=product_id,
            brand_name=meta.brand_name,
            title=meta.title,
            price=meta.price,
            image_url=meta.image_url,
            updated_at=utcnow(),
        )
        await self._remote("add", self.remote.add_favorite(self.user_id, dto))

    async def remove(self, product_id: str) -> None:
        await self._remote("remove", self.remote.remove_favorite(self.user_id, product_id))

    async def toggle(self, product_id: str) -> bool:
        """Flip the favorite state. Returns whether the product is now a favorite."""
        if self.store.contains(self.user_id, product_id):
            await self.remove(product_id)
            return False
        await self.add(product_id)
        return True

    async def clear(self) -> None:
        await self._remote("clear", self.remote.clear_favorites(self.user_id))
