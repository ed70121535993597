"""Cart of the signed-in user."""

from __future__ import annotations

from decimal import Decimal
from typing import NamedTuple

from loguru import logger

from src.storefront.core.models.dto import CartDTO
from src.storefront.core.remote.protocols import CartRemoteSource
from src.storefront.core.repositories.base import UserRepository
from src.storefront.core.storage.cart_store import CartStore
from src.storefront.core.storage.catalog_store import CatalogStore
from src.storefront.core.streams import Observable
from src.storefront.entities import CartItem
from src.storefront.entities.core._base import utcnow


class CartTotals(NamedTuple):
    count: int
    price: Decimal


class CartRepository(UserRepository):
    """Commands go to the remote cart; its pushes replace the local copy."""

    name = "CartRepository"

    def __init__(self, user_id: str, remote: CartRemoteSource, store: CartStore, catalog: CatalogStore):
        super().__init__(user_id)
        self.remote = remote
        self.store = store
        self.catalog = catalog
        self._keep(remote.listen_cart(user_id).subscribe(self._on_remote))

    def _on_remote(self, dtos: list[CartDTO]) -> None:
        try:
            self.store.replace_all(self.user_id, dtos)
        except Exception as e:
            logger.error("Mirroring remote cart of {} failed: {}", self.user_id, e)

    def observe_items(self) -> Observable[list[CartItem]]:
        return self.store.observe_items(self.user_id)

    def observe_totals(self) -> Observable[CartTotals]:
        return self.observe_items().map(
            lambda items: CartTotals(
                count=sum(item.quantity for item in items),
                price=sum((item.line_total for item in items), Decimal("0")),
            )
        )

    async def refresh(self) -> None:
        dtos = await self._remote("refresh", self.remote.fetch_cart(self.user_id))
        self.store.replace_all(self.user_id, dtos)

    def _line(self, product_id: str, quantity: int) -> CartDTO | None:
        meta = self.catalog.meta(product_id)
        if meta is None:
            return None
        return CartDTO(
            user_id=self.user_id,
            product_id=product_id,
            brand_name=meta.brand_name,
            title=meta.title,
            price=meta.price,
            image_url=meta.image_url,
            quantity=quantity,
            updated_at=utcnow(),
        )

    async def add(self, product_id: str, delta: int = 1) -> None:
        """Add ``delta`` units. Unknown products are ignored."""
        if delta == 0:
            return
        dto = self._line(product_id, max(1, delta))
        if dto is None:
            logger.debug("Not adding unknown product {} to cart", product_id)
            return
        await self._remote("add", self.remote.add_to_cart(self.user_id, dto, delta))

    async def set_quantity(self, product_id: str, quantity: int) -> None:
        dto = self._line(product_id, max(1, quantity)) or CartDTO(
            user_id=self.user_id,
            product_id=product_id,
            quantity=max(1, quantity),
            updated_at=utcnow(),
        )
        await self._remote("set_quantity", self.remote.set_cart_quantity(self.user_id, dto, quantity))

    async def remove(self, product_id: str) -> None:
        await self._remote("remove", self.remote.remove_from_cart(self.user_id, product_id))

    async def clear(self) -> None:
        await self._remote("clear", self.remote.clear_cart(self.user_id))
