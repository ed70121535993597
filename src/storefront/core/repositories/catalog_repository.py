"""Catalog facade over the local cache and the remote catalog source."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Sequence
from decimal import Decimal
from enum import StrEnum
from typing import Any

from loguru import logger

from src.storefront.core.errors import map_error
from src.storefront.core.remote.protocols import RemoteCatalogSource
from src.storefront.core.storage.base_store import UpsertStats
from src.storefront.core.storage.catalog_store import CatalogStore, ProductFilter
from src.storefront.core.streams import CompositeSubscription, Observable, Subscription
from src.storefront.entities import Brand, Category, Product


class SyncState(StrEnum):
    IDLE = "idle"
    SYNCING = "syncing"


class CatalogRepository:
    """Reads come from the local cache; the remote source only feeds it."""

    def __init__(self, remote: RemoteCatalogSource, store: CatalogStore):
        self.remote = remote
        self.store = store
        self._subscriptions: CompositeSubscription | None = None

    @property
    def state(self) -> SyncState:
        return SyncState.SYNCING if self._subscriptions is not None else SyncState.IDLE

    # -- observe ---------------------------------------------------------------

    def observe_products(
        self,
        query: str | None = None,
        category_ids: Iterable[str] | None = None,
        brand_ids: Iterable[str] | None = None,
        min_price: Decimal | int | float | None = None,
        max_price: Decimal | int | float | None = None,
    ) -> Observable[list[Product]]:
        product_filter = ProductFilter(
            query=query,
            category_ids=category_ids,
            brand_ids=brand_ids,
            min_price=min_price,
            max_price=max_price,
        )
        return self.store.observe_products(product_filter)

    def observe_products_in_category(
        self, query: str | None = None, category_id: str | None = None
    ) -> Observable[list[Product]]:
        return self.store.observe_products_in_category(query, category_id)

    def observe_categories(self) -> Observable[list[Category]]:
        return self.store.observe_categories()

    def observe_brands(self) -> Observable[list[Brand]]:
        return self.store.observe_brands()

    def observe_product(self, product_id: str) -> Observable[Product | None]:
        return self.store.observe_product(product_id)

    # -- sync ------------------------------------------------------------------

    async def refresh_all(self) -> dict[str, UpsertStats]:
        """Fetch all three collections concurrently and cache what arrived.

        Every collection that was fetched is stored even when another one
        failed; the first failure is then raised as a storefront error.
        """
        names = ("products", "categories", "brands")
        results = await asyncio.gather(
            self.remote.fetch_products(),
            self.remote.fetch_categories(),
            self.remote.fetch_brands(),
            return_exceptions=True,
        )
        upserts: dict[str, Callable[[Sequence[Any]], UpsertStats]] = {
            "products": self.store.upsert_products,
            "categories": self.store.upsert_categories,
            "brands": self.store.upsert_brands,
        }

        stats: dict[str, UpsertStats] = {}
        first_error: BaseException | None = None
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                logger.warning("refresh_all: fetching {} failed: {}", name, result)
                first_error = first_error or result
                continue
            stats[name] = upserts[name](result)

        if first_error is not None:
            raise map_error(first_error) from first_error
        logger.info(
            "Catalog refreshed: {}",
            ", ".join(f"{name}={len(results[i])}" for i, name in enumerate(names)),
        )
        return stats

    def start_realtime_sync(self) -> None:
        """Mirror the remote listen streams into the cache. Idempotent."""
        if self._subscriptions is not None:
            return
        self._subscriptions = CompositeSubscription(
            self._mirror("products", self.remote.listen_products(), self.store.upsert_products),
            self._mirror("categories", self.remote.listen_categories(), self.store.upsert_categories),
            self._mirror("brands", self.remote.listen_brands(), self.store.upsert_brands),
        )
        logger.info("Realtime catalog sync started")

    def stop_realtime_sync(self) -> None:
        """Cancel the listen subscriptions. Idempotent; no upsert runs after it returns."""
        if self._subscriptions is None:
            return
        subscriptions, self._subscriptions = self._subscriptions, None
        subscriptions.cancel()
        logger.info("Realtime catalog sync stopped")

    @staticmethod
    def _mirror(
        name: str,
        stream: Observable[list[Any]],
        upsert: Callable[[Sequence[Any]], UpsertStats],
    ) -> Subscription:
        def _on_push(dtos: list[Any]) -> None:
            try:
                upsert(dtos)
            except Exception as e:
                # Keep listening: the next push carries the full collection again
                logger.error("Realtime upsert of {} failed: {}", name, e)

        return stream.subscribe(_on_push)
