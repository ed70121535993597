"""Interfaces of the remote document service.

Every ``listen_*`` stream emits the full current collection (never a delta)
and keeps its underlying listener alive only while it has subscribers.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from src.storefront.core.models.dto import BrandDTO, CartDTO, CategoryDTO, FavoriteDTO, ProductDTO, ProfileDTO
from src.storefront.core.streams import Observable


@runtime_checkable
class RemoteCatalogSource(Protocol):
    """Authoritative catalog: products, categories and brands."""

    async def fetch_products(self) -> list[ProductDTO]: ...

    async def fetch_categories(self) -> list[CategoryDTO]: ...

    async def fetch_brands(self) -> list[BrandDTO]: ...

    def listen_products(self) -> Observable[list[ProductDTO]]: ...

    def listen_categories(self) -> Observable[list[CategoryDTO]]: ...

    def listen_brands(self) -> Observable[list[BrandDTO]]: ...


@runtime_checkable
class CartRemoteSource(Protocol):
    async def fetch_cart(self, user_id: str) -> list[CartDTO]: ...

    async def set_cart_quantity(self, user_id: str, dto: CartDTO, quantity: int) -> None:
        """Set the line to ``quantity``; zero or less deletes it."""

    async def add_to_cart(self, user_id: str, dto: CartDTO, delta: int) -> None:
        """Create the line or add ``delta`` to its quantity."""

    async def remove_from_cart(self, user_id: str, product_id: str) -> None: ...

    async def clear_cart(self, user_id: str) -> None: ...

    def listen_cart(self, user_id: str) -> Observable[list[CartDTO]]: ...


@runtime_checkable
class FavoritesRemoteSource(Protocol):
    async def fetch_favorites(self, user_id: str) -> list[FavoriteDTO]: ...

    async def add_favorite(self, user_id: str, dto: FavoriteDTO) -> None: ...

    async def remove_favorite(self, user_id: str, product_id: str) -> None: ...

    async def clear_favorites(self, user_id: str) -> None: ...

    def listen_favorites(self, user_id: str) -> Observable[list[FavoriteDTO]]: ...


@runtime_checkable
class ProfileRemoteSource(Protocol):
    async def fetch_profile(self, user_id: str) -> ProfileDTO | None: ...

    async def ensure_initial_profile(self, user_id: str, name: str, email: str) -> None:
        """Create the profile document, or refresh name and email when it exists."""

    async def update_profile(self, user_id: str, **fields: str) -> None: ...

    def listen_profile(self, user_id: str) -> Observable[ProfileDTO | None]: ...
