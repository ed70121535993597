"""Remote source fixtures and fakes."""

from __future__ import annotations

from typing import Any

import pytest

from src.storefront.core.models.dto import BrandDTO, CategoryDTO, ProductDTO
from src.storefront.core.remote import InMemoryDocumentStore
from src.storefront.core.streams import Observable, PassthroughSubject


class FakeCatalogSource:
    """Catalog source with scripted fetch results and push subjects."""

    def __init__(self):
        self.products: list[ProductDTO] = []
        self.categories: list[CategoryDTO] = []
        self.brands: list[BrandDTO] = []
        self.failures: dict[str, BaseException] = {}
        self.fetch_calls: list[str] = []
        self.product_pushes: PassthroughSubject[list[ProductDTO]] = PassthroughSubject()
        self.category_pushes: PassthroughSubject[list[CategoryDTO]] = PassthroughSubject()
        self.brand_pushes: PassthroughSubject[list[BrandDTO]] = PassthroughSubject()

    async def _fetch(self, name: str, value: list[Any]) -> list[Any]:
        self.fetch_calls.append(name)
        if name in self.failures:
            raise self.failures[name]
        return list(value)

    async def fetch_products(self) -> list[ProductDTO]:
        return await self._fetch("products", self.products)

    async def fetch_categories(self) -> list[CategoryDTO]:
        return await self._fetch("categories", self.categories)

    async def fetch_brands(self) -> list[BrandDTO]:
        return await self._fetch("brands", self.brands)

    def listen_products(self) -> Observable[list[ProductDTO]]:
        return self.product_pushes

    def listen_categories(self) -> Observable[list[CategoryDTO]]:
        return self.category_pushes

    def listen_brands(self) -> Observable[list[BrandDTO]]:
        return self.brand_pushes


@pytest.fixture
def documents(test_config) -> InMemoryDocumentStore:
    return InMemoryDocumentStore(active_only=test_config.remote.active_only)


@pytest.fixture
def fake_catalog_source() -> FakeCatalogSource:
    return FakeCatalogSource()

