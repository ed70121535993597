"""Local cache of the remote catalog: products, categories and brands."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy import or_
from sqlmodel import Session, select

from src.storefront.core.mapping import (
    brand_from_row,
    brand_row_values,
    category_from_row,
    category_row_values,
    product_from_row,
    product_meta,
    product_row_values,
)
from src.storefront.core.models.dto import BrandDTO, CategoryDTO, ProductDTO
from src.storefront.core.services.database.db_session import DbSessionService
from src.storefront.core.storage.base_store import BaseStore, LiveQuery, UpsertStats
from src.storefront.core.streams import Observable
from src.storefront.entities import (
    Brand,
    BrandTable,
    Category,
    CategoryTable,
    Product,
    ProductMeta,
    ProductTable,
)

PRODUCTS = "products"
CATEGORIES = "categories"
BRANDS = "brands"


class ProductFilter(BaseModel):
    """Constraints of a product query. ``None`` or empty means unconstrained."""

    model_config = ConfigDict(frozen=True)

    query: str | None = None
    category_ids: frozenset[str] | None = None
    brand_ids: frozenset[str] | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    active_only: bool = True

    @field_validator("query")
    @classmethod
    def _normalize_query(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().lower()
        return value or None

    @field_validator("category_ids", "brand_ids", mode="before")
    @classmethod
    def _normalize_ids(cls, value):
        if value is None:
            return None
        if isinstance(value, str):
            value = [value]
        ids = frozenset(v for v in value if v)
        return ids or None

    def matches(self, product: Product, *, category_active: bool = True) -> bool:
        """In-memory twin of the SQL predicate."""
        if self.active_only and not (product.is_active and category_active):
            return False
        if self.query and not product.matches_query(self.query):
            return False
        if self.category_ids and product.category_id not in self.category_ids:
            return False
        if self.brand_ids and product.brand_id not in self.brand_ids:
            return False
        if self.min_price is not None and product.price < self.min_price:
            return False
        if self.max_price is not None and product.price > self.max_price:
            return False
        return True


class CatalogStore(BaseStore):
    """Replica of the remote catalog with live, filterable observation.

    Products are hidden from filtered queries when inactive or when their
    category is cached as inactive, unless ``active_only`` is lifted.
    """

    name = "CatalogStore"

    def __init__(self, db: DbSessionService):
        super().__init__(db)
        self._category_streams: dict[tuple[str, str], LiveQuery[list[Product]]] = {}
        self._categories_stream: LiveQuery[list[Category]] | None = None
        self._brands_stream: LiveQuery[list[Brand]] | None = None

    # -- observe ---------------------------------------------------------------

    def observe_products(self, product_filter: ProductFilter | None = None) -> Observable[list[Product]]:
        product_filter = product_filter or ProductFilter()
        logger.debug("observe_products {}", product_filter)
        return self._live_query(
            [PRODUCTS],
            lambda session: self._select_products(session, product_filter),
            [],
        )

    def observe_products_in_category(
        self, query: str | None = None, category_id: str | None = None
    ) -> Observable[list[Product]]:
        """Single-category shorthand.

        Streams are shared per (query, category) and forgotten once their last
        subscriber leaves.
        """
        key = ((query or "").strip(), category_id or "")
        with self.lock:
            stream = self._category_streams.get(key)
            if stream is None:
                stream = self.observe_products(
                    ProductFilter(query=key[0], category_ids=[key[1]] if key[1] else None)
                )
                self._category_streams[key] = stream
            return stream

    def observe_categories(self) -> Observable[list[Category]]:
        with self.lock:
            if self._categories_stream is None:
                self._categories_stream = self._live_query([CATEGORIES], self._select_categories, [])
            return self._categories_stream

    def observe_brands(self) -> Observable[list[Brand]]:
        with self.lock:
            if self._brands_stream is None:
                self._brands_stream = self._live_query([BRANDS], self._select_brands, [])
            return self._brands_stream

    def observe_product(self, product_id: str) -> Observable[Product | None]:
        def _load(session: Session) -> Product | None:
            row = session.get(ProductTable, product_id)
            return product_from_row(row) if row is not None else None

        return self._live_query([PRODUCTS], _load, None)

    # -- reads -----------------------------------------------------------------

    def products(self, product_filter: ProductFilter | None = None) -> list[Product]:
        product_filter = product_filter or ProductFilter()
        return self._read(lambda session: self._select_products(session, product_filter))

    def categories(self) -> list[Category]:
        return self._read(self._select_categories)

    def brands(self) -> list[Brand]:
        return self._read(self._select_brands)

    def get_product(self, product_id: str) -> Product | None:
        def _load(session: Session) -> Product | None:
            row = session.get(ProductTable, product_id)
            return product_from_row(row) if row is not None else None

        return self._read(_load)

    def meta(self, product_id: str) -> ProductMeta | None:
        """Display fields for cart and favorite entries."""
        def _load(session: Session) -> ProductMeta | None:
            row = session.get(ProductTable, product_id)
            if row is None:
                return None
            brand = session.get(BrandTable, row.brand_id) if row.brand_id else None
            return product_meta(row, brand)

        return self._read(_load)

    def count_products(self) -> int:
        return self._read(lambda session: self._count(session, ProductTable))

    def count_categories(self) -> int:
        return self._read(lambda session: self._count(session, CategoryTable))

    def count_brands(self) -> int:
        return self._read(lambda session: self._count(session, BrandTable))

    def count(self, collection: str) -> int:
        tables = {PRODUCTS: ProductTable, CATEGORIES: CategoryTable, BRANDS: BrandTable}
        if collection not in tables:
            raise ValueError(f"Unknown collection: {collection}")
        return self._read(lambda session: self._count(session, tables[collection]))

    # -- upsert ------------------------------------------------------------------

    def upsert_products(self, dtos: Sequence[ProductDTO]) -> UpsertStats:
        if not dtos:
            return UpsertStats()

        def _apply(session: Session) -> UpsertStats:
            stats = self._upsert_rows(session, ProductTable, [product_row_values(dto) for dto in dtos])
            session.flush()
            self._derive_product_flags(session, {dto.id for dto in dtos})
            return stats

        return self._log_stats("upsert_products", dtos, self._write("upsert_products", _apply, [PRODUCTS]))

    def upsert_categories(self, dtos: Sequence[CategoryDTO]) -> UpsertStats:
        if not dtos:
            return UpsertStats()

        def _apply(session: Session) -> UpsertStats:
            stats = self._upsert_rows(session, CategoryTable, [category_row_values(dto) for dto in dtos])
            session.flush()
            self._sync_category_flags(session, {dto.id for dto in dtos})
            return stats

        # Product visibility follows category activity
        return self._log_stats(
            "upsert_categories",
            dtos,
            self._write("upsert_categories", _apply, [CATEGORIES, PRODUCTS]),
        )

    def upsert_brands(self, dtos: Sequence[BrandDTO]) -> UpsertStats:
        if not dtos:
            return UpsertStats()

        def _apply(session: Session) -> UpsertStats:
            return self._upsert_rows(session, BrandTable, [brand_row_values(dto) for dto in dtos])

        return self._log_stats("upsert_brands", dtos, self._write("upsert_brands", _apply, [BRANDS]))

    # -- internals ---------------------------------------------------------------

    @staticmethod
    def _select_products(session: Session, product_filter: ProductFilter) -> list[Product]:
        statement = select(ProductTable)
        if product_filter.active_only:
            statement = statement.where(
                ProductTable.is_active == True,  # noqa: E712
                ProductTable.category_is_active == True,  # noqa: E712
            )
        if product_filter.query:
            statement = statement.where(
                or_(
                    ProductTable.name_lower.contains(product_filter.query, autoescape=True),
                    ProductTable.keywords_index.contains(product_filter.query, autoescape=True),
                )
            )
        if product_filter.category_ids:
            statement = statement.where(ProductTable.category_id.in_(sorted(product_filter.category_ids)))
        if product_filter.brand_ids:
            statement = statement.where(ProductTable.brand_id.in_(sorted(product_filter.brand_ids)))
        if product_filter.min_price is not None:
            statement = statement.where(ProductTable.price >= float(product_filter.min_price))
        if product_filter.max_price is not None:
            statement = statement.where(ProductTable.price <= float(product_filter.max_price))
        statement = statement.order_by(ProductTable.id)
        return [product_from_row(row) for row in session.exec(statement)]

    @staticmethod
    def _select_categories(session: Session) -> list[Category]:
        statement = select(CategoryTable).order_by(CategoryTable.name, CategoryTable.id)
        return [category_from_row(row) for row in session.exec(statement)]

    @staticmethod
    def _select_brands(session: Session) -> list[Brand]:
        statement = select(BrandTable).order_by(BrandTable.name, BrandTable.id)
        return [brand_from_row(row) for row in session.exec(statement)]

    @classmethod
    def _sync_category_flags(cls, session: Session, category_ids: set[str]) -> int:
        """Copy each category's ``is_active`` onto its products. Returns rows changed."""
        active_by_id: dict[str, bool] = {}
        for chunk in cls._chunks(sorted(category_ids)):
            statement = select(CategoryTable.id, CategoryTable.is_active).where(CategoryTable.id.in_(chunk))
            active_by_id.update({row_id: active for row_id, active in session.exec(statement)})
        if not active_by_id:
            return 0

        changed = 0
        ids = sorted(active_by_id)
        for chunk in cls._chunks(ids):
            for product in session.exec(select(ProductTable).where(ProductTable.category_id.in_(chunk))):
                active = active_by_id[product.category_id]
                if product.category_is_active != active:
                    product.category_is_active = active
                    changed += 1
        return changed

    @classmethod
    def _derive_product_flags(cls, session: Session, product_ids: set[str]) -> int:
        """Set ``category_is_active`` from each product's stored category.

        Products whose category is not cached count as in an active category.
        Returns rows changed.
        """
        products: list[ProductTable] = []
        for chunk in cls._chunks(sorted(product_ids)):
            products.extend(session.exec(select(ProductTable).where(ProductTable.id.in_(chunk))))

        active_by_id: dict[str, bool] = {}
        for chunk in cls._chunks(sorted({p.category_id for p in products})):
            statement = select(CategoryTable.id, CategoryTable.is_active).where(CategoryTable.id.in_(chunk))
            active_by_id.update({row_id: active for row_id, active in session.exec(statement)})

        changed = 0
        for product in products:
            active = active_by_id.get(product.category_id, True)
            if product.category_is_active != active:
                product.category_is_active = active
                changed += 1
        return changed

    def _detach(self, query: LiveQuery[Any]) -> None:
        super()._detach(query)
        with self.lock:
            for key, stream in list(self._category_streams.items()):
                if stream is query:
                    del self._category_streams[key]

    @staticmethod
    def _log_stats(operation: str, dtos: Sequence, stats: UpsertStats) -> UpsertStats:
        logger.debug(
            "{} count={} inserted={} updated={} skipped={} stale={}",
            operation,
            len(dtos),
            stats.inserted,
            stats.updated,
            stats.skipped,
            stats.stale,
        )
        return stats
