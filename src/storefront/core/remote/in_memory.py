"""In-memory document service.

Keeps documents as plain camelCase dicts under collection paths
(``products``, ``users/{uid}/cart``, ...) and pushes full collection snapshots
to listeners on every write, the way a realtime document database does.
Used for development and tests.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from loguru import logger

from src.storefront.core.mapping import dtos_from_documents
from src.storefront.core.models.dto import (
    BrandDTO,
    CartDTO,
    CategoryDTO,
    FavoriteDTO,
    ProductDTO,
    ProfileDTO,
    WireModel,
)
from src.storefront.core.streams import CurrentValueSubject, Observable
from src.storefront.entities.core._base import utcnow

W = TypeVar("W", bound=WireModel)

Documents = list[tuple[str, dict[str, Any]]]

USERS = "users"


def _cart_path(user_id: str) -> str:
    return f"{USERS}/{user_id}/cart"


def _favorites_path(user_id: str) -> str:
    return f"{USERS}/{user_id}/favorites"


class InMemoryDocumentStore:
    """Catalog, cart, favorites and profile sources backed by dicts."""

    def __init__(self, *, active_only: bool = False):
        self._active_only = active_only
        self._lock = threading.RLock()
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._subjects: dict[str, CurrentValueSubject[Documents]] = {}

    # -- documents -------------------------------------------------------------

    def documents(self, path: str) -> Documents:
        with self._lock:
            docs = self._collections.get(path, {})
            return [(doc_id, copy.deepcopy(data)) for doc_id, data in sorted(docs.items())]

    def document(self, path: str, doc_id: str) -> dict[str, Any] | None:
        with self._lock:
            data = self._collections.get(path, {}).get(doc_id)
            return copy.deepcopy(data) if data is not None else None

    def set_document(self, path: str, doc_id: str, data: Mapping[str, Any], *, merge: bool = False) -> None:
        with self._lock:
            docs = self._collections.setdefault(path, {})
            if merge and doc_id in docs:
                docs[doc_id] = {**docs[doc_id], **copy.deepcopy(dict(data))}
            else:
                docs[doc_id] = copy.deepcopy(dict(data))
            self._publish(path)

    def delete_document(self, path: str, doc_id: str) -> None:
        with self._lock:
            if self._collections.get(path, {}).pop(doc_id, None) is not None:
                self._publish(path)

    def delete_collection(self, path: str) -> None:
        with self._lock:
            if self._collections.pop(path, None):
                self._publish(path)

    def load(self, path: str, documents: Iterable[Mapping[str, Any]]) -> int:
        """Write many documents keyed by their ``id`` field in one batch."""
        count = 0
        with self._lock:
            docs = self._collections.setdefault(path, {})
            for data in documents:
                payload = dict(data)
                doc_id = str(payload.pop("id"))
                docs[doc_id] = copy.deepcopy(payload)
                count += 1
            self._publish(path)
        logger.debug("Loaded {} documents into {}", count, path)
        return count

    def listen(self, path: str) -> Observable[Documents]:
        with self._lock:
            subject = self._subjects.get(path)
            if subject is None:
                subject = CurrentValueSubject(self.documents(path))
                self._subjects[path] = subject
            return subject

    def _publish(self, path: str) -> None:
        subject = self._subjects.get(path)
        if subject is not None:
            subject.send(self.documents(path))

    def _parse(self, model: type[W], path: str, *, active_only: bool = False) -> list[W]:
        dtos = dtos_from_documents(model, self.documents(path))
        if active_only:
            dtos = [dto for dto in dtos if getattr(dto, "is_active", True)]
        return dtos

    # -- catalog -----------------------------------------------------------------

    async def fetch_products(self) -> list[ProductDTO]:
        return self._parse(ProductDTO, "products", active_only=self._active_only)

    async def fetch_categories(self) -> list[CategoryDTO]:
        return self._parse(CategoryDTO, "categories", active_only=self._active_only)

    async def fetch_brands(self) -> list[BrandDTO]:
        return self._parse(BrandDTO, "brands", active_only=self._active_only)

    def listen_products(self) -> Observable[list[ProductDTO]]:
        return self._listen_parsed(ProductDTO, "products")

    def listen_categories(self) -> Observable[list[CategoryDTO]]:
        return self._listen_parsed(CategoryDTO, "categories")

    def listen_brands(self) -> Observable[list[BrandDTO]]:
        return self._listen_parsed(BrandDTO, "brands")

    def _listen_parsed(self, model: type[W], path: str) -> Observable[list[W]]:
        return self.listen(path).map(lambda docs: dtos_from_documents(model, docs))

    # -- cart --------------------------------------------------------------------

    @staticmethod
    def _user_items(model: type[W], user_id: str, docs: Documents) -> list[W]:
        return dtos_from_documents(
            model,
            ((None, {**data, "userId": user_id, "productId": doc_id}) for doc_id, data in docs),
        )

    async def fetch_cart(self, user_id: str) -> list[CartDTO]:
        return self._user_items(CartDTO, user_id, self.documents(_cart_path(user_id)))

    async def set_cart_quantity(self, user_id: str, dto: CartDTO, quantity: int) -> None:
        path = _cart_path(user_id)
        if quantity <= 0:
            self.delete_document(path, dto.product_id)
            return
        self.set_document(path, dto.product_id, self._cart_fields(dto, quantity), merge=True)

    async def add_to_cart(self, user_id: str, dto: CartDTO, delta: int) -> None:
        if delta == 0:
            return
        path = _cart_path(user_id)
        with self._lock:
            current = self.document(path, dto.product_id) or {}
            quantity = int(current.get("quantity") or 0) + delta
            if quantity <= 0:
                self.delete_document(path, dto.product_id)
            else:
                self.set_document(path, dto.product_id, self._cart_fields(dto, quantity), merge=True)

    async def remove_from_cart(self, user_id: str, product_id: str) -> None:
        self.delete_document(_cart_path(user_id), product_id)

    async def clear_cart(self, user_id: str) -> None:
        self.delete_collection(_cart_path(user_id))

    def listen_cart(self, user_id: str) -> Observable[list[CartDTO]]:
        return self.listen(_cart_path(user_id)).map(lambda docs: self._user_items(CartDTO, user_id, docs))

    @staticmethod
    def _cart_fields(dto: CartDTO, quantity: int) -> dict[str, Any]:
        doc = dto.to_document()
        for key in ("userId", "productId"):
            doc.pop(key, None)
        doc["quantity"] = quantity
        doc["updatedAt"] = utcnow().isoformat()
        return doc

    # -- favorites -----------------------------------------------------------------

    async def fetch_favorites(self, user_id: str) -> list[FavoriteDTO]:
        return self._user_items(FavoriteDTO, user_id, self.documents(_favorites_path(user_id)))

    async def add_favorite(self, user_id: str, dto: FavoriteDTO) -> None:
        doc = dto.to_document()
        for key in ("userId", "productId"):
            doc.pop(key, None)
        self.set_document(_favorites_path(user_id), dto.product_id, doc, merge=True)

    async def remove_favorite(self, user_id: str, product_id: str) -> None:
        self.delete_document(_favorites_path(user_id), product_id)

    async def clear_favorites(self, user_id: str) -> None:
        self.delete_collection(_favorites_path(user_id))

    def listen_favorites(self, user_id: str) -> Observable[list[FavoriteDTO]]:
        return self.listen(_favorites_path(user_id)).map(
            lambda docs: self._user_items(FavoriteDTO, user_id, docs)
        )

    # -- profile -------------------------------------------------------------------

    @staticmethod
    def _profile(user_id: str, data: Mapping[str, Any] | None) -> ProfileDTO | None:
        if data is None:
            return None
        parsed = dtos_from_documents(ProfileDTO, [(None, {**data, "userId": user_id})])
        return parsed[0] if parsed else None

    async def fetch_profile(self, user_id: str) -> ProfileDTO | None:
        return self._profile(user_id, self.document(USERS, user_id))

    async def ensure_initial_profile(self, user_id: str, name: str, email: str) -> None:
        now = utcnow().isoformat()
        with self._lock:
            if self.document(USERS, user_id) is not None:
                self.set_document(USERS, user_id, {"name": name, "email": email, "updatedAt": now}, merge=True)
                return
            self.set_document(
                USERS,
                user_id,
                {"name": name, "email": email, "phone": "", "createdAt": now, "updatedAt": now},
            )

    async def update_profile(self, user_id: str, **fields: str) -> None:
        allowed = {"name", "email", "phone"}
        unknown = set(fields) - allowed
        if unknown:
            raise ValueError(f"Unknown profile fields: {sorted(unknown)}")
        self.set_document(USERS, user_id, {**fields, "updatedAt": utcnow().isoformat()}, merge=True)

    def listen_profile(self, user_id: str) -> Observable[ProfileDTO | None]:
        return self.listen(USERS).map(lambda docs: self._profile(user_id, dict(docs).get(user_id)))

    # -- helpers -----------------------------------------------------------------

    def seed(self, catalog: Mapping[str, Iterable[Mapping[str, Any]]]) -> dict[str, int]:
        """Load ``{"products": [...], "categories": [...], "brands": [...]}``."""
        return {path: self.load(path, docs) for path, docs in catalog.items()}

