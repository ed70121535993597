"""Builders for remote documents and DTOs used across tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any

from src.storefront.core.models.dto import BrandDTO, CartDTO, CategoryDTO, ProductDTO

T0 = datetime(2025, 10, 1, 12, 0, tzinfo=UTC)


def at(minutes: int) -> datetime:
    return T0 + timedelta(minutes=minutes)


def product_doc(product_id: str, **fields: Any) -> dict[str, Any]:
    doc = {
        "id": product_id,
        "name": f"Product {product_id}",
        "description": "",
        "categoryId": "c1",
        "brandId": "b1",
        "price": 100,
        "imageURL": f"https://img.test/{product_id}.png",
        "isActive": True,
        "keywords": [],
        "createdAt": T0.isoformat(),
        "updatedAt": T0.isoformat(),
    }
    doc.update(fields)
    return doc


def category_doc(category_id: str, **fields: Any) -> dict[str, Any]:
    doc = {
        "id": category_id,
        "name": f"Category {category_id}",
        "imageURL": "",
        "brandIds": ["b1"],
        "isActive": True,
        "createdAt": T0.isoformat(),
        "updatedAt": T0.isoformat(),
    }
    doc.update(fields)
    return doc


def brand_doc(brand_id: str, **fields: Any) -> dict[str, Any]:
    doc = {
        "id": brand_id,
        "name": f"Brand {brand_id}",
        "imageURL": "",
        "isActive": True,
        "createdAt": T0.isoformat(),
        "updatedAt": T0.isoformat(),
    }
    doc.update(fields)
    return doc


def product(product_id: str, **fields: Any) -> ProductDTO:
    return ProductDTO.model_validate(product_doc(product_id, **fields))


def category(category_id: str, **fields: Any) -> CategoryDTO:
    return CategoryDTO.model_validate(category_doc(category_id, **fields))


def brand(brand_id: str, **fields: Any) -> BrandDTO:
    return BrandDTO.model_validate(brand_doc(brand_id, **fields))


def cart_line(user_id: str, product_id: str, quantity: int = 1, **fields: Any) -> CartDTO:
    values: dict[str, Any] = {
        "user_id": user_id,
        "product_id": product_id,
        "brand_name": "Brand b1",
        "title": f"Product {product_id}",
        "price": Decimal("100"),
        "quantity": quantity,
        "updated_at": T0,
    }
    values.update(fields)
    return CartDTO(**values)


class Recorder:
    """Callback collecting every value it receives."""

    def __init__(self):
        self.values: list[Any] = []

    def __call__(self, value: Any) -> None:
        self.values.append(value)

    @property
    def last(self) -> Any:
        return self.values[-1]

    def ids(self, index: int = -1) -> list[str]:
        return [item.id for item in self.values[index]]
