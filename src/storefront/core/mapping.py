"""Pure transformations between wire DTOs, table rows and domain entities."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any, TypeVar

from loguru import logger
from pydantic import ValidationError

from src.storefront.core.models.dto import (
    BrandDTO,
    CartDTO,
    CategoryDTO,
    FavoriteDTO,
    OrderDTO,
    ProductDTO,
    ProfileDTO,
    WireModel,
)
from src.storefront.entities import (
    Brand,
    BrandTable,
    CartItem,
    CartItemTable,
    Category,
    CategoryTable,
    FavoriteItem,
    FavoriteItemTable,
    Order,
    OrderItem,
    OrderStatus,
    OrderTable,
    Product,
    ProductMeta,
    ProductTable,
    UserProfile,
    UserProfileTable,
)
from src.storefront.entities.core._base import as_utc

W = TypeVar("W", bound=WireModel)

KEYWORD_SEPARATOR = "\x1f"


def _price(value: float | Decimal) -> Decimal:
    return Decimal(str(value))


def keywords_index(keywords: Iterable[str]) -> str:
    """Lowercased keywords, each wrapped in the unit separator.

    A substring match against this column never spans two keywords.
    """
    keywords = [k.lower() for k in keywords]
    if not keywords:
        return ""
    return KEYWORD_SEPARATOR + KEYWORD_SEPARATOR.join(keywords) + KEYWORD_SEPARATOR


# -- documents -> DTOs -------------------------------------------------------


def dto_from_document(model: type[W], doc_id: str | None, data: Mapping[str, Any]) -> W:
    """Parse one remote document. ``doc_id`` wins over an ``id`` field."""
    payload = dict(data)
    if doc_id is not None:
        payload["id"] = doc_id
    return model.model_validate(payload)


def dtos_from_documents(
    model: type[W], documents: Iterable[tuple[str | None, Mapping[str, Any]]]
) -> list[W]:
    """Parse a collection, skipping documents that fail validation."""
    result: list[W] = []
    for doc_id, data in documents:
        try:
            result.append(dto_from_document(model, doc_id, data))
        except ValidationError as e:
            logger.warning(
                "Skipping malformed {} document {}: {}", model.__name__, doc_id, e.error_count()
            )
    return result


# -- catalog -----------------------------------------------------------------


def product_row_values(dto: ProductDTO) -> dict[str, Any]:
    """Column values for a product row; ``category_is_active`` is set by the store."""
    return {
        "id": dto.id,
        "name": dto.name,
        "name_lower": (dto.name_lower or dto.name).lower(),
        "description": dto.description,
        "category_id": dto.category_id,
        "brand_id": dto.brand_id,
        "price": float(dto.price),
        "image_url": dto.image_url,
        "is_active": dto.is_active,
        "keywords": list(dto.keywords),
        "keywords_index": keywords_index(dto.keywords),
        "created_at": dto.created_at,
        "updated_at": dto.updated_at,
    }


def category_row_values(dto: CategoryDTO) -> dict[str, Any]:
    return {
        "id": dto.id,
        "name": dto.name,
        "image_url": dto.image_url,
        "brand_ids": list(dto.brand_ids),
        "is_active": dto.is_active,
        "created_at": dto.created_at,
        "updated_at": dto.updated_at,
    }


def brand_row_values(dto: BrandDTO) -> dict[str, Any]:
    return {
        "id": dto.id,
        "name": dto.name,
        "image_url": dto.image_url,
        "is_active": dto.is_active,
        "created_at": dto.created_at,
        "updated_at": dto.updated_at,
    }


def product_from_row(row: ProductTable) -> Product:
    return Product(
        id=row.id,
        name=row.name,
        name_lower=row.name_lower,
        description=row.description,
        category_id=row.category_id,
        brand_id=row.brand_id,
        price=_price(row.price),
        image_url=row.image_url,
        is_active=row.is_active,
        keywords=list(row.keywords or []),
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


def category_from_row(row: CategoryTable) -> Category:
    return Category(
        id=row.id,
        name=row.name,
        image_url=row.image_url,
        brand_ids=list(row.brand_ids or []),
        is_active=row.is_active,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


def brand_from_row(row: BrandTable) -> Brand:
    return Brand(
        id=row.id,
        name=row.name,
        image_url=row.image_url,
        is_active=row.is_active,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


def product_from_dto(dto: ProductDTO) -> Product:
    return Product(
        id=dto.id,
        name=dto.name,
        name_lower=(dto.name_lower or dto.name).lower(),
        description=dto.description,
        category_id=dto.category_id,
        brand_id=dto.brand_id,
        price=dto.price,
        image_url=dto.image_url,
        is_active=dto.is_active,
        keywords=list(dto.keywords),
        created_at=dto.created_at,
        updated_at=dto.updated_at,
    )


def category_from_dto(dto: CategoryDTO) -> Category:
    return Category(**dto.model_dump())


def brand_from_dto(dto: BrandDTO) -> Brand:
    return Brand(**dto.model_dump())


def product_meta(product: ProductTable, brand: BrandTable | None) -> ProductMeta:
    return ProductMeta(
        brand_name=brand.name if brand is not None else "",
        title=product.name,
        price=_price(product.price),
        image_url=product.image_url or None,
    )


# -- user scoped ---------------------------------------------------------------


def cart_row_values(dto: CartDTO) -> dict[str, Any]:
    return {
        "user_id": dto.user_id,
        "product_id": dto.product_id,
        "brand_name": dto.brand_name,
        "title": dto.title,
        "price": float(dto.price),
        "image_url": dto.image_url,
        "quantity": dto.quantity,
        "updated_at": dto.updated_at,
    }


def cart_item_from_row(row: CartItemTable) -> CartItem:
    return CartItem(
        user_id=row.user_id,
        product_id=row.product_id,
        brand_name=row.brand_name,
        title=row.title,
        price=_price(row.price),
        image_url=row.image_url,
        quantity=row.quantity,
        updated_at=as_utc(row.updated_at),
    )


def favorite_row_values(dto: FavoriteDTO) -> dict[str, Any]:
    return {
        "user_id": dto.user_id,
        "product_id": dto.product_id,
        "brand_name": dto.brand_name,
        "title": dto.title,
        "price": float(dto.price),
        "image_url": dto.image_url,
        "updated_at": dto.updated_at,
    }


def favorite_item_from_row(row: FavoriteItemTable) -> FavoriteItem:
    return FavoriteItem(
        user_id=row.user_id,
        product_id=row.product_id,
        brand_name=row.brand_name,
        title=row.title,
        price=_price(row.price),
        image_url=row.image_url,
        updated_at=as_utc(row.updated_at),
    )


def profile_row_values(dto: ProfileDTO) -> dict[str, Any]:
    return {
        "user_id": dto.user_id,
        "name": dto.name,
        "email": dto.email,
        "phone": dto.phone,
        "updated_at": dto.updated_at,
    }


def profile_from_row(row: UserProfileTable) -> UserProfile:
    return UserProfile(
        user_id=row.user_id,
        name=row.name,
        email=row.email,
        phone=row.phone,
        updated_at=as_utc(row.updated_at),
    )


def order_row_values(dto: OrderDTO) -> dict[str, Any]:
    return {
        "id": dto.id,
        "user_id": dto.user_id,
        "status": dto.status.value,
        "receive_address": dto.receive_address,
        "payment_method": dto.payment_method,
        "comment": dto.comment or "",
        "phone_e164": dto.phone_e164,
        "items": [item.model_dump(mode="json") for item in dto.items],
        "created_at": dto.created_at,
        "updated_at": dto.updated_at,
    }


def order_from_row(row: OrderTable) -> Order:
    return Order(
        id=row.id,
        user_id=row.user_id,
        status=OrderStatus(row.status),
        receive_address=row.receive_address,
        payment_method=row.payment_method,
        comment=row.comment,
        phone_e164=row.phone_e164,
        items=[OrderItem.model_validate(item) for item in row.items or []],
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )
