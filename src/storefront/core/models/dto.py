"""Wire records exchanged with the remote document source.

Documents use camelCase keys. Missing fields fall back to neutral defaults so
a partially written document never blocks a sync.
"""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from src.storefront.entities.core._base import EPOCH, as_utc
from src.storefront.entities.user.order.entity import OrderStatus


def _parse_timestamp(value: Any) -> datetime:
    if value is None or value == "":
        return EPOCH
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, UTC)
    if isinstance(value, str):
        return as_utc(datetime.fromisoformat(value))
    if hasattr(value, "timestamp"):
        return datetime.fromtimestamp(value.timestamp(), UTC)
    raise ValueError(f"Unsupported timestamp value: {value!r}")


def _parse_price(value: Any) -> Any:
    if value is None:
        return Decimal("0")
    if isinstance(value, float):
        return Decimal(str(value))
    return value


def _parse_str_list(value: Any) -> Any:
    if value is None:
        return []
    return value


def _parse_str(value: Any) -> Any:
    return "" if value is None else value


Timestamp = Annotated[datetime, BeforeValidator(_parse_timestamp)]
Price = Annotated[Decimal, BeforeValidator(_parse_price), Field(ge=0)]
StrList = Annotated[list[str], BeforeValidator(_parse_str_list)]
Text = Annotated[str, BeforeValidator(_parse_str)]


class WireModel(BaseModel):
    """Base for DTOs: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class ProductDTO(WireModel):
    id: str
    name: Text = ""
    name_lower: Text = ""
    description: Text = ""
    category_id: Text = ""
    brand_id: Text = ""
    price: Price = Decimal("0")
    image_url: Text = Field(default="", alias="imageURL")
    is_active: bool = True
    created_at: Timestamp = EPOCH
    updated_at: Timestamp = EPOCH
    keywords: StrList = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _default_name_lower(cls, data: Any) -> Any:
        if isinstance(data, dict) and not (data.get("nameLower") or data.get("name_lower")):
            name = data.get("name") or ""
            data = {**data, "nameLower": name.lower()}
        return data


class CategoryDTO(WireModel):
    id: str
    name: Text = ""
    image_url: Text = Field(default="", alias="imageURL")
    brand_ids: StrList = Field(default_factory=list)
    is_active: bool = True
    created_at: Timestamp = EPOCH
    updated_at: Timestamp = EPOCH


class BrandDTO(WireModel):
    id: str
    name: Text = ""
    image_url: Text = Field(default="", alias="imageURL")
    is_active: bool = True
    created_at: Timestamp = EPOCH
    updated_at: Timestamp = EPOCH


class CartDTO(WireModel):
    user_id: str
    product_id: str
    brand_name: Text = ""
    title: Text = ""
    price: Price = Decimal("0")
    image_url: str | None = Field(default=None, alias="imageURL")
    quantity: int = 1
    updated_at: Timestamp = EPOCH


class FavoriteDTO(WireModel):
    user_id: str
    product_id: str
    brand_name: Text = ""
    title: Text = ""
    price: Price = Decimal("0")
    image_url: str | None = Field(default=None, alias="imageURL")
    updated_at: Timestamp = EPOCH


class ProfileDTO(WireModel):
    user_id: str
    name: Text = ""
    email: Text = ""
    phone: Text = ""
    updated_at: Timestamp = EPOCH


class OrderItemDTO(WireModel):
    product_id: str
    title: Text = ""
    brand_name: Text = ""
    price: Price = Decimal("0")
    image_url: str | None = Field(default=None, alias="imageURL")
    quantity: int = 1


class OrderDTO(WireModel):
    id: str
    user_id: str
    created_at: Timestamp = EPOCH
    updated_at: Timestamp = EPOCH
    status: OrderStatus = OrderStatus.ASSEMBLING
    receive_address: Text = ""
    payment_method: Text = ""
    comment: str | None = None
    phone_e164: str | None = Field(default=None, alias="phoneE164")
    items: list[OrderItemDTO] = Field(default_factory=list)
