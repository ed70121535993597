"""Local cart cache."""

from __future__ import annotations

from typing import Any

from sqlmodel import Session

from src.storefront.core.mapping import cart_item_from_row, cart_row_values
from src.storefront.core.models.dto import CartDTO
from src.storefront.core.storage.user_store import UserItemsStore
from src.storefront.entities import CartItem, CartItemTable
from src.storefront.entities.core._base import utcnow


class CartStore(UserItemsStore[CartItem]):
    """Cart lines per user. A quantity of zero or less removes the line."""

    name = "CartStore"
    topic_prefix = "cart"
    table = CartItemTable

    def _row_values(self, dto: CartDTO) -> dict[str, Any]:
        return cart_row_values(dto)

    def _entity(self, row: CartItemTable) -> CartItem:
        return cart_item_from_row(row)

    def _keep(self, dto: CartDTO) -> bool:
        return dto.quantity > 0

    def snapshot(self, user_id: str) -> list[CartItem] | None:
        """Cached cart of ``user_id``, or None when nothing is cached."""
        items = self.items(user_id)
        return items or None

    def upsert(self, user_id: str, dto: CartDTO, accumulate: bool = False) -> bool:
        """Store a cart line. With ``accumulate`` the quantity adds to the cached one."""
        def _merge(row: CartItemTable | None, values: dict[str, Any]) -> dict[str, Any] | None:
            if accumulate and row is not None:
                values = {**values, "quantity": row.quantity + values["quantity"]}
            return values if values["quantity"] > 0 else None

        return self._upsert(user_id, dto, _merge)

    def set_quantity(self, user_id: str, product_id: str, quantity: int) -> bool:
        if quantity <= 0:
            return self.remove(user_id, product_id)

        def _apply(session: Session) -> bool:
            row = session.get(CartItemTable, (user_id, product_id))
            if row is None or row.quantity == quantity:
                return False
            row.quantity = quantity
            row.updated_at = utcnow()
            return True

        return self._write("set_quantity", _apply, [self.topic(user_id)])
