"""Local cache of a user's orders."""

from __future__ import annotations

from collections.abc import Sequence

from sqlmodel import Session, col, select

from src.storefront.core.mapping import order_from_row, order_row_values
from src.storefront.core.models.dto import OrderDTO
from src.storefront.core.storage.base_store import LiveQuery, UpsertStats
from src.storefront.core.storage.user_store import UserScopedStore
from src.storefront.entities import Order, OrderStatus, OrderTable
from src.storefront.entities.core._base import utcnow


class OrdersStore(UserScopedStore):
    """Orders per user, newest first."""

    name = "OrdersStore"
    topic_prefix = "orders"
    table = OrderTable

    @staticmethod
    def _select_orders(session: Session, user_id: str) -> list[Order]:
        statement = (
            select(OrderTable)
            .where(OrderTable.user_id == user_id)
            .order_by(col(OrderTable.created_at).desc(), col(OrderTable.id))
        )
        return [order_from_row(row) for row in session.exec(statement)]

    def observe_orders(self, user_id: str) -> LiveQuery[list[Order]]:
        return self._shared_query(user_id, lambda session: self._select_orders(session, user_id), [])

    def orders(self, user_id: str) -> list[Order]:
        return self._read(lambda session: self._select_orders(session, user_id))

    def replace_all(self, user_id: str, dtos: Sequence[OrderDTO]) -> bool:
        """Make the cached orders of ``user_id`` equal to ``dtos``."""
        keep = {dto.id for dto in dtos if dto.user_id == user_id}

        def _apply(session: Session) -> bool:
            removed = 0
            for row in self._user_rows(session, user_id):
                if row.id not in keep:
                    session.delete(row)
                    removed += 1
            rows = [order_row_values(dto) for dto in dtos if dto.user_id == user_id]
            stats = self._upsert_rows(session, OrderTable, rows) if rows else UpsertStats()
            return bool(removed) or stats.changed

        return self._write("replace_all", _apply, [self.topic(user_id)])

    def upsert(self, dto: OrderDTO) -> bool:
        def _apply(session: Session) -> bool:
            return self._upsert_rows(session, OrderTable, [order_row_values(dto)]).changed

        return self._write("upsert", _apply, [self.topic(dto.user_id)])

    def update_status(self, order_id: str, status: OrderStatus) -> bool:
        """Set the status of a cached order. Returns False when unknown or unchanged."""
        topics: list[str] = []

        def _apply(session: Session) -> bool:
            row = session.get(OrderTable, order_id)
            if row is None or row.status == status.value:
                return False
            row.status = status.value
            row.updated_at = utcnow()
            topics.append(self.topic(row.user_id))
            return True

        return self._write("update_status", _apply, topics)
