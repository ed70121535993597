"""Base classes for stores partitioned by user id."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar

from loguru import logger
from sqlmodel import Session, SQLModel, col, select

from src.storefront.core.services.database.db_session import DbSessionService
from src.storefront.core.storage.base_store import BaseStore, LiveQuery

T = TypeVar("T")
E = TypeVar("E")


class UserScopedStore(BaseStore):
    """Store whose rows all carry a ``user_id`` column.

    Writes for one user only re-evaluate live queries of that user.
    """

    topic_prefix = "user"
    table: type[SQLModel]

    def __init__(self, db: DbSessionService):
        super().__init__(db)
        self._shared: dict[str, LiveQuery[Any]] = {}

    def topic(self, user_id: str) -> str:
        return f"{self.topic_prefix}:{user_id}"

    def _shared_query(self, user_id: str, loader: Callable[[Session], T], initial: T) -> LiveQuery[T]:
        with self.lock:
            query = self._shared.get(user_id)
            if query is None:
                query = self._live_query([self.topic(user_id)], loader, initial)
                self._shared[user_id] = query
            return query

    def _user_rows(self, session: Session, user_id: str) -> list[Any]:
        statement = select(self.table).where(col(self.table.user_id) == user_id)
        return list(session.exec(statement))

    def clear(self, user_id: str) -> int:
        """Delete everything cached for ``user_id``. Returns the number of rows removed."""

        def _apply(session: Session) -> int:
            rows = self._user_rows(session, user_id)
            for row in rows:
                session.delete(row)
            return len(rows)

        removed = self._write("clear", _apply, [self.topic(user_id)])
        with self.lock:
            query = self._shared.get(user_id)
            if query is not None and not query.observed:
                del self._shared[user_id]
        logger.debug("{} cleared {} rows for user {}", self.name, removed, user_id)
        return removed

    def count(self, user_id: str) -> int:
        return self._read(lambda session: self._count(session, self.table, col(self.table.user_id) == user_id))


class UserItemsStore(UserScopedStore, Generic[E]):
    """Per-user list of product entries keyed by ``(user_id, product_id)``.

    Subclasses provide the row/entity mapping. Items are ordered most recently
    updated first.
    """

    def _row_values(self, dto: Any) -> dict[str, Any]:
        raise NotImplementedError

    def _entity(self, row: Any) -> E:
        raise NotImplementedError

    def _select_items(self, session: Session, user_id: str) -> list[E]:
        statement = (
            select(self.table)
            .where(col(self.table.user_id) == user_id)
            .order_by(col(self.table.updated_at).desc(), col(self.table.product_id))
        )
        return [self._entity(row) for row in session.exec(statement)]

    def observe_items(self, user_id: str) -> LiveQuery[list[E]]:
        return self._shared_query(user_id, lambda session: self._select_items(session, user_id), [])

    def items(self, user_id: str) -> list[E]:
        return self._read(lambda session: self._select_items(session, user_id))

    def replace_all(self, user_id: str, dtos: Sequence[Any]) -> bool:
        """Make the cached items of ``user_id`` equal to ``dtos``.

        Entries belonging to another user are ignored. Returns whether anything changed.
        """
        incoming: dict[str, dict[str, Any]] = {}
        for dto in dtos:
            if dto.user_id != user_id:
                logger.warning("{} ignoring entry of user {} while replacing {}", self.name, dto.user_id, user_id)
                continue
            if not self._keep(dto):
                continue
            incoming[dto.product_id] = self._row_values(dto)

        def _apply(session: Session) -> bool:
            changed = False
            for row in self._user_rows(session, user_id):
                values = incoming.pop(row.product_id, None)
                if values is None:
                    session.delete(row)
                    changed = True
                elif not self._matches(row, values):
                    for key, value in values.items():
                        setattr(row, key, value)
                    changed = True
            for values in incoming.values():
                session.add(self.table(**values))
                changed = True
            return changed

        return self._write("replace_all", _apply, [self.topic(user_id)])

    def upsert(self, user_id: str, dto: Any) -> bool:
        return self._upsert(user_id, dto, self._merge)

    def _upsert(
        self,
        user_id: str,
        dto: Any,
        merge: Callable[[Any | None, dict[str, Any]], dict[str, Any] | None],
    ) -> bool:
        if dto.user_id != user_id:
            raise ValueError(f"{self.name}: entry belongs to {dto.user_id}, not {user_id}")

        def _apply(session: Session) -> bool:
            row = session.get(self.table, (user_id, dto.product_id))
            values = merge(row, self._row_values(dto))
            if values is None:
                if row is None:
                    return False
                session.delete(row)
                return True
            if row is None:
                session.add(self.table(**values))
                return True
            if self._matches(row, values):
                return False
            for key, value in values.items():
                setattr(row, key, value)
            return True

        return self._write("upsert", _apply, [self.topic(user_id)])

    def remove(self, user_id: str, product_id: str) -> bool:
        def _apply(session: Session) -> bool:
            row = session.get(self.table, (user_id, product_id))
            if row is None:
                return False
            session.delete(row)
            return True

        return self._write("remove", _apply, [self.topic(user_id)])

    def contains(self, user_id: str, product_id: str) -> bool:
        return self._read(lambda session: session.get(self.table, (user_id, product_id)) is not None)

    def _keep(self, dto: Any) -> bool:
        return True

    def _merge(self, row: Any | None, values: dict[str, Any]) -> dict[str, Any] | None:
        """Values to store for an upsert, or None to delete the entry."""
        return values
