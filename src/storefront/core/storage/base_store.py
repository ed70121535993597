"""Shared machinery for the local cache stores.

Every store reads and writes through one ``DbSessionService``. Writes run in a
single transaction and, once committed, re-evaluate the live queries
registered under the topics the write touched. Write and fan-out happen under
the database service's lock, so observers see snapshots in commit order.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, TypeVar

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, func, select

from src.storefront.core.errors import PersistenceError
from src.storefront.core.services.database.db_session import DbSessionService
from src.storefront.core.streams import CurrentValueSubject, Observable, Subscription
from src.storefront.entities.core._base import as_utc

T = TypeVar("T")
R = TypeVar("R")

# Stay below SQLite's bound-parameter limit
_IN_CHUNK = 500


@dataclass
class UpsertStats:
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    stale: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.inserted or self.updated)

    def __bool__(self) -> bool:
        return self.changed


class LiveQuery(Observable[T]):
    """Query result kept current by its store.

    The query is attached to the store while it has subscribers. Attaching
    reloads the result, so a re-subscribed query never replays stale data.
    Equal consecutive results are not re-emitted.
    """

    def __init__(self, store: BaseStore, topics: Iterable[str], loader: Callable[[Session], T], initial: T):
        self._store = store
        self.topics = tuple(topics)
        self._loader = loader
        self._subject: CurrentValueSubject[T] = CurrentValueSubject(
            initial, dedupe=True, on_idle=self._on_idle
        )

    @property
    def value(self) -> T:
        return self._subject.value

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        with self._store.lock:
            if self._subject.subscriber_count == 0:
                self._store._attach(self)
                self.refresh()
            return self._subject.subscribe(callback)

    @property
    def observed(self) -> bool:
        return self._subject.subscriber_count > 0

    def refresh(self) -> None:
        self._subject.send(self._store._read(self._loader))

    def _on_idle(self) -> None:
        self._store._detach(self)


class BaseStore:
    """Base class for stores persisting through SQLModel."""

    name = "store"

    def __init__(self, db: DbSessionService):
        self._db = db
        self._live: dict[str, list[LiveQuery[Any]]] = defaultdict(list)

    @property
    def lock(self) -> threading.RLock:
        return self._db.lock

    # -- live queries --------------------------------------------------------

    def _live_query(self, topics: Iterable[str], loader: Callable[[Session], T], initial: T) -> LiveQuery[T]:
        return LiveQuery(self, topics, loader, initial)

    def _attach(self, query: LiveQuery[Any]) -> None:
        with self.lock:
            for topic in query.topics:
                self._live[topic].append(query)

    def _detach(self, query: LiveQuery[Any]) -> None:
        with self.lock:
            for topic in query.topics:
                queries = self._live.get(topic)
                if queries and query in queries:
                    queries.remove(query)
                if not queries:
                    self._live.pop(topic, None)

    def active_query_count(self, topic: str) -> int:
        return len(self._live.get(topic, ()))

    def _notify(self, topics: Iterable[str]) -> None:
        seen: set[int] = set()
        pending: list[LiveQuery[Any]] = []
        for topic in topics:
            for query in self._live.get(topic, ()):
                if id(query) not in seen:
                    seen.add(id(query))
                    pending.append(query)
        for query in pending:
            query.refresh()

    # -- persistence ---------------------------------------------------------

    def _read(self, fn: Callable[[Session], R]) -> R:
        with self.lock:
            try:
                with self._db.session_scope() as session:
                    return fn(session)
            except SQLAlchemyError as e:
                raise PersistenceError(f"{self.name}: read failed", cause=e) from e

    def _write(self, operation: str, fn: Callable[[Session], R], topics: Iterable[str]) -> R:
        """Run ``fn`` in one transaction, then refresh live queries of ``topics``.

        Live queries are refreshed only when ``fn`` returns a truthy result.
        """
        with self.lock:
            try:
                with self._db.session_scope() as session:
                    result = fn(session)
            except SQLAlchemyError as e:
                logger.error("{}.{} rolled back: {}", self.name, operation, e)
                raise PersistenceError(f"{self.name}: {operation} failed", cause=e) from e

            if result:
                self._notify(topics)
            return result

    @staticmethod
    def _count(session: Session, table: type[SQLModel], *where: Any) -> int:
        statement = select(func.count()).select_from(table)
        for clause in where:
            statement = statement.where(clause)
        return session.exec(statement).one()

    @staticmethod
    def _chunks(values: Sequence[str]) -> Iterator[Sequence[str]]:
        for start in range(0, len(values), _IN_CHUNK):
            yield values[start:start + _IN_CHUNK]

    @classmethod
    def _upsert_rows(
        cls,
        session: Session,
        table: type[SQLModel],
        rows: Sequence[dict[str, Any]],
    ) -> UpsertStats:
        """Insert-or-update rows keyed by ``id`` with last-writer-wins.

        An incoming row strictly older than the stored one is ignored; a row
        equal to the stored one is left untouched. Within one batch the last
        occurrence of an id wins.
        """
        stats = UpsertStats()
        by_id: dict[str, dict[str, Any]] = {}
        for values in rows:
            by_id[values["id"]] = values

        ids = list(by_id)
        id_column = getattr(table, "id")
        existing: dict[str, Any] = {}
        for chunk in cls._chunks(ids):
            for row in session.exec(select(table).where(id_column.in_(chunk))):
                existing[row.id] = row

        for row_id, values in by_id.items():
            row = existing.get(row_id)
            if row is None:
                session.add(table(**values))
                stats.inserted += 1
            elif as_utc(values["updated_at"]) < as_utc(row.updated_at):
                stats.stale += 1
            elif cls._matches(row, values):
                stats.skipped += 1
            else:
                for key, value in values.items():
                    setattr(row, key, value)
                stats.updated += 1
        return stats

    @staticmethod
    def _matches(row: SQLModel, values: dict[str, Any]) -> bool:
        for key, value in values.items():
            current = getattr(row, key)
            if isinstance(value, datetime) and current is not None:
                if as_utc(current) != as_utc(value):
                    return False
            elif current != value:
                return False
        return True
