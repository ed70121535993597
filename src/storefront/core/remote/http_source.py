"""Catalog source backed by an HTTP document service.

Collections are served as JSON at ``{base_url}/{collection}``, either as a
list of documents carrying an ``id`` field or as an object mapping document
ids to their fields. The realtime feeds poll the same endpoints.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Generic, TypeVar

import httpx
from loguru import logger

from src.storefront.core.errors import map_error
from src.storefront.core.mapping import dtos_from_documents
from src.storefront.core.models.dto import BrandDTO, CategoryDTO, ProductDTO, WireModel
from src.storefront.core.streams import Observable, PassthroughSubject, Subscription
from src.storefront.runtime.config.config_data import RemoteConfig

W = TypeVar("W", bound=WireModel)


def _documents(payload: Any) -> list[tuple[str | None, dict[str, Any]]]:
    if isinstance(payload, dict) and isinstance(payload.get("documents"), list):
        payload = payload["documents"]
    if isinstance(payload, list):
        return [(None, doc) for doc in payload if isinstance(doc, dict)]
    if isinstance(payload, dict):
        return [(str(doc_id), doc) for doc_id, doc in payload.items() if isinstance(doc, dict)]
    raise ValueError(f"Unexpected collection payload: {type(payload).__name__}")


class HttpCatalogSource:
    """``RemoteCatalogSource`` over httpx.

    Args:
        config: Remote service settings.
        client: Optional preconfigured client; its lifetime stays with the caller.
    """

    def __init__(self, config: RemoteConfig | None = None, client: httpx.AsyncClient | None = None):
        self.config = config or RemoteConfig()
        self._client = client
        self._owns_client = client is None
        self._feeds: dict[str, _PollingFeed[Any]] = {}

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self.config.api_key:
                headers["Authorization"] = f"Bearer {self.config.api_key}"
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url.rstrip("/") + "/",
                headers=headers,
                timeout=self.config.timeout_seconds,
            )
        return self._client

    async def aclose(self) -> None:
        for feed in self._feeds.values():
            feed.stop()
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _fetch(self, model: type[W], collection: str, *, active_only: bool) -> list[W]:
        params = {"isActive": "true"} if active_only else None
        try:
            response = await self.client.get(collection, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.warning("Fetching {} failed: {}", collection, e)
            raise map_error(e) from e
        return dtos_from_documents(model, _documents(payload))

    async def fetch_products(self) -> list[ProductDTO]:
        return await self._fetch(ProductDTO, "products", active_only=self.config.active_only)

    async def fetch_categories(self) -> list[CategoryDTO]:
        return await self._fetch(CategoryDTO, "categories", active_only=self.config.active_only)

    async def fetch_brands(self) -> list[BrandDTO]:
        return await self._fetch(BrandDTO, "brands", active_only=self.config.active_only)

    def listen_products(self) -> Observable[list[ProductDTO]]:
        return self._feed(ProductDTO, "products")

    def listen_categories(self) -> Observable[list[CategoryDTO]]:
        return self._feed(CategoryDTO, "categories")

    def listen_brands(self) -> Observable[list[BrandDTO]]:
        return self._feed(BrandDTO, "brands")

    def _feed(self, model: type[W], collection: str) -> _PollingFeed[W]:
        feed = self._feeds.get(collection)
        if feed is None:
            feed = _PollingFeed(
                collection,
                lambda: self._fetch(model, collection, active_only=False),
                self.config,
            )
            self._feeds[collection] = feed
        return feed


class _PollingFeed(Observable[list[W]], Generic[W]):
    """Full-collection feed polled while at least one subscriber is attached.

    Subscribing requires a running event loop. Failed polls are retried with
    capped exponential backoff and never end the stream.
    """

    def __init__(self, collection: str, fetch: Callable[[], Any], config: RemoteConfig):
        self.collection = collection
        self._fetch = fetch
        self._config = config
        self._subject: PassthroughSubject[list[W]] = PassthroughSubject(on_idle=self.stop)
        self._task: asyncio.Task[None] | None = None
        self._last: list[W] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe(self, callback: Callable[[list[W]], None]) -> Subscription:
        restart = not self.running
        if restart:
            # A restarted feed replays nothing until its first fresh poll
            self._subject.reset()
        subscription = self._subject.subscribe(callback)
        if restart:
            self._last = None
            self._task = asyncio.get_running_loop().create_task(self._run())
            logger.debug("Started polling {}", self.collection)
        return subscription

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.debug("Stopped polling {}", self.collection)

    def backoff_delay(self, failures: int) -> float:
        delay = self._config.retry_backoff_base_seconds * (2 ** max(failures - 1, 0))
        return min(delay, self._config.retry_backoff_cap_seconds)

    async def _run(self) -> None:
        failures = 0
        while True:
            try:
                dtos = await self._fetch()
            except Exception as e:
                failures += 1
                delay = self.backoff_delay(failures)
                logger.warning(
                    "Polling {} failed (attempt {}), retrying in {:.1f}s: {}",
                    self.collection,
                    failures,
                    delay,
                    e,
                )
                await asyncio.sleep(delay)
                continue

            failures = 0
            if dtos != self._last:
                self._last = dtos
                self._subject.send(dtos)
            await asyncio.sleep(self._config.poll_interval_seconds)
