"""Tests for the catalog repository: refresh and realtime mirroring."""

from decimal import Decimal

import httpx
import pytest

from src.storefront.core.errors import NetworkError, PersistenceError
from src.storefront.core.repositories import CatalogRepository, SyncState
from tests.utils import Recorder, at, brand, category, product, product_doc


@pytest.fixture
def repository(fake_catalog_source, catalog_store) -> CatalogRepository:
    repository = CatalogRepository(fake_catalog_source, catalog_store)
    yield repository
    repository.stop_realtime_sync()


class TestRefreshAll:
    @pytest.mark.asyncio
    async def test_refresh_caches_everything(self, repository, fake_catalog_source, catalog_store):
        fake_catalog_source.products = [product("p1"), product("p2")]
        fake_catalog_source.categories = [category("c1")]
        fake_catalog_source.brands = [brand("b1")]

        stats = await repository.refresh_all()

        assert {name: s.inserted for name, s in stats.items()} == {"products": 2, "categories": 1, "brands": 1}
        assert catalog_store.count_products() == 2
        assert sorted(fake_catalog_source.fetch_calls) == ["brands", "categories", "products"]

    @pytest.mark.asyncio
    async def test_partial_failure_keeps_successes(self, repository, fake_catalog_source, catalog_store):
        fake_catalog_source.products = [product("p1")]
        fake_catalog_source.brands = [brand("b1")]
        fake_catalog_source.failures["categories"] = httpx.ConnectError("offline")

        with pytest.raises(NetworkError):
            await repository.refresh_all()

        assert catalog_store.count_products() == 1
        assert catalog_store.count_brands() == 1
        assert catalog_store.count_categories() == 0

    @pytest.mark.asyncio
    async def test_refresh_is_idempotent(self, repository, fake_catalog_source):
        fake_catalog_source.products = [product("p1")]
        await repository.refresh_all()

        stats = await repository.refresh_all()

        assert stats["products"].skipped == 1
        assert not stats["products"]

    @pytest.mark.asyncio
    async def test_observers_see_refreshed_products(self, repository, fake_catalog_source):
        recorder = Recorder()
        repository.observe_products(min_price=150).subscribe(recorder)
        fake_catalog_source.products = [product("p1", price=100), product("p2", price=200)]

        await repository.refresh_all()

        assert recorder.values[0] == []
        assert recorder.ids() == ["p2"]

    @pytest.mark.asyncio
    async def test_remote_deactivation_converges(self, documents, catalog_store):
        repository = CatalogRepository(documents, catalog_store)
        documents.load("products", [product_doc("p1"), product_doc("p2")])
        await repository.refresh_all()
        visible = Recorder()
        repository.observe_products().subscribe(visible)

        documents.load("products", [product_doc("p1", isActive=False, updatedAt=at(1).isoformat())])
        stats = await repository.refresh_all()

        assert stats["products"].updated == 1
        assert catalog_store.get_product("p1").is_active is False
        assert visible.ids(0) == ["p1", "p2"]
        assert visible.ids() == ["p2"]


class TestRealtimeSync:
    def test_start_and_stop_are_idempotent(self, repository, fake_catalog_source):
        assert repository.state is SyncState.IDLE

        repository.start_realtime_sync()
        repository.start_realtime_sync()
        assert repository.state is SyncState.SYNCING
        assert fake_catalog_source.product_pushes.subscriber_count == 1

        repository.stop_realtime_sync()
        repository.stop_realtime_sync()
        assert repository.state is SyncState.IDLE
        assert fake_catalog_source.product_pushes.subscriber_count == 0

    def test_pushes_are_mirrored(self, repository, fake_catalog_source, catalog_store):
        recorder = Recorder()
        repository.observe_products(query="chair").subscribe(recorder)
        repository.start_realtime_sync()

        fake_catalog_source.category_pushes.send([category("c1")])
        fake_catalog_source.product_pushes.send([product("p1", name="Chair"), product("p2", name="Desk")])
        fake_catalog_source.product_pushes.send(
            [product("p1", name="Chair", price=80, updatedAt=at(1).isoformat()), product("p2", name="Desk")]
        )

        assert recorder.ids() == ["p1"]
        assert recorder.last[0].price == Decimal("80")
        assert catalog_store.count_categories() == 1

    def test_no_upsert_after_stop(self, repository, fake_catalog_source, catalog_store):
        repository.start_realtime_sync()
        repository.stop_realtime_sync()

        fake_catalog_source.product_pushes.send([product("p1")])

        assert catalog_store.count_products() == 0

    def test_failed_upsert_keeps_listening(self, repository, fake_catalog_source, catalog_store, monkeypatch):
        original = catalog_store.upsert_brands
        calls = []

        def flaky(dtos):
            calls.append(dtos)
            if len(calls) == 1:
                raise PersistenceError("disk full")
            return original(dtos)

        monkeypatch.setattr(catalog_store, "upsert_brands", flaky)
        repository.start_realtime_sync()

        fake_catalog_source.brand_pushes.send([brand("b1")])
        fake_catalog_source.brand_pushes.send([brand("b1"), brand("b2")])

        assert len(calls) == 2
        assert catalog_store.count_brands() == 2
        assert repository.state is SyncState.SYNCING

    def test_observe_passthroughs(self, repository, catalog_store):
        catalog_store.upsert_categories([category("c1")])
        catalog_store.upsert_products([product("p1", keywords=["oak"])])

        categories, in_category, single = Recorder(), Recorder(), Recorder()
        repository.observe_categories().subscribe(categories)
        repository.observe_products_in_category("oak", "c1").subscribe(in_category)
        repository.observe_product("p1").subscribe(single)

        assert [c.id for c in categories.last] == ["c1"]
        assert in_category.ids() == ["p1"]
        assert single.last.id == "p1"
