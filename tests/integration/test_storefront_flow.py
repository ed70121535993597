"""End-to-end flows through the wired data layer."""

from decimal import Decimal

import pytest

from src.storefront.app_data import build_dependencies
from src.storefront.runtime.config.config_data import ConfigData
from src.storefront.runtime.context import with_context
from tests.utils import Recorder, at, brand_doc, category_doc, product_doc

pytestmark = pytest.mark.integration

CATALOG = {
    "categories": [category_doc("c1", name="Chairs"), category_doc("c2", name="Lamps")],
    "brands": [brand_doc("b1", name="Acme")],
    "products": [
        product_doc("p1", name="Oak Chair", price=100, keywords=["wood"]),
        product_doc("p2", name="Desk Lamp", price=200, categoryId="c2"),
    ],
}


@pytest.fixture
def seeded_deps(app_deps, documents):
    documents.seed(CATALOG)
    return app_deps


class TestCatalogFlow:
    @pytest.mark.asyncio
    async def test_refresh_then_live_updates(self, seeded_deps, documents):
        repository = seeded_deps.catalog_repository
        expensive = Recorder()
        repository.observe_products(min_price=150).subscribe(expensive)

        await repository.refresh_all()
        repository.start_realtime_sync()
        documents.set_document("products", "p1", product_doc("p1", name="Oak Chair", price=300, updatedAt=at(1).isoformat()))

        assert expensive.ids(0) == []
        assert ["p2"] in [[p.id for p in value] for value in expensive.values]
        assert expensive.ids() == ["p1", "p2"]
        assert expensive.last[0].price == Decimal("300")

    @pytest.mark.asyncio
    async def test_deactivated_category_hides_products(self, seeded_deps, documents):
        repository = seeded_deps.catalog_repository
        await repository.refresh_all()
        repository.start_realtime_sync()
        visible = Recorder()
        repository.observe_products().subscribe(visible)

        documents.set_document("categories", "c2", category_doc("c2", isActive=False, updatedAt=at(1).isoformat()))

        assert visible.ids(0) == ["p1", "p2"]
        assert visible.ids() == ["p1"]

    @pytest.mark.asyncio
    async def test_stopped_sync_leaves_cache_alone(self, seeded_deps, documents):
        repository = seeded_deps.catalog_repository
        repository.start_realtime_sync()
        repository.stop_realtime_sync()

        documents.set_document("products", "p9", product_doc("p9"))

        assert seeded_deps.catalog_store.get_product("p9") is None
        assert seeded_deps.catalog_store.count_products() == 2


class TestSessionFlow:
    @pytest.mark.asyncio
    async def test_shopping_session(self, seeded_deps, identity):
        await seeded_deps.catalog_repository.refresh_all()
        manager = seeded_deps.session_manager
        manager.start()

        identity.sign_in("u1")
        scope = seeded_deps.user_scope
        await scope.cart_repository("u1").add("p1", 2)
        await scope.favorites_repository("u1").toggle("p2")
        await scope.profile_repository("u1").ensure_initial_profile("Ann", "ann@example.com")

        assert [(i.product_id, i.quantity) for i in manager.cart_items_snapshot] == [("p1", 2)]
        assert seeded_deps.favorites_store.contains("u1", "p2")
        assert seeded_deps.profile_store.get_profile("u1").name == "Ann"

        identity.sign_out()

        assert manager.cart_items_snapshot == []
        for store in (seeded_deps.cart_store, seeded_deps.favorites_store, seeded_deps.profile_store):
            assert store.count("u1") == 0

        # The remote still holds the cart; signing back in mirrors it again
        identity.sign_in("u1")
        assert [(i.product_id, i.quantity) for i in manager.cart_items_snapshot] == [("p1", 2)]

    @pytest.mark.asyncio
    async def test_users_do_not_see_each_other(self, seeded_deps, identity, documents):
        await seeded_deps.catalog_repository.refresh_all()
        seeded_deps.session_manager.start()

        identity.sign_in("u1")
        await seeded_deps.user_scope.cart_repository("u1").add("p1")
        identity.sign_out()

        identity.sign_in("u2")
        await seeded_deps.user_scope.cart_repository("u2").add("p2", 3)

        assert [(i.user_id, i.product_id) for i in seeded_deps.session_manager.cart_items_snapshot] == [("u2", "p2")]
        assert seeded_deps.cart_store.count("u1") == 0


class TestPersistentCache:
    @pytest.mark.asyncio
    async def test_cache_survives_restart(self, tmp_path, test_config, documents):
        documents.seed(CATALOG)
        override = ConfigData()
        override.database.url = f"sqlite:///{tmp_path / 'cache.db'}"

        with with_context(override):
            first = build_dependencies(documents=documents)
            await first.catalog_repository.refresh_all()
            first.close()

            offline = build_dependencies()
            try:
                assert offline.catalog_store.count_products() == 2
                assert [p.id for p in offline.catalog_store.products()] == ["p1", "p2"]
            finally:
                offline.close()
