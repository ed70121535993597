"""Local store fixtures."""

import pytest

from src.storefront.core.services.database.db_session import DbSessionService
from src.storefront.core.storage import CartStore, CatalogStore, FavoritesStore, OrdersStore, ProfileStore


@pytest.fixture
def catalog_store(db_service: DbSessionService) -> CatalogStore:
    return CatalogStore(db_service)


@pytest.fixture
def cart_store(db_service: DbSessionService) -> CartStore:
    return CartStore(db_service)


@pytest.fixture
def favorites_store(db_service: DbSessionService) -> FavoritesStore:
    return FavoritesStore(db_service)


@pytest.fixture
def profile_store(db_service: DbSessionService) -> ProfileStore:
    return ProfileStore(db_service)


@pytest.fixture
def orders_store(db_service: DbSessionService) -> OrdersStore:
    return OrdersStore(db_service)
