"""Composition root: builds and wires the data layer."""

from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger

from src.storefront.core.remote import (
    CartRemoteSource,
    FavoritesRemoteSource,
    InMemoryDocumentStore,
    ProfileRemoteSource,
    RemoteCatalogSource,
)
from src.storefront.core.repositories import (
    CartRepository,
    CatalogRepository,
    FavoritesRepository,
    ProfileRepository,
)
from src.storefront.core.services.database.db_manage import DbManageService
from src.storefront.core.services.database.db_session import DbSessionService
from src.storefront.core.services.session import (
    CheckoutStorage,
    IdentityProvider,
    InMemoryCheckoutStorage,
    InMemoryIdentityProvider,
    InMemoryNotifier,
    Notifier,
    SessionScopedCacheManager,
    UserScope,
)
from src.storefront.core.storage import CartStore, CatalogStore, FavoritesStore, OrdersStore, ProfileStore
from src.storefront.runtime.config.config_data import ConfigData
from src.storefront.runtime.context import get_config


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    catalog_store: CatalogStore
    cart_store: CartStore
    favorites_store: FavoritesStore
    profile_store: ProfileStore
    orders_store: OrdersStore
    catalog_remote: RemoteCatalogSource
    cart_remote: CartRemoteSource
    favorites_remote: FavoritesRemoteSource
    profile_remote: ProfileRemoteSource
    identity: IdentityProvider
    notifier: Notifier
    checkout_storage: CheckoutStorage
    catalog_repository: CatalogRepository = field(init=False)
    user_scope: UserScope = field(init=False)
    session_manager: SessionScopedCacheManager = field(init=False)

    def __post_init__(self) -> None:
        self.catalog_repository = CatalogRepository(self.catalog_remote, self.catalog_store)
        self.user_scope = UserScope(self)
        self.session_manager = SessionScopedCacheManager(
            identity=self.identity,
            notifier=self.notifier,
            user_scope=self.user_scope,
            checkout_storage=self.checkout_storage,
            cart_store=self.cart_store,
            favorites_store=self.favorites_store,
            profile_store=self.profile_store,
            orders_store=self.orders_store,
        )

    # UserRepositoryFactory

    def make_cart_repository(self, user_id: str) -> CartRepository:
        return CartRepository(user_id, self.cart_remote, self.cart_store, self.catalog_store)

    def make_favorites_repository(self, user_id: str) -> FavoritesRepository:
        return FavoritesRepository(user_id, self.favorites_remote, self.favorites_store, self.catalog_store)

    def make_profile_repository(self, user_id: str) -> ProfileRepository:
        return ProfileRepository(user_id, self.profile_remote, self.profile_store)

    def close(self) -> None:
        self.session_manager.stop()
        self.catalog_repository.stop_realtime_sync()
        self.user_scope.reset()
        self.database_service.dispose()


def build_dependencies(
    config: ConfigData | None = None,
    *,
    catalog_remote: RemoteCatalogSource | None = None,
    documents: InMemoryDocumentStore | None = None,
    identity: IdentityProvider | None = None,
    notifier: Notifier | None = None,
    checkout_storage: CheckoutStorage | None = None,
) -> ApplicationDependencies:
    """Create the local cache and wire every component around it.

    User data sources default to ``documents`` (an in-memory document store
    when omitted); ``catalog_remote`` defaults to the same store.
    """
    config = config or get_config()
    database_service = DbSessionService(config.database)
    DbManageService(database_service.engine).create_all()
    documents = documents or InMemoryDocumentStore(active_only=config.remote.active_only)

    deps = ApplicationDependencies(
        database_service=database_service,
        catalog_store=CatalogStore(database_service),
        cart_store=CartStore(database_service),
        favorites_store=FavoritesStore(database_service),
        profile_store=ProfileStore(database_service),
        orders_store=OrdersStore(database_service),
        catalog_remote=catalog_remote or documents,
        cart_remote=documents,
        favorites_remote=documents,
        profile_remote=documents,
        identity=identity or InMemoryIdentityProvider(),
        notifier=notifier or InMemoryNotifier(),
        checkout_storage=checkout_storage or InMemoryCheckoutStorage(),
    )
    logger.info("Storefront data layer ready ({} environment)", config.app.environment)
    return deps
