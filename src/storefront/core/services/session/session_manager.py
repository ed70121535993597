"""Keeps user-scoped caches aligned with the signed-in identity."""

from __future__ import annotations

import threading
from collections.abc import Callable

from loguru import logger

from src.storefront.core.services.session.checkout_storage import CheckoutStorage
from src.storefront.core.services.session.identity import IdentityProvider
from src.storefront.core.services.session.notifier import NotificationCategory, Notifier
from src.storefront.core.services.session.user_scope import UserScope
from src.storefront.core.storage import CartStore, FavoritesStore, OrdersStore, ProfileStore
from src.storefront.core.streams import Subscription
from src.storefront.entities import CartItem
from src.storefront.runtime.context import get_config


class SessionScopedCacheManager:
    """Wipes the previous user's cached data whenever the identity changes.

    It also keeps ``cart_items_snapshot`` current for the active user so
    checkout can read the cart synchronously.
    """

    def __init__(
        self,
        identity: IdentityProvider,
        notifier: Notifier,
        user_scope: UserScope,
        checkout_storage: CheckoutStorage,
        cart_store: CartStore,
        favorites_store: FavoritesStore,
        profile_store: ProfileStore,
        orders_store: OrdersStore,
    ):
        self.identity = identity
        self.notifier = notifier
        self.user_scope = user_scope
        self.checkout_storage = checkout_storage
        self.cart_store = cart_store
        self.favorites_store = favorites_store
        self.profile_store = profile_store
        self.orders_store = orders_store

        self._lock = threading.RLock()
        self._last_user_id: str | None = None
        self._identity_subscription: Subscription | None = None
        self._cart_subscription: Subscription | None = None
        self._cart_items: list[CartItem] = []

    @property
    def cart_items_snapshot(self) -> list[CartItem]:
        return list(self._cart_items)

    @property
    def current_user_id(self) -> str | None:
        return self._last_user_id or None

    def start(self) -> None:
        """Register notification categories and follow the identity stream."""
        if self._identity_subscription is not None:
            return
        notifications = get_config().notifications
        self.notifier.request_authorization(notifications.authorization_options)
        self.notifier.register_categories([NotificationCategory(id=c) for c in notifications.categories])

        last_flag: list[bool] = []

        def _on_authenticated(flag: bool) -> None:
            if last_flag and last_flag[0] == flag:
                return
            last_flag[:] = [flag]
            self._handle_identity_change()

        # Replays the current flag, which runs the handler once
        self._identity_subscription = self.identity.observe_authenticated().subscribe(_on_authenticated)
        logger.info("Session cache manager started")

    def refresh_now(self) -> None:
        """Apply the current identity without waiting for the next emission."""
        self._handle_identity_change()

    def stop(self) -> None:
        with self._lock:
            for subscription in (self._identity_subscription, self._cart_subscription):
                if subscription is not None:
                    subscription.cancel()
            self._identity_subscription = None
            self._cart_subscription = None

    def _handle_identity_change(self) -> None:
        with self._lock:
            current = self.identity.current_user_id or ""
            if current == self._last_user_id:
                return

            previous = self._last_user_id
            if previous:
                self._clear_user_data(previous)
            self._last_user_id = current
            logger.info("Identity changed: {!r} -> {!r}", previous or "", current)

            self.user_scope.reset()

            if self._cart_subscription is not None:
                self._cart_subscription.cancel()
                self._cart_subscription = None

            if not current:
                self._cart_items = []
                return

            self._cart_items = self._best_effort("read cart snapshot", lambda: self.cart_store.snapshot(current)) or []
            repository = self.user_scope.cart_repository(current)
            self._cart_subscription = repository.observe_items().subscribe(self._on_cart_items)

    def _on_cart_items(self, items: list[CartItem]) -> None:
        self._cart_items = list(items)

    def _clear_user_data(self, user_id: str) -> None:
        with logger.contextualize(user_id=user_id):
            self._best_effort("clear cart", lambda: self.cart_store.clear(user_id))
            self._best_effort("clear favorites", lambda: self.favorites_store.clear(user_id))
            self._best_effort("clear profile", lambda: self.profile_store.clear(user_id))
            self._best_effort("clear orders", lambda: self.orders_store.clear(user_id))
            self._best_effort("reset checkout draft", self.checkout_storage.reset)
            self._best_effort("cancel notifications", self.notifier.cancel_all)

    @staticmethod
    def _best_effort(action: str, fn: Callable[[], object]) -> object:
        try:
            return fn()
        except Exception as e:
            logger.error("Session manager could not {}: {}", action, e)
            return None
