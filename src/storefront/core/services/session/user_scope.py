"""Lifetime of the repositories bound to the signed-in user."""

from __future__ import annotations

import threading
from typing import Protocol

from loguru import logger

from src.storefront.core.repositories import CartRepository, FavoritesRepository, ProfileRepository


class UserRepositoryFactory(Protocol):
    def make_cart_repository(self, user_id: str) -> CartRepository: ...

    def make_favorites_repository(self, user_id: str) -> FavoritesRepository: ...

    def make_profile_repository(self, user_id: str) -> ProfileRepository: ...


class UserScope:
    """Builds user-bound repositories lazily and discards them on ``reset()``.

    Only one user is active at a time: asking for another user's repository
    resets the scope first.
    """

    def __init__(self, factory: UserRepositoryFactory):
        self._factory = factory
        self._lock = threading.RLock()
        self._user_id: str | None = None
        self._cart: CartRepository | None = None
        self._favorites: FavoritesRepository | None = None
        self._profile: ProfileRepository | None = None

    @property
    def user_id(self) -> str | None:
        return self._user_id

    def _enter(self, user_id: str) -> None:
        if self._user_id != user_id:
            self.reset()
            self._user_id = user_id

    def cart_repository(self, user_id: str) -> CartRepository:
        with self._lock:
            self._enter(user_id)
            if self._cart is None:
                self._cart = self._factory.make_cart_repository(user_id)
            return self._cart

    def favorites_repository(self, user_id: str) -> FavoritesRepository:
        with self._lock:
            self._enter(user_id)
            if self._favorites is None:
                self._favorites = self._factory.make_favorites_repository(user_id)
            return self._favorites

    def profile_repository(self, user_id: str) -> ProfileRepository:
        with self._lock:
            self._enter(user_id)
            if self._profile is None:
                self._profile = self._factory.make_profile_repository(user_id)
            return self._profile

    def reset(self) -> None:
        """Close and forget every repository of the active user."""
        with self._lock:
            repositories = [r for r in (self._cart, self._favorites, self._profile) if r is not None]
            self._cart = self._favorites = self._profile = None
            previous, self._user_id = self._user_id, None
        for repository in repositories:
            repository.close()
        if repositories:
            logger.debug("User scope of {} reset ({} repositories)", previous, len(repositories))
