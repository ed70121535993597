"""Tests for the user repository scope."""

import pytest

from src.storefront.core.services.session import UserScope


class Repository:
    def __init__(self, kind: str, user_id: str):
        self.kind = kind
        self.user_id = user_id
        self.closed = False

    def close(self) -> None:
        self.closed = True


class Factory:
    def __init__(self):
        self.made: list[Repository] = []

    def _make(self, kind: str, user_id: str) -> Repository:
        repository = Repository(kind, user_id)
        self.made.append(repository)
        return repository

    def make_cart_repository(self, user_id):
        return self._make("cart", user_id)

    def make_favorites_repository(self, user_id):
        return self._make("favorites", user_id)

    def make_profile_repository(self, user_id):
        return self._make("profile", user_id)


@pytest.fixture
def factory() -> Factory:
    return Factory()


@pytest.fixture
def scope(factory: Factory) -> UserScope:
    return UserScope(factory)


class TestUserScope:
    def test_repositories_are_cached(self, scope, factory):
        assert scope.cart_repository("u1") is scope.cart_repository("u1")
        assert scope.favorites_repository("u1") is scope.favorites_repository("u1")
        assert scope.profile_repository("u1").kind == "profile"
        assert len(factory.made) == 3
        assert scope.user_id == "u1"

    def test_reset_closes_everything(self, scope, factory):
        scope.cart_repository("u1")
        scope.profile_repository("u1")

        scope.reset()

        assert all(r.closed for r in factory.made)
        assert scope.user_id is None
        assert scope.cart_repository("u1") is not factory.made[0]

    def test_other_user_resets_first(self, scope, factory):
        first = scope.cart_repository("u1")
        favorites = scope.favorites_repository("u1")

        second = scope.cart_repository("u2")

        assert first.closed and favorites.closed
        assert second.user_id == "u2"
        assert not second.closed
        assert scope.user_id == "u2"

    def test_reset_without_repositories(self, scope):
        scope.reset()
        scope.reset()
        assert scope.user_id is None
