"""Shared plumbing for repositories bound to one user."""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TypeVar

from loguru import logger

from src.storefront.core.errors import StorefrontError, map_error
from src.storefront.core.streams import CompositeSubscription, Subscription

T = TypeVar("T")


class UserRepository:
    """Repository whose remote listeners live until ``close()``."""

    name = "repository"

    def __init__(self, user_id: str):
        if not user_id:
            raise ValueError(f"{self.name} needs a signed-in user")
        self.user_id = user_id
        self._subscriptions = CompositeSubscription()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _keep(self, subscription: Subscription) -> None:
        self._subscriptions.add(subscription)

    def close(self) -> None:
        """Stop mirroring remote pushes. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._subscriptions.cancel()
        logger.debug("{} closed for user {}", self.name, self.user_id)

    async def _remote(self, operation: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except StorefrontError:
            raise
        except Exception as e:
            logger.warning("{}.{} failed for user {}: {}", self.name, operation, self.user_id, e)
            raise map_error(e) from e
