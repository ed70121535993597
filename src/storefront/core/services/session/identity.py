"""Who is signed in."""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

from loguru import logger

from src.storefront.core.streams import CurrentValueSubject, Observable


@runtime_checkable
class IdentityProvider(Protocol):
    @property
    def current_user_id(self) -> str | None: ...

    def observe_authenticated(self) -> Observable[bool]:
        """Authentication flag; may repeat values."""


class InMemoryIdentityProvider:
    """Identity held in memory, switched with ``sign_in`` and ``sign_out``."""

    def __init__(self, user_id: str | None = None):
        self._lock = threading.Lock()
        self._user_id = user_id or None
        self._authenticated = CurrentValueSubject(self._user_id is not None)

    @property
    def current_user_id(self) -> str | None:
        return self._user_id

    def observe_authenticated(self) -> Observable[bool]:
        return self._authenticated

    def sign_in(self, user_id: str) -> None:
        if not user_id:
            raise ValueError("user_id must not be empty")
        with self._lock:
            self._user_id = user_id
        logger.info("Signed in as {}", user_id)
        self._authenticated.send(True)

    def sign_out(self) -> None:
        with self._lock:
            previous, self._user_id = self._user_id, None
        if previous is not None:
            logger.info("Signed out {}", previous)
        self._authenticated.send(False)
