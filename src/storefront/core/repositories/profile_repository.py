"""Profile of the signed-in user."""

from __future__ import annotations

from loguru import logger

from src.storefront.core.models.dto import ProfileDTO
from src.storefront.core.remote.protocols import ProfileRemoteSource
from src.storefront.core.repositories.base import UserRepository
from src.storefront.core.storage.profile_store import ProfileStore
from src.storefront.core.streams import Observable
from src.storefront.entities import UserProfile


class ProfileRepository(UserRepository):
    name = "ProfileRepository"

    def __init__(self, user_id: str, remote: ProfileRemoteSource, store: ProfileStore):
        super().__init__(user_id)
        self.remote = remote
        self.store = store
        self._last_pushed: ProfileDTO | None = None
        self._keep(remote.listen_profile(user_id).subscribe(self._on_remote))

    def _on_remote(self, dto: ProfileDTO | None) -> None:
        # Pushes repeat the whole document; only content changes reach the store
        if dto is None or dto == self._last_pushed:
            return
        self._last_pushed = dto
        try:
            self.store.upsert_profile(dto)
        except Exception as e:
            logger.error("Mirroring remote profile of {} failed: {}", self.user_id, e)

    def observe_profile(self) -> Observable[UserProfile | None]:
        return self.store.observe_profile(self.user_id)

    async def refresh(self) -> None:
        dto = await self._remote("refresh", self.remote.fetch_profile(self.user_id))
        if dto is not None:
            self.store.upsert_profile(dto)

    async def ensure_initial_profile(self, name: str, email: str) -> None:
        await self._remote("ensure_initial_profile", self.remote.ensure_initial_profile(self.user_id, name, email))

    async def update_name(self, name: str) -> None:
        await self._remote("update_name", self.remote.update_profile(self.user_id, name=name))

    async def update_email(self, email: str) -> None:
        await self._remote("update_email", self.remote.update_profile(self.user_id, email=email))

    async def update_phone(self, phone: str) -> None:
        await self._remote("update_phone", self.remote.update_profile(self.user_id, phone=phone))
