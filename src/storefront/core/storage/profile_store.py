"""Local profile cache: at most one profile per user."""

from __future__ import annotations

from loguru import logger
from sqlmodel import Session

from src.storefront.core.mapping import profile_from_row, profile_row_values
from src.storefront.core.models.dto import ProfileDTO
from src.storefront.core.storage.base_store import LiveQuery
from src.storefront.core.storage.user_store import UserScopedStore
from src.storefront.entities import UserProfile, UserProfileTable
from src.storefront.entities.core._base import as_utc


class ProfileStore(UserScopedStore):
    name = "ProfileStore"
    topic_prefix = "profile"
    table = UserProfileTable

    @staticmethod
    def _load(session: Session, user_id: str) -> UserProfile | None:
        row = session.get(UserProfileTable, user_id)
        return profile_from_row(row) if row is not None else None

    def observe_profile(self, user_id: str) -> LiveQuery[UserProfile | None]:
        return self._shared_query(user_id, lambda session: self._load(session, user_id), None)

    def get_profile(self, user_id: str) -> UserProfile | None:
        return self._read(lambda session: self._load(session, user_id))

    def upsert_profile(self, dto: ProfileDTO) -> bool:
        """Store ``dto`` unless the cached profile is newer. Returns whether it changed."""
        values = profile_row_values(dto)

        def _apply(session: Session) -> bool:
            row = session.get(UserProfileTable, dto.user_id)
            if row is None:
                session.add(UserProfileTable(**values))
                return True
            if as_utc(dto.updated_at) < as_utc(row.updated_at):
                logger.debug("Ignoring stale profile for user {}", dto.user_id)
                return False
            if self._matches(row, values):
                return False
            for key, value in values.items():
                setattr(row, key, value)
            return True

        return self._write("upsert_profile", _apply, [self.topic(dto.user_id)])
