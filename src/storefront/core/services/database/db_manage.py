"""Schema management for the local cache database."""

from loguru import logger
from sqlalchemy import Engine
from sqlmodel import SQLModel


class DbManageService:
    def __init__(self, engine: Engine):
        self._engine = engine

    def create_all(self) -> None:
        """Create all cache tables."""
        from src.storefront.entities import (  # noqa: F401
            BrandTable,
            CartItemTable,
            CategoryTable,
            FavoriteItemTable,
            OrderTable,
            ProductTable,
            UserProfileTable,
        )

        SQLModel.metadata.create_all(self._engine)
        logger.info("Local cache initialized with tables.")

    def drop_all(self) -> None:
        """Drop every cache table."""
        SQLModel.metadata.drop_all(self._engine)
        logger.info("Local cache tables dropped.")
