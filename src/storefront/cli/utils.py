"""Shared utilities for CLI commands."""

from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console

from src.storefront.core.services.database.db_manage import DbManageService
from src.storefront.core.services.database.db_session import DbSessionService
from src.storefront.runtime.config.config_data import DatabaseConfig
from src.storefront.runtime.context import get_config

# Initialize Rich console for colored output
console = Console()


def database_config(url: str | None) -> DatabaseConfig:
    """Database settings from the active config, with an optional URL override."""
    config = get_config().database
    if url:
        return config.model_copy(update={"url": url})
    return config


@contextmanager
def open_database(url: str | None) -> Iterator[DbSessionService]:
    """Open the cache database, creating its tables when missing."""
    db = DbSessionService(database_config(url))
    DbManageService(db.engine).create_all()
    try:
        yield db
    finally:
        db.dispose()
