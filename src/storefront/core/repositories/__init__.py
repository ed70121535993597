"""Repositories: the narrow command and observation surface of the data layer."""

from .cart_repository import CartRepository, CartTotals
from .catalog_repository import CatalogRepository, SyncState
from .favorites_repository import FavoritesRepository
from .profile_repository import ProfileRepository

__all__ = [
    "CartRepository",
    "CartTotals",
    "CatalogRepository",
    "FavoritesRepository",
    "ProfileRepository",
    "SyncState",
]
