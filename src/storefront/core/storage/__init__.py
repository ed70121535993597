"""Local cache stores."""

from .base_store import BaseStore, LiveQuery, UpsertStats
from .cart_store import CartStore
from .catalog_store import CatalogStore, ProductFilter
from .favorites_store import FavoritesStore
from .orders_store import OrdersStore
from .profile_store import ProfileStore

__all__ = [
    "BaseStore",
    "CartStore",
    "CatalogStore",
    "FavoritesStore",
    "LiveQuery",
    "OrdersStore",
    "ProductFilter",
    "ProfileStore",
    "UpsertStats",
]
