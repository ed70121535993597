"""Entity package: FavoriteItem."""

from .entity import FavoriteItem
from .table import FavoriteItemTable

__all__ = ["FavoriteItem", "FavoriteItemTable"]
