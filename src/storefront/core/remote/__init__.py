"""Remote document sources."""

from .http_source import HttpCatalogSource
from .in_memory import InMemoryDocumentStore
from .protocols import (
    CartRemoteSource,
    FavoritesRemoteSource,
    ProfileRemoteSource,
    RemoteCatalogSource,
)

__all__ = [
    "CartRemoteSource",
    "FavoritesRemoteSource",
    "HttpCatalogSource",
    "InMemoryDocumentStore",
    "ProfileRemoteSource",
    "RemoteCatalogSource",
]
