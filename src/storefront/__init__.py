"""Storefront data layer.

Local catalog cache kept in sync with a remote realtime document source,
reactive query streams over that cache, and session-scoped invalidation of
per-user caches.
"""

__version__ = "0.1.0"
