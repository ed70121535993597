"""Session services: identity, notifications, checkout draft and user scope."""

from .checkout_storage import CheckoutStorage, DeliveryMethod, InMemoryCheckoutStorage
from .identity import IdentityProvider, InMemoryIdentityProvider
from .notifier import InMemoryNotifier, NotificationCategory, Notifier
from .session_manager import SessionScopedCacheManager
from .user_scope import UserRepositoryFactory, UserScope

__all__ = [
    "CheckoutStorage",
    "DeliveryMethod",
    "IdentityProvider",
    "InMemoryCheckoutStorage",
    "InMemoryIdentityProvider",
    "InMemoryNotifier",
    "NotificationCategory",
    "Notifier",
    "SessionScopedCacheManager",
    "UserRepositoryFactory",
    "UserScope",
]
