"""Entity package: CartItem."""

from .entity import CartItem
from .table import CartItemTable

__all__ = ["CartItem", "CartItemTable"]
