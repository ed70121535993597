"""Entity package: Order."""

from .entity import Order, OrderItem, OrderStatus
from .table import OrderTable

__all__ = ["Order", "OrderItem", "OrderStatus", "OrderTable"]
