"""Entities organized by business concept.

Each entity has its own package containing:
- entity.py: Domain model handed to observers
- table.py: Database persistence model for the local cache
"""

from .catalog.brand import Brand, BrandTable
from .catalog.category import Category, CategoryTable
from .catalog.product import Product, ProductMeta, ProductTable
from .user.cart_item import CartItem, CartItemTable
from .user.favorite_item import FavoriteItem, FavoriteItemTable
from .user.order import Order, OrderItem, OrderStatus, OrderTable
from .user.profile import UserProfile, UserProfileTable

__all__ = [
    "Brand",
    "BrandTable",
    "CartItem",
    "CartItemTable",
    "Category",
    "CategoryTable",
    "FavoriteItem",
    "FavoriteItemTable",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderTable",
    "Product",
    "ProductMeta",
    "ProductTable",
    "UserProfile",
    "UserProfileTable",
]
