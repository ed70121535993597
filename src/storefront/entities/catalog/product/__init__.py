"""Entity package: Product."""

from .entity import Product, ProductMeta
from .table import ProductTable

__all__ = ["Product", "ProductMeta", "ProductTable"]
