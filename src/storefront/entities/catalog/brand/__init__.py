"""Entity package: Brand."""

from .entity import Brand
from .table import BrandTable

__all__ = ["Brand", "BrandTable"]
