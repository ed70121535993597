"""Entity: Product."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.storefront.entities.core._base import Entity


class Product(Entity):
    """Catalog product as cached locally.

    Products are remote-authoritative: they only change through bulk upserts
    coming from the remote catalog source.
    """

    name: str = Field(default="", description="Display name")
    name_lower: str = Field(default="", description="Lowercased name used for search")
    description: str = Field(default="", description="Long description")
    category_id: str = Field(default="", description="Owning category id")
    brand_id: str = Field(default="", description="Brand id")
    price: Decimal = Field(default=Decimal("0"), ge=0, description="Unit price")
    image_url: str = Field(default="", description="Image reference")
    is_active: bool = Field(default=True, description="Whether the product is listed")
    keywords: list[str] = Field(default_factory=list, description="Search tags, in order")

    def matches_query(self, query: str) -> bool:
        """Case-insensitive substring match on the name, then on keywords."""
        needle = query.strip().lower()
        if not needle:
            return True
        if needle in self.name_lower:
            return True
        return any(needle in keyword.lower() for keyword in self.keywords)


class ProductMeta(BaseModel):
    """Short product description copied into cart and favorite entries."""

    brand_name: str
    title: str
    price: Decimal
    image_url: str | None = None
