"""Brand database table model."""

from src.storefront.entities.core._base import EntityTable


class BrandTable(EntityTable, table=True):
    """Persistence model for cached brands."""

    __tablename__ = "brands"

    name: str = ""
    image_url: str = ""
    is_active: bool = True
