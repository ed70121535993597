"""Order database table model."""

import sqlalchemy as sa
from sqlmodel import Field

from src.storefront.entities.core._base import EntityTable


class OrderTable(EntityTable, table=True):
    """Persistence model for cached orders. Items are stored as JSON."""

    __tablename__ = "orders"

    user_id: str = Field(index=True)
    status: str = "assembling"
    receive_address: str = ""
    payment_method: str = ""
    comment: str = ""
    phone_e164: str | None = None
    items: list[dict] = Field(default_factory=list, sa_type=sa.JSON)
