"""User profile database table model."""

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from src.storefront.entities.core._base import utcnow


class UserProfileTable(SQLModel, table=True):
    """Persistence model for user profiles."""

    __tablename__ = "user_profiles"

    user_id: str = Field(primary_key=True)
    name: str = ""
    email: str = ""
    phone: str = ""
    updated_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
