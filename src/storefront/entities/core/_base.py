import uuid
from datetime import UTC, datetime

import sqlalchemy as sa
from pydantic import BaseModel
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    SQLite hands back naive datetimes; they are stored in UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class Entity(BaseModel):
    """Base entity class with a stable string identifier."""

    id: str = PydanticField(
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique identifier for the entity",
    )

    created_at: datetime = PydanticField(default_factory=utcnow)
    updated_at: datetime = PydanticField(default_factory=utcnow)


class UserScopedEntity(BaseModel):
    """Base for per-user entities keyed by (user_id, product_id)."""

    user_id: str = PydanticField(description="Owning user")
    product_id: str = PydanticField(description="Catalog product id")
    updated_at: datetime = PydanticField(default_factory=utcnow)

    @property
    def key(self) -> tuple[str, str]:
        return (self.user_id, self.product_id)


class EntityTable(SQLModel, table=False):
    """Base table for remote-authoritative entities keyed by id."""

    id: str = Field(
        primary_key=True,
        description="Unique identifier for the entity",
    )

    created_at: datetime = Field(default=EPOCH, sa_type=sa.DateTime(timezone=True))
    updated_at: datetime = Field(
        default=EPOCH,
        nullable=False,
        index=True,
        sa_type=sa.DateTime(timezone=True),
    )


class UserScopedTable(SQLModel, table=False):
    """Base table for per-user rows with a (user_id, product_id) key."""

    user_id: str = Field(primary_key=True, index=True)
    product_id: str = Field(primary_key=True)
    updated_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
