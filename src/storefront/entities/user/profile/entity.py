"""Entity: UserProfile."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.storefront.entities.core._base import utcnow


class UserProfile(BaseModel):
    """Profile of a signed-in user; one per user id."""

    user_id: str = Field(description="Owning user")
    name: str = Field(default="", description="Display name")
    email: str = Field(default="", description="Contact email")
    phone: str = Field(default="", description="Contact phone")
    updated_at: datetime = Field(default_factory=utcnow)
