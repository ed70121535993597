"""Entity package: UserProfile."""

from .entity import UserProfile
from .table import UserProfileTable

__all__ = ["UserProfile", "UserProfileTable"]
