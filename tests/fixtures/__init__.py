"""Shared pytest fixtures for the storefront data layer tests."""

from .database import *  # noqa: F401,F403
from .remote import *  # noqa: F401,F403
from .session import *  # noqa: F401,F403
from .stores import *  # noqa: F401,F403
