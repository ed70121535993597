"""Typed failures surfaced by repositories and stores."""

from __future__ import annotations

import httpx
from sqlalchemy.exc import SQLAlchemyError


class StorefrontError(Exception):
    """Base class for every failure raised by the storefront data layer."""

    retryable: bool = False
    user_message: str = "Something went wrong. Please try again later."

    def __init__(self, message: str | None = None, *, cause: BaseException | None = None):
        super().__init__(message or self.user_message)
        self.cause = cause


class NetworkError(StorefrontError):
    """Remote source unreachable."""

    retryable = True
    user_message = "Network problem. Check your connection and try again."


class RemoteTimeoutError(NetworkError):
    """Remote source did not answer in time."""

    user_message = "The request timed out. Please try again."


class RemotePermissionError(StorefrontError):
    """Authentication or ACL rejection from the remote source."""

    retryable = True
    user_message = "You don't have access to this data. Please sign in again."


class ServerError(StorefrontError):
    """Remote source failed while handling the request."""

    retryable = True
    user_message = "Server error. Please try again later."


class PersistenceError(StorefrontError):
    """A local cache write could not be committed."""

    user_message = "Local data could not be saved."


RETRYABLE_MESSAGE = "Couldn't load the latest data. Pull to retry."


def map_error(error: BaseException) -> StorefrontError:
    """Translate a low-level exception into a storefront error kind."""
    if isinstance(error, StorefrontError):
        return error

    if isinstance(error, httpx.TimeoutException):
        return RemoteTimeoutError(str(error) or None, cause=error)
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status in (401, 403):
            return RemotePermissionError(str(error), cause=error)
        if status == 408:
            return RemoteTimeoutError(str(error), cause=error)
        if status == 429 or status >= 500:
            return ServerError(str(error), cause=error)
        return StorefrontError(str(error), cause=error)
    if isinstance(error, httpx.TransportError):
        return NetworkError(str(error) or None, cause=error)

    if isinstance(error, TimeoutError):
        return RemoteTimeoutError(str(error) or None, cause=error)
    if isinstance(error, PermissionError):
        return RemotePermissionError(str(error) or None, cause=error)
    if isinstance(error, (ConnectionError, OSError)):
        return NetworkError(str(error) or None, cause=error)

    if isinstance(error, SQLAlchemyError):
        return PersistenceError(str(error), cause=error)

    return StorefrontError(str(error) or None, cause=error)


def user_message(error: BaseException) -> str:
    """Message to show for a failed explicit refresh or command."""
    mapped = map_error(error)
    if isinstance(mapped, (NetworkError, RemotePermissionError)):
        return RETRYABLE_MESSAGE
    return mapped.user_message
