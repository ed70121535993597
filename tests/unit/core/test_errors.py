"""Tests for error classification."""

import httpx
import pytest
from sqlalchemy.exc import OperationalError

from src.storefront.core.errors import (
    RETRYABLE_MESSAGE,
    NetworkError,
    PersistenceError,
    RemotePermissionError,
    RemoteTimeoutError,
    ServerError,
    StorefrontError,
    map_error,
    user_message,
)


def _status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://catalog.test/products")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError(f"HTTP {status}", request=request, response=response)


class TestMapError:
    @pytest.mark.parametrize(
        "status,expected",
        [
            (401, RemotePermissionError),
            (403, RemotePermissionError),
            (408, RemoteTimeoutError),
            (429, ServerError),
            (500, ServerError),
            (503, ServerError),
        ],
    )
    def test_http_status(self, status, expected):
        mapped = map_error(_status_error(status))

        assert type(mapped) is expected
        assert mapped.retryable is True
        assert isinstance(mapped.cause, httpx.HTTPStatusError)

    def test_other_client_errors_are_generic(self):
        mapped = map_error(_status_error(404))

        assert type(mapped) is StorefrontError
        assert mapped.retryable is False

    def test_httpx_timeout(self):
        mapped = map_error(httpx.ReadTimeout("slow"))
        assert isinstance(mapped, RemoteTimeoutError)
        assert isinstance(mapped, NetworkError)

    def test_httpx_transport(self):
        assert type(map_error(httpx.ConnectError("refused"))) is NetworkError

    @pytest.mark.parametrize(
        "error,expected",
        [
            (TimeoutError(), RemoteTimeoutError),
            (PermissionError("denied"), RemotePermissionError),
            (ConnectionResetError(), NetworkError),
            (OSError("unreachable"), NetworkError),
        ],
    )
    def test_builtin_errors(self, error, expected):
        assert type(map_error(error)) is expected

    def test_database_errors(self):
        error = OperationalError("INSERT", {}, Exception("disk full"))
        mapped = map_error(error)

        assert isinstance(mapped, PersistenceError)
        assert mapped.cause is error

    def test_storefront_errors_pass_through(self):
        error = ServerError("boom")
        assert map_error(error) is error

    def test_unknown_errors(self):
        mapped = map_error(KeyError("x"))
        assert type(mapped) is StorefrontError


class TestUserMessage:
    def test_network_and_permission_errors_ask_to_retry(self):
        assert user_message(httpx.ConnectError("refused")) == RETRYABLE_MESSAGE
        assert user_message(_status_error(401)) == RETRYABLE_MESSAGE

    def test_other_errors_use_their_message(self):
        assert user_message(_status_error(500)) == ServerError.user_message
        assert user_message(ValueError()) == StorefrontError.user_message

    def test_default_message(self):
        assert str(PersistenceError()) == PersistenceError.user_message
