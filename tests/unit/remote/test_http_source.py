"""Tests for the HTTP catalog source and its polling feeds."""

import asyncio
import json

import httpx
import pytest
import pytest_asyncio

from src.storefront.core.errors import NetworkError, RemotePermissionError, ServerError
from src.storefront.core.remote import HttpCatalogSource
from src.storefront.runtime.config.config_data import RemoteConfig
from tests.utils import Recorder, category_doc, product_doc

FAST = RemoteConfig(
    base_url="https://catalog.test/v1",
    poll_interval_seconds=0.01,
    retry_backoff_base_seconds=0.01,
    retry_backoff_cap_seconds=0.04,
)


class Service:
    """Scripted document service for ``httpx.MockTransport``."""

    def __init__(self):
        self.collections: dict[str, object] = {}
        self.status: dict[str, int] = {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        name = request.url.path.rsplit("/", 1)[-1]
        status = self.status.get(name, 200)
        if status != 200:
            return httpx.Response(status, json={"error": "unavailable"})
        return httpx.Response(200, content=json.dumps(self.collections.get(name, [])))


@pytest.fixture
def service() -> Service:
    return Service()


@pytest_asyncio.fixture
async def source(service: Service):
    client = httpx.AsyncClient(transport=httpx.MockTransport(service), base_url="https://catalog.test/v1/")
    yield HttpCatalogSource(FAST, client=client)
    await client.aclose()


async def wait_for(condition, timeout: float = 2.0) -> None:
    async with asyncio.timeout(timeout):
        while not condition():
            await asyncio.sleep(0.005)


class TestFetch:
    @pytest.mark.asyncio
    async def test_fetch_list_payload(self, source, service):
        service.collections["products"] = [product_doc("p1"), product_doc("p2")]

        products = await source.fetch_products()

        assert [p.id for p in products] == ["p1", "p2"]
        assert "isActive" not in service.requests[0].url.params

    @pytest.mark.asyncio
    async def test_fetch_keyed_payload(self, source, service):
        doc = category_doc("ignored")
        del doc["id"]
        service.collections["categories"] = {"c7": doc}

        assert [c.id for c in await source.fetch_categories()] == ["c7"]

    @pytest.mark.asyncio
    async def test_fetch_wrapped_payload_skips_malformed(self, source, service):
        service.collections["brands"] = {"documents": [{"id": "b1"}, {"name": "no id"}, "junk"]}

        assert [b.id for b in await source.fetch_brands()] == ["b1"]

    @pytest.mark.asyncio
    async def test_active_only_is_requested_when_configured(self, service):
        client = httpx.AsyncClient(transport=httpx.MockTransport(service), base_url="https://catalog.test/v1/")
        source = HttpCatalogSource(FAST.model_copy(update={"active_only": True}), client=client)

        await source.fetch_products()

        assert service.requests[0].url.params["isActive"] == "true"
        await client.aclose()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,expected",
        [(401, RemotePermissionError), (503, ServerError)],
    )
    async def test_status_errors_are_mapped(self, source, service, status, expected):
        service.status["products"] = status

        with pytest.raises(expected):
            await source.fetch_products()

    @pytest.mark.asyncio
    async def test_transport_errors_are_mapped(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(refuse), base_url="https://catalog.test/v1/")
        source = HttpCatalogSource(FAST, client=client)

        with pytest.raises(NetworkError):
            await source.fetch_products()
        await client.aclose()

    def test_default_client_configuration(self):
        source = HttpCatalogSource(FAST.model_copy(update={"api_key": "secret"}))

        assert source.client.headers["Authorization"] == "Bearer secret"
        assert str(source.client.base_url) == "https://catalog.test/v1/"


class TestPollingFeed:
    def test_backoff_is_capped(self):
        feed = HttpCatalogSource(FAST).listen_products()

        assert [feed.backoff_delay(n) for n in (1, 2, 3, 4, 10)] == [0.01, 0.02, 0.04, 0.04, 0.04]

    def test_feeds_are_shared(self):
        source = HttpCatalogSource(FAST)
        assert source.listen_products() is source.listen_products()
        assert source.listen_products() is not source.listen_brands()

    @pytest.mark.asyncio
    async def test_emits_changes_only(self, source, service):
        service.collections["products"] = [product_doc("p1")]
        recorder = Recorder()
        feed = source.listen_products()
        subscription = feed.subscribe(recorder)

        await wait_for(lambda: len(recorder.values) == 1)
        polls = len(service.requests)
        await wait_for(lambda: len(service.requests) >= polls + 2)
        assert len(recorder.values) == 1

        service.collections["products"] = [product_doc("p1"), product_doc("p2", isActive=False)]
        await wait_for(lambda: len(recorder.values) == 2)
        assert recorder.ids() == ["p1", "p2"]

        subscription.cancel()
        assert not feed.running

    @pytest.mark.asyncio
    async def test_restarted_feed_starts_from_fresh_poll(self, source, service):
        service.collections["products"] = [product_doc("p1")]
        feed = source.listen_products()
        first = Recorder()
        subscription = feed.subscribe(first)
        await wait_for(lambda: len(first.values) == 1)
        subscription.cancel()

        service.collections["products"] = [product_doc("p2")]
        second = Recorder()
        feed.subscribe(second)
        assert second.values == []

        await wait_for(lambda: len(second.values) == 1)
        assert second.ids() == ["p2"]
        await source.aclose()

    @pytest.mark.asyncio
    async def test_failures_are_retried(self, source, service):
        service.status["categories"] = 500
        recorder = Recorder()
        feed = source.listen_categories()
        subscription = feed.subscribe(recorder)

        await wait_for(lambda: len(service.requests) >= 2)
        assert recorder.values == []
        assert feed.running

        del service.status["categories"]
        service.collections["categories"] = [category_doc("c1")]
        await wait_for(lambda: len(recorder.values) == 1)

        subscription.cancel()

    @pytest.mark.asyncio
    async def test_aclose_stops_feeds(self, source, service):
        feed = source.listen_brands()
        feed.subscribe(Recorder())
        assert feed.running

        await source.aclose()

        assert not feed.running
