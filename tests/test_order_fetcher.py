# tests/test_order_fetcher.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import pytest

from functions.proxy.errors import ConfigurationError, UpstreamMalformedError, UpstreamUnavailableError
from functions.proxy.order_fetcher import OrderFetcher
from functions.utils.settings import Settings


@pytest.fixture
def anyio_backend():
    return "asyncio"


def _settings(**overrides) -> Settings:
    base = {
        "secret_api_key": "K",
        "shopify_access_token": "shpat_test",
        "shop_name": "mystore.myshopify.com",
        "shopify_api_version": "2025-04",
    }
    base.update(overrides)
    return Settings(**base)


class _FakeHttp:
    """Stands in for HttpClient; records calls instead of hitting the network."""

    def __init__(self, response: Optional[httpx.Response] = None, exc: Optional[Exception] = None):
        self.response = response
        self.exc = exc
        self.calls: List[Dict[str, Any]] = []

    async def get(self, url: str, *, params=None, headers=None, timeout_seconds=None) -> httpx.Response:
        self.calls.append({"url": url, "params": params, "headers": headers})
        if self.exc is not None:
            raise self.exc
        assert self.response is not None
        return self.response


def test_build_orders_url_escapes_customer_id() -> None:
    fetcher = OrderFetcher(_settings(), http=_FakeHttp())  # type: ignore[arg-type]

    assert (
        fetcher.build_orders_url("123")
        == "https://mystore.myshopify.com/admin/api/2025-04/customers/123/orders.json"
    )
    assert (
        fetcher.build_orders_url("../12 3?x=1#y")
        == "https://mystore.myshopify.com/admin/api/2025-04/customers/..%2F12%203%3Fx%3D1%23y/orders.json"
    )


def test_build_orders_url_uses_configured_api_version() -> None:
    fetcher = OrderFetcher(_settings(shopify_api_version="2024-10"), http=_FakeHttp())  # type: ignore[arg-type]

    assert "/admin/api/2024-10/" in fetcher.build_orders_url("1")


@pytest.mark.anyio
async def test_fetch_orders_sends_token_as_header_not_in_url() -> None:
    http = _FakeHttp(httpx.Response(200, json={"orders": [{"total_price": "1.00"}]}))
    fetcher = OrderFetcher(_settings(), http=http)  # type: ignore[arg-type]

    orders = await fetcher.fetch_orders("123")

    assert orders == [{"total_price": "1.00"}]
    assert len(http.calls) == 1
    call = http.calls[0]
    assert call["params"] == {"status": "any"}
    assert call["headers"]["X-Shopify-Access-Token"] == "shpat_test"
    assert call["headers"]["Accept"] == "application/json"
    assert "shpat_test" not in call["url"]


@pytest.mark.anyio
async def test_fetch_orders_returns_raw_value_when_orders_missing() -> None:
    http = _FakeHttp(httpx.Response(200, json={"customer": {}}))
    fetcher = OrderFetcher(_settings(), http=http)  # type: ignore[arg-type]

    assert await fetcher.fetch_orders("123") is None


@pytest.mark.anyio
@pytest.mark.parametrize(
    "overrides",
    [
        {"shopify_access_token": None},
        {"shopify_access_token": ""},
        {"shop_name": None},
        {"shop_name": ""},
    ],
)
async def test_fetch_orders_missing_credentials_is_configuration_error(overrides) -> None:
    http = _FakeHttp(httpx.Response(200, json={"orders": []}))
    fetcher = OrderFetcher(_settings(**overrides), http=http)  # type: ignore[arg-type]

    with pytest.raises(ConfigurationError):
        await fetcher.fetch_orders("123")
    assert http.calls == []


@pytest.mark.anyio
@pytest.mark.parametrize("status_code", [401, 404, 429, 500, 503])
async def test_fetch_orders_non_success_status_is_upstream_unavailable(status_code: int) -> None:
    http = _FakeHttp(httpx.Response(status_code, text='{"errors":"Not Found"}'))
    fetcher = OrderFetcher(_settings(), http=http)  # type: ignore[arg-type]

    with pytest.raises(UpstreamUnavailableError) as exc_info:
        await fetcher.fetch_orders("123")

    assert exc_info.value.status_code == 502
    assert "Not Found" not in exc_info.value.public_message


@pytest.mark.anyio
@pytest.mark.parametrize(
    "exc",
    [
        httpx.ConnectTimeout("timed out"),
        httpx.ReadTimeout("timed out"),
        httpx.ConnectError("connection refused"),
    ],
)
async def test_fetch_orders_network_failure_is_upstream_unavailable(exc: Exception) -> None:
    fetcher = OrderFetcher(_settings(), http=_FakeHttp(exc=exc))  # type: ignore[arg-type]

    with pytest.raises(UpstreamUnavailableError):
        await fetcher.fetch_orders("123")


@pytest.mark.anyio
@pytest.mark.parametrize("text", ["<html>oops</html>", "", "[1, 2, 3]", '"orders"'])
async def test_fetch_orders_malformed_body_is_upstream_malformed(text: str) -> None:
    fetcher = OrderFetcher(_settings(), http=_FakeHttp(httpx.Response(200, text=text)))  # type: ignore[arg-type]

    with pytest.raises(UpstreamMalformedError) as exc_info:
        await fetcher.fetch_orders("123")
    assert exc_info.value.status_code == 502


@pytest.mark.anyio
async def test_fetch_orders_integer_beyond_digit_limit_is_upstream_malformed() -> None:
    text = '{"orders": [{"total_price": 1' + "0" * 5000 + "}]}"
    fetcher = OrderFetcher(_settings(), http=_FakeHttp(httpx.Response(200, text=text)))  # type: ignore[arg-type]

    with pytest.raises(UpstreamMalformedError):
        await fetcher.fetch_orders("123")
