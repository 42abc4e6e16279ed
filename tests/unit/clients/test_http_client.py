"""
Tests del cliente HTTP de la Admin API.

aiohttp.ClientSession se reemplaza por un doble que devuelve una
respuesta fija y guarda los argumentos del request.
"""

import json
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from unittest.mock import patch

import aiohttp
import pytest

from shopify_webhooks.clients.http_client import DataType, ShopifyHttpClient, parse_retry_after
from shopify_webhooks.utils.error_handler import ErrorCode, InvalidShopError, ShopifyAPIException


class FakeResponse:
    def __init__(self, status=200, text="{}", headers=None):
        self.status = status
        self._text = text
        self.headers = headers or {}

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Sesión que registra el último request."""

    last_request = None

    def __init__(self, response=None, error=None, **kwargs):
        self.response = response
        self.error = error

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    def request(self, method, url, data=None, headers=None):
        FakeSession.last_request = {"method": method, "url": url, "data": data, "headers": headers}
        if self.error:
            raise self.error
        return self.response


def patch_session(response=None, error=None):
    return patch(
        "shopify_webhooks.clients.http_client.aiohttp.ClientSession",
        side_effect=lambda **kwargs: FakeSession(response=response, error=error),
    )


class TestShopifyHttpClient:
    def test_rejects_invalid_shop(self, settings):
        with pytest.raises(InvalidShopError):
            ShopifyHttpClient("not-a-shop.example.com", settings=settings)

    def test_normalizes_domain(self, settings):
        client = ShopifyHttpClient("https://Shop1.myshopify.io/", settings=settings)
        assert client.domain == "shop1.myshopify.io"

    @pytest.mark.asyncio
    async def test_graphql_request_sends_raw_document(self, settings):
        client = ShopifyHttpClient("shop1.myshopify.io", settings=settings)
        body = {"data": {"shop": {"name": "Shop 1"}}}

        with patch_session(FakeResponse(200, json.dumps(body), {"X-Request-Id": "abc"})):
            response = await client.request(
                "POST",
                "/admin/api/2021-07/graphql.json",
                data="{ shop { name } }",
                extra_headers={"X-Shopify-Access-Token": "token"},
                data_type=DataType.GRAPHQL,
            )

        assert response.status == 200
        assert response.body == body
        assert response.headers == {"X-Request-Id": "abc"}
        sent = FakeSession.last_request
        assert sent["url"] == "https://shop1.myshopify.io/admin/api/2021-07/graphql.json"
        assert sent["data"] == "{ shop { name } }"
        assert sent["headers"]["Content-Type"] == "application/graphql"
        assert sent["headers"]["X-Shopify-Access-Token"] == "token"

    @pytest.mark.asyncio
    async def test_dict_body_is_serialized_as_json(self, settings):
        client = ShopifyHttpClient("shop1.myshopify.io", settings=settings)

        with patch_session(FakeResponse(201, "")):
            response = await client.request("POST", "/admin/api/2021-07/things.json", data={"a": 1})

        assert response.body == {}
        assert FakeSession.last_request["data"] == '{"a": 1}'

    @pytest.mark.asyncio
    async def test_throttled_response_raises_rate_limited(self, settings):
        client = ShopifyHttpClient("shop1.myshopify.io", settings=settings)

        with patch_session(FakeResponse(429, "Throttled", {"Retry-After": "2.0"})):
            with pytest.raises(ShopifyAPIException) as exc_info:
                await client.request("POST", "/admin/api/2021-07/graphql.json", data="{}")

        assert exc_info.value.rate_limited is True
        assert exc_info.value.retry_after == 2.0
        assert exc_info.value.error_code == ErrorCode.RATE_LIMIT_EXCEEDED

    @pytest.mark.asyncio
    async def test_server_error_raises(self, settings):
        client = ShopifyHttpClient("shop1.myshopify.io", settings=settings)

        with patch_session(FakeResponse(500, "Internal error")):
            with pytest.raises(ShopifyAPIException) as exc_info:
                await client.request("POST", "/admin/api/2021-07/graphql.json", data="{}")

        assert exc_info.value.api_response_code == 500
        assert exc_info.value.is_retryable is True

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self, settings):
        client = ShopifyHttpClient("shop1.myshopify.io", settings=settings)

        with patch_session(FakeResponse(200, "<html>")):
            with pytest.raises(ShopifyAPIException, match="Invalid JSON"):
                await client.request("POST", "/admin/api/2021-07/graphql.json", data="{}")

    @pytest.mark.asyncio
    async def test_network_error_is_wrapped(self, settings):
        client = ShopifyHttpClient("shop1.myshopify.io", settings=settings)

        with patch_session(error=aiohttp.ClientConnectionError("connection refused")):
            with pytest.raises(ShopifyAPIException, match="Network error"):
                await client.request("POST", "/admin/api/2021-07/graphql.json", data="{}")

    @pytest.mark.asyncio
    async def test_throttled_response_with_http_date_is_still_rate_limited(self, settings):
        client = ShopifyHttpClient("shop1.myshopify.io", settings=settings)

        with patch_session(FakeResponse(429, "Throttled", {"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"})):
            with pytest.raises(ShopifyAPIException) as exc_info:
                await client.request("POST", "/admin/api/2021-07/graphql.json", data="{}")

        assert exc_info.value.rate_limited is True
        assert exc_info.value.retry_after == 0.0


class TestParseRetryAfter:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, 1.0),
            ("", 1.0),
            ("2.5", 2.5),
            ("-3", 0.0),
            ("soon", 1.0),
            ("Wed, 21 Oct 2015 07:28:00 GMT", 0.0),
        ],
    )
    def test_parse_retry_after(self, value, expected):
        assert parse_retry_after(value) == expected

    def test_future_http_date_counts_down(self):
        retry_at = datetime.now(timezone.utc) + timedelta(seconds=120)

        seconds = parse_retry_after(format_datetime(retry_at, usegmt=True))

        assert 100 < seconds <= 120
