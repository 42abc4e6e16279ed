"""Fixtures compartidos: configuración de prueba y cliente HTTP falso."""

import base64
import hashlib
import hmac
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Optional, Union

import pytest

from shopify_webhooks.clients.http_client import DataType, HttpResponse
from shopify_webhooks.core.config import Settings
from shopify_webhooks.webhooks.registry import WebhookRegistry

API_SECRET_KEY = "kitties are cute"
HOST_NAME = "test_host_name"
API_VERSION = "2021-07"


@dataclass
class RecordedRequest:
    """Request enviada al cliente HTTP falso."""

    method: str
    domain: str
    path: str
    headers: Dict[str, str]
    data: Any


class FakeTransport:
    """
    Sustituto del cliente HTTP de la Admin API.

    Devuelve las respuestas encoladas en orden y registra cada request.
    """

    def __init__(self):
        self.calls: List[RecordedRequest] = []
        self._responses: Deque[Union[Dict[str, Any], Exception]] = deque()

    def queue(self, body: Dict[str, Any]) -> None:
        self._responses.append(body)

    def queue_error(self, error: Exception) -> None:
        self._responses.append(error)

    def factory(self, domain: str) -> "FakeHttpClient":
        return FakeHttpClient(domain, self)


class FakeHttpClient:
    def __init__(self, domain: str, transport: FakeTransport):
        self.domain = domain
        self.transport = transport

    async def request(
        self,
        method: str,
        path: str,
        data: Any = None,
        extra_headers: Optional[Dict[str, str]] = None,
        data_type: DataType = DataType.JSON,
    ) -> HttpResponse:
        self.transport.calls.append(
            RecordedRequest(
                method=method,
                domain=self.domain,
                path=path,
                headers={"Content-Type": data_type.value, **(extra_headers or {})},
                data=data,
            )
        )
        response = self.transport._responses.popleft()
        if isinstance(response, Exception):
            raise response
        return HttpResponse(status=200, body=response, headers={})


def sign(secret: str, body: str) -> str:
    """Firma base64(HMAC-SHA256(secret, body)), como la envía Shopify."""
    digest = hmac.new(secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


@pytest.fixture
def settings():
    """Configuración aislada del entorno y del .env."""
    return Settings(
        _env_file=None,
        SHOPIFY_API_KEY="test_key",
        SHOPIFY_API_SECRET_KEY=API_SECRET_KEY,
        SHOPIFY_SCOPES=["read_products", "write_products"],
        HOST_NAME=HOST_NAME,
        SHOPIFY_API_VERSION=API_VERSION,
        IS_EMBEDDED_APP=True,
        ENVIRONMENT="testing",
    )


@pytest.fixture
def registry():
    registry = WebhookRegistry()
    yield registry
    registry.clear()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def generic_webhook_handler():
    """Handler que exige los tres argumentos."""

    async def handler(topic: str, shop_domain: str, body: str) -> None:
        if not topic or not shop_domain or not body:
            raise ValueError("Missing webhook parameters")

    return handler


@pytest.fixture
def signer():
    """Firma bodies con el secret de la configuración de prueba."""

    def _sign(body: str, secret: str = API_SECRET_KEY) -> str:
        return sign(secret, body)

    return _sign
