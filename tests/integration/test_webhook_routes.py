"""
Tests de integración de la aplicación FastAPI.

Registra un webhook con el reconciliador de la app (Shopify simulado con
el transporte falso) y entrega eventos a la ruta catch-all.
"""

import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from shopify_webhooks.main import create_application
from shopify_webhooks.webhooks.types import RegisterOptions

RAW_BODY = json.dumps({"foo": "bar"})


@pytest.fixture
def app(settings, registry, transport):
    return create_application(settings=settings, registry=registry, http_client_factory=transport.factory)


@pytest.fixture
def received():
    return []


@pytest.fixture
def registered_app(app, transport, received):
    async def handler(topic, shop_domain, body):
        received.append((topic, shop_domain, body))

    transport.queue({"data": {"webhookSubscriptions": {"edges": []}}})
    transport.queue({"data": {"webhookSubscriptionCreate": {"userErrors": [], "webhookSubscription": {"id": "1"}}}})
    result = asyncio.run(
        app.state.webhook_reconciler.register(
            RegisterOptions(
                path="/webhooks",
                topic="PRODUCTS_CREATE",
                access_token="some token",
                shop="shop1.myshopify.io",
                webhook_handler=handler,
            )
        )
    )
    assert result.success is True
    return app


class TestWebhookRoutes:
    def test_delivery_to_registered_path(self, registered_app, signer, received):
        client = TestClient(registered_app)

        response = client.post(
            "/webhooks",
            content=RAW_BODY,
            headers={
                "X-Shopify-Hmac-Sha256": signer(RAW_BODY),
                "X-Shopify-Topic": "products/create",
                "X-Shopify-Shop-Domain": "shop1.myshopify.io",
            },
        )

        assert response.status_code == 200
        assert received == [("PRODUCTS_CREATE", "shop1.myshopify.io", RAW_BODY)]

    def test_rejected_delivery_returns_finalized_response(self, registered_app, received):
        client = TestClient(registered_app)

        response = client.post(
            "/webhooks",
            content=RAW_BODY,
            headers={
                "X-Shopify-Hmac-Sha256": "invalid",
                "X-Shopify-Topic": "products/create",
                "X-Shopify-Shop-Domain": "shop1.myshopify.io",
            },
        )

        assert response.status_code == 403
        assert response.text == "Could not validate request for topic products/create"
        assert response.headers.get_list("content-type") == ["text/plain; charset=utf-8"]
        assert received == []

    def test_unknown_path_is_not_found(self, registered_app):
        client = TestClient(registered_app)

        response = client.post("/not-webhooks", content=RAW_BODY)

        assert response.status_code == 404

    def test_registry_endpoint_lists_topics(self, registered_app):
        client = TestClient(registered_app)

        response = client.get("/api/v1/webhooks/registry")

        assert response.status_code == 200
        assert response.json() == {"count": 1, "webhooks": [{"topic": "PRODUCTS_CREATE", "path": "/webhooks"}]}

    def test_health_check(self, app):
        response = TestClient(app).get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["registered_webhooks"] == 0

    def test_lifespan_validates_settings(self, settings, registry):
        """Sin configuración requerida la app no arranca."""
        incomplete = settings.model_copy(update={"HOST_NAME": ""})
        app = create_application(settings=incomplete, registry=registry)

        with pytest.raises(Exception, match="Missing values for: HOST_NAME"):
            with TestClient(app):
                pass
