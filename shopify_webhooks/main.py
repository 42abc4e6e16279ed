"""
Shopify Webhooks - FastAPI Application Entry Point

Crea una aplicación FastAPI que expone las entregas de webhooks
registradas y comparte un único registro entre el reconciliador y
el procesador.
"""

import logging
from typing import Callable, Optional

from fastapi import FastAPI

from shopify_webhooks.clients.http_client import ShopifyHttpClient
from shopify_webhooks.core.config import Settings, get_settings
from shopify_webhooks.core.exception_handlers import configure_exception_handlers
from shopify_webhooks.core.lifespan import lifespan
from shopify_webhooks.core.routers import configure_all_routers
from shopify_webhooks.webhooks import WebhookProcessor, WebhookReconciler, WebhookRegistry

logger = logging.getLogger(__name__)


def create_application(
    settings: Optional[Settings] = None,
    registry: Optional[WebhookRegistry] = None,
    http_client_factory: Optional[Callable[[str], ShopifyHttpClient]] = None,
) -> FastAPI:
    """
    Crea la app con un reconciliador y un procesador sobre el mismo registro.

    Args:
        settings: Configuración (por defecto la global)
        registry: Registro compartido (por defecto uno vacío)
        http_client_factory: Cliente HTTP para la Admin API

    Returns:
        FastAPI: App lista para servir
    """
    settings = settings or get_settings()
    registry = registry if registry is not None else WebhookRegistry()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Registro y procesamiento de webhooks de Shopify",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.webhook_registry = registry
    app.state.webhook_reconciler = WebhookReconciler(
        registry, settings=settings, http_client_factory=http_client_factory
    )
    app.state.webhook_processor = WebhookProcessor(registry, settings=settings)

    configure_exception_handlers(app)
    configure_all_routers(app)

    logger.info("✅ App de webhooks creada")
    return app


if __name__ == "__main__":
    import uvicorn

    current_settings = get_settings()
    uvicorn.run(
        create_application(current_settings),
        host=current_settings.HOST,
        port=current_settings.PORT,
        log_level=current_settings.LOG_LEVEL.lower(),
    )
