"""
Routers de la app: health, administración de webhooks y ruta de entrega.
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI

from shopify_webhooks.api.v1.endpoints.webhooks import delivery_router
from shopify_webhooks.api.v1.endpoints.webhooks import router as webhooks_router

logger = logging.getLogger(__name__)


def create_health_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints de health check.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/health", tags=["Health"], summary="Health Check")
    async def health_check():
        """Estado básico de la aplicación."""
        return {
            "status": "healthy",
            "registered_webhooks": len(app.state.webhook_registry),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


def configure_all_routers(app: FastAPI) -> None:
    """
    Registra todos los routers de la aplicación.

    La ruta de entrega de webhooks es catch-all y se incluye al final
    para no tapar ninguna otra ruta POST.

    Args:
        app: Instancia de FastAPI
    """
    create_health_endpoints(app)
    app.include_router(webhooks_router, prefix="/api/v1/webhooks", tags=["Webhooks"])
    app.include_router(delivery_router)
    logger.debug("Routers configured")
