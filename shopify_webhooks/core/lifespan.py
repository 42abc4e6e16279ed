"""
Lifespan de la app FastAPI.

Configura logging y valida la configuración en el startup; en el
shutdown vacía el registro de webhooks.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from shopify_webhooks.core.config import validate_required_settings
from shopify_webhooks.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: logging y validación de settings. Shutdown: vacía el registro.

    Args:
        app: Instancia de FastAPI
    """
    # === STARTUP ===
    settings = app.state.settings
    setup_logging(settings)
    logger.info(f"🚀 Iniciando {settings.APP_NAME}...")

    try:
        validate_required_settings(settings)
    except Exception as e:
        logger.error(f"❌ No se pudo iniciar la app: {e}")
        raise

    logger.info("🎉 Listo para recibir webhooks")

    yield

    # === SHUTDOWN ===
    logger.info(f"🛑 Cerrando {settings.APP_NAME}...")
    app.state.webhook_registry.clear()
