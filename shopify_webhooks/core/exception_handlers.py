"""
Exception handlers de FastAPI para los errores de la librería.

Convierte las excepciones de la librería que llegan sin capturar a la
capa HTTP en respuestas JSON consistentes.
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shopify_webhooks.utils.error_handler import AppException, ShopifyAPIException, create_error_response

logger = logging.getLogger(__name__)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Convierte cualquier AppException en su JSON de error con el status propio.

    Args:
        request: Request de FastAPI
        exc: Error de la librería

    Returns:
        JSONResponse: create_error_response + path y timestamp
    """
    logger.error(f"App Exception: {exc.message} - Code: {exc.error_code.value} - URL: {request.url}")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            **create_error_response(exc),
            "path": str(request.url.path),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


async def shopify_api_exception_handler(request: Request, exc: ShopifyAPIException) -> JSONResponse:
    """
    Manejador para errores de la API de Shopify.

    Los errores de Shopify se exponen como 502 salvo el rate limiting.
    """
    logger.error(f"Shopify API Exception: {exc.message} - Endpoint: {exc.endpoint} - URL: {request.url}")

    headers = {}
    if exc.rate_limited and exc.retry_after:
        headers["Retry-After"] = str(int(exc.retry_after))

    return JSONResponse(
        status_code=429 if exc.rate_limited else 502,
        content={
            **create_error_response(exc),
            "path": str(request.url.path),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        headers=headers,
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """
    Registra los manejadores de excepciones en la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    app.add_exception_handler(ShopifyAPIException, shopify_api_exception_handler)
    app.add_exception_handler(AppException, app_exception_handler)
    logger.debug("Exception handlers configured")
