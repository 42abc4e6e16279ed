"""
Endpoints para webhooks de Shopify.

Define la ruta de entrega (cualquier path registrado por el reconciliador)
y un endpoint de consulta del registro local.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from shopify_webhooks.utils.error_handler import InvalidWebhookError, log_error
from shopify_webhooks.webhooks.processor import WebhookProcessor

logger = logging.getLogger(__name__)

# Endpoints de administración bajo /api/v1/webhooks
router = APIRouter()

# Ruta de entrega: los paths se registran en runtime, por eso es catch-all
delivery_router = APIRouter()


def get_processor(request: Request) -> WebhookProcessor:
    """Procesador asociado a la aplicación."""
    return request.app.state.webhook_processor


@router.get("/registry", status_code=status.HTTP_200_OK)
async def list_registered_webhooks(request: Request) -> Dict[str, Any]:
    """
    Lista los topics registrados y el path que recibe cada uno.

    Returns:
        Dict: Topics en orden de registro
    """
    registry = get_processor(request).registry
    return {
        "count": len(registry),
        "webhooks": [{"topic": entry.topic, "path": entry.path} for entry in registry],
    }


@delivery_router.post("/{full_path:path}", include_in_schema=False)
async def receive_shopify_webhook(request: Request, response: Response, full_path: str) -> Response:
    """
    Recibe una entrega de webhook en cualquier path registrado.

    El procesador deja la respuesta finalizada antes de lanzar, así que
    los errores solo se registran y se responde con ese status y body
    como text/plain.

    Args:
        request: Request HTTP con el webhook
        response: Respuesta que el procesador completa

    Returns:
        Response: Status y body finalizados por el procesador
    """
    processor = get_processor(request)
    path = request.url.path

    if not processor.is_webhook_path(path):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "Not Found"})

    try:
        await processor.process(request, response)
    except InvalidWebhookError as e:
        logger.warning(f"Rejected webhook on {path}: {e.message}")
    except Exception as e:
        log_error(e, {"path": path, "topic": request.headers.get("X-Shopify-Topic")})

    return Response(content=response.body, status_code=response.status_code, media_type="text/plain")
