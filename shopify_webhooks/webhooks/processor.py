"""
Procesador de entregas de webhooks de Shopify.

Autentica cada entrega con la firma HMAC del body crudo, resuelve el
handler registrado para su topic y lo invoca exactamente una vez.
La respuesta HTTP se finaliza siempre antes de lanzar cualquier error.
"""

import inspect
import logging
from typing import Optional

from fastapi import Request, Response, status

from shopify_webhooks.base_types import ShopifyHeader
from shopify_webhooks.core.config import Settings, get_settings
from shopify_webhooks.utils.error_handler import ErrorCode, InvalidWebhookError
from shopify_webhooks.utils.shopify_utils import compute_webhook_hmac, safe_compare
from shopify_webhooks.webhooks.registry import WebhookRegistry
from shopify_webhooks.webhooks.types import DeliveryContext

logger = logging.getLogger(__name__)


def finalize_response(response: Response, status_code: int, message: str = "") -> None:
    """
    Escribe status y body en la respuesta.

    Solo toca status_code y body: los headers los pone la capa HTTP que
    devuelve la respuesta (ver api/v1/endpoints/webhooks.py).

    Args:
        response: Respuesta del framework, mutada in place
        status_code: Código HTTP
        message: Body en texto plano
    """
    response.status_code = status_code
    response.body = message.encode("utf-8")


class WebhookProcessor:
    """
    Procesador de entregas entrantes.

    Lee el registro compartido pero nunca lo modifica.
    """

    def __init__(self, registry: WebhookRegistry, settings: Optional[Settings] = None):
        """
        Inicializa el procesador.

        Args:
            registry: Registro poblado por el reconciliador
            settings: Configuración (API secret key para la firma)
        """
        self.registry = registry
        self.settings = settings or get_settings()

    def is_webhook_path(self, path: str) -> bool:
        """True si el path corresponde a algún webhook registrado."""
        return self.registry.is_webhook_path(path)

    async def extract_context(self, request: Request) -> DeliveryContext:
        """
        Extrae firma, topic, dominio y body crudo de la request.

        Los nombres de header se comparan sin distinguir mayúsculas.
        """
        headers = {key.lower(): value for key, value in request.headers.items()}
        raw_body = await request.body()

        return DeliveryContext(
            hmac=headers.get(ShopifyHeader.HMAC.value.lower()),
            topic=headers.get(ShopifyHeader.TOPIC.value.lower()),
            domain=headers.get(ShopifyHeader.DOMAIN.value.lower()),
            raw_body=raw_body,
        )

    async def process(self, request: Request, response: Response) -> None:
        """
        Procesa una entrega de webhook.

        Args:
            request: Request entrante
            response: Respuesta a finalizar (200, 400, 403 o 500)

        Raises:
            InvalidWebhookError: Body vacío o no UTF-8, headers faltantes, firma inválida o topic sin handler
            Exception: El error del handler, sin envolver
        """
        context = await self.extract_context(request)

        if not context.raw_body:
            error = InvalidWebhookError(
                "No body was received when processing webhook",
                status_code=status.HTTP_400_BAD_REQUEST,
                topic=context.topic,
            )
            finalize_response(response, error.status_code, error.message)
            raise error

        missing_headers = context.missing_headers()
        if missing_headers:
            error = InvalidWebhookError(
                f"Missing one or more of the required HTTP headers to process webhooks: [{', '.join(missing_headers)}]",
                status_code=status.HTTP_400_BAD_REQUEST,
                topic=context.topic,
            )
            finalize_response(response, error.status_code, error.message)
            raise error

        generated_hmac = compute_webhook_hmac(self.settings.SHOPIFY_API_SECRET_KEY, context.raw_body)
        if not safe_compare(generated_hmac, context.hmac):
            logger.warning(f"Rejected webhook {context.topic} from {context.domain}: HMAC mismatch")
            error = InvalidWebhookError(
                f"Could not validate request for topic {context.topic}",
                status_code=status.HTTP_403_FORBIDDEN,
                topic=context.topic,
                error_code=ErrorCode.INVALID_WEBHOOK_SIGNATURE,
            )
            finalize_response(response, error.status_code, error.message)
            raise error

        topic = context.graphql_topic
        entry = self.registry.get(topic)
        if entry is None:
            logger.warning(f"No webhook handler registered for topic {topic}")
            error = InvalidWebhookError(
                f"No webhook is registered for topic {context.topic}",
                status_code=status.HTTP_403_FORBIDDEN,
                topic=context.topic,
            )
            finalize_response(response, error.status_code, error.message)
            raise error

        logger.info(f"Processing webhook: {topic} from {context.domain}")
        try:
            body = context.raw_body.decode("utf-8")
        except UnicodeDecodeError:
            error = InvalidWebhookError(
                f"Webhook body for topic {context.topic} is not valid UTF-8",
                status_code=status.HTTP_400_BAD_REQUEST,
                topic=context.topic,
            )
            finalize_response(response, error.status_code, error.message)
            raise error

        try:
            result = entry.webhook_handler(topic, context.domain, body)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Webhook handler for {topic} failed: {e}")
            finalize_response(response, status.HTTP_500_INTERNAL_SERVER_ERROR, "Webhook handler failed")
            raise

        finalize_response(response, status.HTTP_200_OK)
        logger.info(f"Webhook processed successfully: {topic}")
