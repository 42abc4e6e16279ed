"""
Reconciliador de suscripciones de webhooks con Shopify.

Para cada (tienda, topic, destino) decide si crear, actualizar o dejar
intacta la suscripción remota, y registra el handler local del topic.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Union

from shopify_webhooks.clients.graphql_client import GraphqlClient
from shopify_webhooks.clients.http_client import ShopifyHttpClient
from shopify_webhooks.core.config import Settings, get_settings
from shopify_webhooks.webhooks.queries import (
    build_check_query,
    build_subscription_mutation,
    mutation_name,
)
from shopify_webhooks.webhooks.registry import WebhookRegistry
from shopify_webhooks.webhooks.types import (
    CreateSubscription,
    DeliveryMethod,
    DeliveryTarget,
    EventBridgeDeliveryTarget,
    HttpDeliveryTarget,
    RegisterOptions,
    RegisterReturn,
    SubscriptionOperation,
    UpdateSubscription,
    WebhookRegistryEntry,
)

logger = logging.getLogger(__name__)


def parse_delivery_method(value: Union[DeliveryMethod, str, None]) -> Optional[DeliveryMethod]:
    """
    Convierte el método de entrega recibido a DeliveryMethod.

    Returns:
        DeliveryMethod, o None si el valor no es un método conocido
    """
    if value is None:
        return DeliveryMethod.HTTP
    if isinstance(value, DeliveryMethod):
        return value
    try:
        return DeliveryMethod(str(value).lower())
    except ValueError:
        return None


class WebhookReconciler:
    """
    Registra webhooks en Shopify y en el registro local.

    Garantiza una única suscripción remota activa por topic con el destino
    deseado: consulta la existente y crea, actualiza u omite la mutación.
    """

    def __init__(
        self,
        registry: WebhookRegistry,
        settings: Optional[Settings] = None,
        http_client_factory: Optional[Callable[[str], ShopifyHttpClient]] = None,
    ):
        """
        Inicializa el reconciliador.

        Args:
            registry: Registro local compartido con el procesador
            settings: Configuración (host y versión de API)
            http_client_factory: Construye el cliente HTTP para un dominio
        """
        self.registry = registry
        self.settings = settings or get_settings()
        self.http_client_factory = http_client_factory

    def _graphql_client(self, shop: str, access_token: str) -> GraphqlClient:
        return GraphqlClient(
            shop,
            access_token,
            settings=self.settings,
            http_client_factory=self.http_client_factory,
        )

    def build_delivery_target(self, path: str, delivery_method: DeliveryMethod) -> DeliveryTarget:
        """
        Calcula el destino deseado para un path.

        Los destinos EventBridge usan el path tal cual si ya es un ARN;
        cualquier otro path se publica bajo el host configurado.
        """
        if delivery_method == DeliveryMethod.EVENT_BRIDGE:
            if path.startswith("arn:"):
                return EventBridgeDeliveryTarget(arn=path)
            return EventBridgeDeliveryTarget(arn=self.settings.build_callback_url(path))
        return HttpDeliveryTarget(callback_url=self.settings.build_callback_url(path))

    async def register(self, options: RegisterOptions) -> RegisterReturn:
        """
        Registra un webhook para un topic en una tienda.

        Args:
            options: Path, topic, tienda, token, handler y método de entrega

        Returns:
            RegisterReturn: success según la respuesta de la mutación,
            result con el body crudo ({} si no hubo mutación)

        Raises:
            ShopifyAPIException: Errores de transporte, sin modificar
        """
        delivery_method = parse_delivery_method(options.delivery_method)
        if delivery_method is None:
            logger.warning(
                f"Invalid delivery method '{options.delivery_method}' for topic {options.topic}, "
                f"expected one of {[method.value for method in DeliveryMethod]}"
            )
            return RegisterReturn(success=False, result={})

        client = self._graphql_client(options.shop, options.access_token)

        check_response = await client.query(build_check_query(options.topic))
        existing = self._first_subscription(check_response.body)

        target = self.build_delivery_target(options.path, delivery_method)

        if existing and existing.get("callbackUrl") == target.address:
            logger.info(f"Webhook for {options.topic} on {options.shop} already points to {target.address}, skipping")
            self._add_to_registry(options)
            return RegisterReturn(success=True, result={})

        operation: SubscriptionOperation
        if existing:
            operation = UpdateSubscription(subscription_id=existing["id"])
        else:
            operation = CreateSubscription(topic=options.topic)

        name = mutation_name(target, operation)
        logger.info(f"Registering webhook {options.topic} on {options.shop} via {name} -> {target.address}")

        response = await client.query(build_subscription_mutation(target, operation))
        self._add_to_registry(options)

        success = self._is_success(response.body, name)
        if not success:
            logger.warning(f"Webhook registration for {options.topic} on {options.shop} failed: {response.body}")

        return RegisterReturn(success=success, result=response.body)

    async def register_all(
        self,
        shop: str,
        access_token: str,
        delivery_method: Union[DeliveryMethod, str] = DeliveryMethod.HTTP,
    ) -> Dict[str, RegisterReturn]:
        """
        Registra en otra tienda todos los topics ya presentes en el registro.

        Args:
            shop: Dominio de la tienda
            access_token: Token de acceso de esa tienda
            delivery_method: Método de entrega para todos los topics

        Returns:
            Dict: topic -> RegisterReturn
        """
        results: Dict[str, RegisterReturn] = {}
        for entry in self.registry.entries():
            results[entry.topic] = await self.register(
                RegisterOptions(
                    path=entry.path,
                    topic=entry.topic,
                    access_token=access_token,
                    shop=shop,
                    webhook_handler=entry.webhook_handler,
                    delivery_method=delivery_method,
                )
            )

        failed = [topic for topic, result in results.items() if not result.success]
        if failed:
            logger.warning(f"Failed to register {len(failed)} webhook(s) on {shop}: {failed}")
        else:
            logger.info(f"✅ Registered {len(results)} webhook(s) on {shop}")

        return results

    def get_topics(self) -> List[str]:
        """Topics con handler registrado, en orden de registro."""
        return self.registry.topics()

    def _add_to_registry(self, options: RegisterOptions) -> None:
        self.registry.upsert(
            WebhookRegistryEntry(
                path=options.path,
                topic=options.topic,
                webhook_handler=options.webhook_handler,
            )
        )

    @staticmethod
    def _first_subscription(body: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Primer nodo de webhookSubscriptions, o None si no hay suscripción."""
        edges = ((body.get("data") or {}).get("webhookSubscriptions") or {}).get("edges") or []
        if not edges:
            return None
        return edges[0].get("node") or None

    @staticmethod
    def _is_success(body: Dict[str, Any], name: str) -> bool:
        """La mutación confirma éxito solo si devuelve el webhookSubscription."""
        payload = (body.get("data") or {}).get(name) or {}
        return bool(payload.get("webhookSubscription"))
