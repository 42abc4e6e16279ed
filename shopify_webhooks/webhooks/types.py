"""
Tipos compartidos por el registro de webhooks y el procesador de entregas.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Dict, Optional, Protocol, Union

from shopify_webhooks.base_types import ShopifyHeader


class DeliveryMethod(str, Enum):
    """Transporte por el que Shopify entrega los eventos."""

    HTTP = "http"
    EVENT_BRIDGE = "eventbridge"


class WebhookHandler(Protocol):
    """
    Handler registrado para un topic.

    Recibe (topic, shop_domain, body). Puede ser una corrutina o una
    función síncrona; en el primer caso el procesador la espera.
    """

    def __call__(self, topic: str, shop_domain: str, body: str) -> Optional[Awaitable[None]]:
        ...


@dataclass
class WebhookRegistryEntry:
    """Entrada del registro local, una por topic."""

    path: str
    topic: str
    webhook_handler: WebhookHandler


@dataclass
class RegisterOptions:
    """Parámetros de registro de un webhook para una tienda."""

    path: str
    topic: str
    access_token: str
    shop: str
    webhook_handler: WebhookHandler
    delivery_method: Union[DeliveryMethod, str] = DeliveryMethod.HTTP


@dataclass
class RegisterReturn:
    """Resultado de un registro: éxito y body crudo de la mutación."""

    success: bool
    result: Dict[str, Any] = field(default_factory=dict)


# === DESTINOS DE ENTREGA ===


@dataclass(frozen=True)
class HttpDeliveryTarget:
    """Entrega por callback HTTP."""

    callback_url: str

    @property
    def address(self) -> str:
        return self.callback_url


@dataclass(frozen=True)
class EventBridgeDeliveryTarget:
    """Entrega a un event source de Amazon EventBridge."""

    arn: str

    @property
    def address(self) -> str:
        return self.arn


DeliveryTarget = Union[HttpDeliveryTarget, EventBridgeDeliveryTarget]


# === OPERACIONES SOBRE LA SUSCRIPCIÓN REMOTA ===


@dataclass(frozen=True)
class CreateSubscription:
    """Crear una suscripción nueva, identificada por topic."""

    topic: str


@dataclass(frozen=True)
class UpdateSubscription:
    """Actualizar una suscripción existente, identificada por su id."""

    subscription_id: str


SubscriptionOperation = Union[CreateSubscription, UpdateSubscription]


@dataclass
class DeliveryContext:
    """Datos extraídos de una entrega entrante; se descarta tras el dispatch."""

    hmac: Optional[str]
    topic: Optional[str]
    domain: Optional[str]
    raw_body: bytes

    def missing_headers(self) -> list:
        """Headers requeridos ausentes o vacíos."""
        missing = []
        if not self.hmac:
            missing.append(ShopifyHeader.HMAC.value)
        if not self.topic:
            missing.append(ShopifyHeader.TOPIC.value)
        if not self.domain:
            missing.append(ShopifyHeader.DOMAIN.value)
        return missing

    @property
    def graphql_topic(self) -> str:
        """Topic del header en formato GraphQL (products/create -> PRODUCTS_CREATE)."""
        return (self.topic or "").upper().replace("/", "_")
