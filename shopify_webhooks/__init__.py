"""
Shopify Webhooks.

Registro de suscripciones de webhooks en la Admin API de Shopify y
verificación/despacho de las entregas entrantes.
"""

from shopify_webhooks.webhooks import (
    DeliveryMethod,
    RegisterOptions,
    RegisterReturn,
    WebhookProcessor,
    WebhookReconciler,
    WebhookRegistry,
    WebhookRegistryEntry,
)

__version__ = "0.1.0"

__all__ = [
    "DeliveryMethod",
    "RegisterOptions",
    "RegisterReturn",
    "WebhookProcessor",
    "WebhookReconciler",
    "WebhookRegistry",
    "WebhookRegistryEntry",
    "__version__",
]
