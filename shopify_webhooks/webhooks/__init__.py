"""
Registro de webhooks de Shopify: reconciliación de suscripciones y
procesamiento de entregas entrantes.
"""

from .processor import WebhookProcessor
from .reconciler import WebhookReconciler
from .registry import WebhookRegistry
from .types import (
    DeliveryMethod,
    RegisterOptions,
    RegisterReturn,
    WebhookHandler,
    WebhookRegistryEntry,
)

__all__ = [
    "DeliveryMethod",
    "RegisterOptions",
    "RegisterReturn",
    "WebhookHandler",
    "WebhookProcessor",
    "WebhookReconciler",
    "WebhookRegistry",
    "WebhookRegistryEntry",
]
