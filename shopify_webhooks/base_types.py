"""
Constantes compartidas por los clientes de la Admin API y los webhooks.
"""

from enum import Enum


class ShopifyHeader(str, Enum):
    """Headers que Shopify usa en la Admin API y en las entregas de webhooks."""

    ACCESS_TOKEN = "X-Shopify-Access-Token"
    HMAC = "X-Shopify-Hmac-Sha256"
    TOPIC = "X-Shopify-Topic"
    DOMAIN = "X-Shopify-Shop-Domain"
