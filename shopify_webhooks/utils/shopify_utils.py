"""
Utilidades compartidas para Shopify.

Este módulo contiene funciones utilitarias usadas tanto por el registro
de webhooks como por el procesador de entregas.
"""

import base64
import hashlib
import hmac
import re

from shopify_webhooks.utils.error_handler import InvalidShopError

_SHOP_DOMAIN_PATTERN = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9\-]*\.(myshopify\.com|myshopify\.io)$")


def sanitize_shop(shop: str) -> str:
    """
    Valida y normaliza un dominio de tienda.

    Args:
        shop: Dominio recibido (ej: shop1.myshopify.com)

    Returns:
        str: Dominio en minúsculas, sin esquema

    Raises:
        InvalidShopError: Si el dominio no pertenece a Shopify

    Examples:
        >>> sanitize_shop("https://Shop1.myshopify.com/")
        'shop1.myshopify.com'
    """
    if not shop:
        raise InvalidShopError(shop)

    normalized = shop.strip().lower()
    normalized = re.sub(r"^https?://", "", normalized).rstrip("/")

    if not _SHOP_DOMAIN_PATTERN.match(normalized):
        raise InvalidShopError(shop)

    return normalized


def compute_webhook_hmac(secret: str, body: bytes) -> str:
    """
    Calcula la firma que Shopify envía en X-Shopify-Hmac-Sha256.

    Args:
        secret: API secret key de la app
        body: Body crudo del request, sin re-serializar

    Returns:
        str: HMAC-SHA256 codificado en base64
    """
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def safe_compare(expected: str, received: str) -> bool:
    """Comparación en tiempo constante de dos firmas."""
    return hmac.compare_digest(expected.encode("utf-8"), received.encode("utf-8"))
