#!/usr/bin/env python3
"""
Script para registrar webhooks de Shopify desde la línea de comandos.

Crea o actualiza la suscripción de cada topic indicado para que Shopify
entregue los eventos en HOST_NAME + path.

Uso:
    python configure_webhooks.py --shop tienda.myshopify.com --token shpat_xxx \\
        --topic PRODUCTS_CREATE --topic ORDERS_CREATE --path /webhooks
"""

import argparse
import asyncio
import logging
import sys
from typing import List

from shopify_webhooks.core.config import get_settings
from shopify_webhooks.core.logging_config import setup_logging
from shopify_webhooks.utils.error_handler import AppException
from shopify_webhooks.webhooks import (
    DeliveryMethod,
    RegisterOptions,
    WebhookReconciler,
    WebhookRegistry,
)

logger = logging.getLogger("configure_webhooks")


async def log_delivery(topic: str, shop_domain: str, body: str) -> None:
    """Handler local del script: solo deja constancia de la entrega."""
    logger.info(f"Webhook {topic} from {shop_domain} ({len(body)} bytes)")


def parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Registra webhooks en una tienda Shopify")
    parser.add_argument("--shop", required=True, help="Dominio de la tienda (ej: tienda.myshopify.com)")
    parser.add_argument("--token", required=True, help="Access token de la tienda")
    parser.add_argument("--topic", action="append", required=True, help="Topic GraphQL (repetible)")
    parser.add_argument("--path", default="/webhooks", help="Path local que recibe las entregas")
    parser.add_argument(
        "--delivery-method",
        default=DeliveryMethod.HTTP.value,
        choices=[method.value for method in DeliveryMethod],
        help="Método de entrega",
    )
    return parser.parse_args(argv)


async def main(argv: List[str]) -> int:
    """
    Función principal para configurar webhooks.

    Returns:
        int: Código de salida (0 si todos los registros tuvieron éxito)
    """
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings)

    reconciler = WebhookReconciler(WebhookRegistry(), settings=settings)
    target = reconciler.build_delivery_target(args.path, DeliveryMethod(args.delivery_method))

    print(f"🔧 Registrando {len(args.topic)} webhook(s) en {args.shop}...")
    failed = 0

    for topic in args.topic:
        try:
            result = await reconciler.register(
                RegisterOptions(
                    path=args.path,
                    topic=topic,
                    access_token=args.token,
                    shop=args.shop,
                    webhook_handler=log_delivery,
                    delivery_method=args.delivery_method,
                )
            )
        except AppException as e:
            print(f"❌ Error registrando {topic}: {e}")
            failed += 1
            continue

        if result.success:
            print(f"✅ {topic} → {target.address}")
        else:
            print(f"❌ Shopify no confirmó la suscripción de {topic}: {result.result}")
            failed += 1

    print(f"\n✨ Configuración completada: {len(args.topic) - failed} ok, {failed} con errores")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1:])))
