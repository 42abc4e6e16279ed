"""
Registro local de webhooks.

Mapa ordenado topic -> WebhookRegistryEntry compartido por el reconciliador
(que lo puebla) y el procesador de entregas (que solo lo lee).
"""

import logging
from typing import Dict, Iterator, List, Optional

from shopify_webhooks.webhooks.types import WebhookRegistryEntry

logger = logging.getLogger(__name__)


class WebhookRegistry:
    """
    Registro en memoria de handlers de webhooks.

    Invariante: como máximo una entrada por topic. Actualizar un topic
    existente reemplaza path y handler sin cambiar su posición.
    """

    def __init__(self):
        self._entries: Dict[str, WebhookRegistryEntry] = {}

    def upsert(self, entry: WebhookRegistryEntry) -> None:
        """
        Agrega o reemplaza la entrada de un topic.

        Args:
            entry: Entrada a registrar
        """
        existing = self._entries.get(entry.topic)
        if existing is not None:
            existing.path = entry.path
            existing.webhook_handler = entry.webhook_handler
            logger.debug(f"Updated webhook registry entry for {entry.topic} -> {entry.path}")
        else:
            self._entries[entry.topic] = entry
            logger.debug(f"Added webhook registry entry for {entry.topic} -> {entry.path}")

    def get(self, topic: str) -> Optional[WebhookRegistryEntry]:
        """Entrada registrada para un topic, o None."""
        return self._entries.get(topic)

    def is_webhook_path(self, path: str) -> bool:
        """True si algún topic entrega en ese path exacto."""
        return any(entry.path == path for entry in self._entries.values())

    def topics(self) -> List[str]:
        """Topics registrados en orden de inserción."""
        return list(self._entries.keys())

    def entries(self) -> List[WebhookRegistryEntry]:
        return list(self._entries.values())

    def clear(self) -> None:
        """Vacía el registro (teardown de la app o reset en tests)."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[WebhookRegistryEntry]:
        return iter(self.entries())

    def __contains__(self, topic: object) -> bool:
        return topic in self._entries

    def __repr__(self):
        return f"WebhookRegistry(topics={self.topics()})"
