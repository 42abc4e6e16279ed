"""
GraphQL client for the Shopify Admin API.

Sends raw GraphQL documents (Content-Type: application/graphql) to the
versioned Admin endpoint of a shop, authenticated with an access token.
"""

import logging
from typing import Callable, Optional

from shopify_webhooks.base_types import ShopifyHeader
from shopify_webhooks.clients.http_client import DataType, HttpResponse, ShopifyHttpClient
from shopify_webhooks.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

HttpClientFactory = Callable[[str], ShopifyHttpClient]


class GraphqlClient:
    """
    Admin GraphQL client for one shop and one access token.
    """

    def __init__(
        self,
        domain: str,
        access_token: str,
        settings: Optional[Settings] = None,
        http_client_factory: Optional[HttpClientFactory] = None,
    ):
        self.settings = settings or get_settings()
        self.access_token = access_token
        factory = http_client_factory or (lambda shop: ShopifyHttpClient(shop, settings=self.settings))
        self.http_client = factory(domain)

    async def query(self, document: str) -> HttpResponse:
        """
        Execute a GraphQL query or mutation.

        Args:
            document: GraphQL document, sent as the raw request body

        Returns:
            HttpResponse: Response with the untouched GraphQL body
        """
        return await self.http_client.request(
            "POST",
            self.settings.graphql_path,
            data=document,
            extra_headers={ShopifyHeader.ACCESS_TOKEN.value: self.access_token},
            data_type=DataType.GRAPHQL,
        )
