"""
Shopify Admin API clients used by the webhook registry.
"""

from .graphql_client import GraphqlClient
from .http_client import DataType, HttpResponse, ShopifyHttpClient

__all__ = [
    "DataType",
    "GraphqlClient",
    "HttpResponse",
    "ShopifyHttpClient",
]
