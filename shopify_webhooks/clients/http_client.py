"""
HTTP client for the Shopify Admin API.

Thin aiohttp wrapper used by the webhook registry to talk to a shop.
Retries and throttling back-off are left to the caller: every non-2xx
response is surfaced as a ShopifyAPIException.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

import aiohttp
from aiohttp import ClientTimeout

from shopify_webhooks.core.config import Settings, get_settings
from shopify_webhooks.utils.error_handler import ShopifyAPIException
from shopify_webhooks.utils.shopify_utils import sanitize_shop

logger = logging.getLogger(__name__)


class DataType(str, Enum):
    """Content types accepted by the Admin API."""

    JSON = "application/json"
    GRAPHQL = "application/graphql"


def parse_retry_after(value: Optional[str], default: float = 1.0) -> float:
    """
    Seconds to wait according to a Retry-After header.

    Accepts delta-seconds or an HTTP-date; a missing or unreadable value
    falls back to default.
    """
    if not value:
        return default
    try:
        return max(float(value), 0.0)
    except ValueError:
        pass
    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return default
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=timezone.utc)
    return max((retry_at - datetime.now(timezone.utc)).total_seconds(), 0.0)


@dataclass
class HttpResponse:
    """Parsed response of an Admin API call."""

    status: int
    body: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=dict)


class ShopifyHttpClient:
    """
    HTTP client bound to a single shop domain.

    Each request opens its own aiohttp session, the same way the
    registration scripts do, since webhook registration is a handful
    of calls at startup.
    """

    def __init__(self, domain: str, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.domain = sanitize_shop(domain)
        self.timeout = ClientTimeout(total=self.settings.SHOPIFY_REQUEST_TIMEOUT, connect=10)

    async def request(
        self,
        method: str,
        path: str,
        data: Union[str, Dict[str, Any], None] = None,
        extra_headers: Optional[Dict[str, str]] = None,
        data_type: DataType = DataType.JSON,
    ) -> HttpResponse:
        """
        Send a request to the shop.

        Args:
            method: HTTP method
            path: Absolute path on the shop domain
            data: Raw string body, or a dict sent as JSON
            extra_headers: Headers added on top of the defaults
            data_type: Content-Type of the body

        Returns:
            HttpResponse: status, decoded JSON body and headers

        Raises:
            ShopifyAPIException: On network errors and non-2xx responses
        """
        url = f"https://{self.domain}{path}"
        headers = {
            "User-Agent": f"{self.settings.APP_NAME}/{self.settings.APP_VERSION}",
            "Content-Type": data_type.value,
            **(extra_headers or {}),
        }

        body: Optional[str] = None
        if isinstance(data, dict):
            body = json.dumps(data)
        elif data is not None:
            body = data

        logger.debug(f"{method} {url}")

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.request(method, url, data=body, headers=headers) as response:
                    response_headers = dict(response.headers)
                    text = await response.text()

                    if response.status == 429:
                        retry_after = parse_retry_after(response.headers.get("Retry-After"))
                        raise ShopifyAPIException(
                            f"Shopify is throttling requests, retry after {retry_after}s",
                            api_response_code=429,
                            endpoint=path,
                            rate_limited=True,
                            retry_after=retry_after,
                        )

                    if not 200 <= response.status < 300:
                        raise ShopifyAPIException(
                            f"HTTP {response.status} from {self.domain}{path}: {text[:500]}",
                            api_response_code=response.status,
                            endpoint=path,
                        )

                    try:
                        payload = json.loads(text) if text else {}
                    except json.JSONDecodeError as e:
                        raise ShopifyAPIException(
                            f"Invalid JSON response from {self.domain}{path}",
                            api_response_code=response.status,
                            endpoint=path,
                        ) from e

                    return HttpResponse(status=response.status, body=payload, headers=response_headers)

        except aiohttp.ClientError as e:
            raise ShopifyAPIException(f"Network error: {str(e)}", endpoint=path) from e

    def __repr__(self):
        return f"ShopifyHttpClient(domain='{self.domain}')"
