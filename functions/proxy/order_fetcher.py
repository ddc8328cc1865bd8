"""
functions/proxy/order_fetcher.py

WHAT THIS FILE IS FOR
---------------------
This module is the Shopify Admin API access boundary for the proxy.
It fetches the order list of one customer:

    GET https://{shop_name}/admin/api/{api_version}/customers/{customer_id}/orders.json?status=any
    X-Shopify-Access-Token: <token>
    Accept: application/json

It is responsible for:
- Checking that the upstream credential and shop name are configured
- Building the URL (customer id percent-encoded as one path segment)
- Sending the token as a header, never in the URL
- Classifying every failure into a ProxyError
- Logging upstream status / body snippets server-side

FAILURE MAPPING
---------------
- token or shop name missing         -> ConfigurationError (500)
- timeout / connection / protocol    -> UpstreamUnavailableError (502)
- non-2xx status                     -> UpstreamUnavailableError (502)
- body not JSON, or not a JSON object -> UpstreamMalformedError (502)

No retries: one attempt per incoming request.

RESPONSE SHAPE
--------------
fetch_orders() returns the raw value under "orders". It may be missing
or not a list; the aggregator treats that as an empty collection.
"""

from __future__ import annotations

import json
from typing import Any, Optional
from urllib.parse import quote

import httpx
import structlog

from functions.proxy.errors import ConfigurationError, UpstreamMalformedError, UpstreamUnavailableError
from functions.utils.http_client import HttpClient
from functions.utils.settings import Settings

logger = structlog.get_logger(__name__)

ACCESS_TOKEN_HEADER = "X-Shopify-Access-Token"
ORDERS_PATH_TEMPLATE = "/admin/api/{api_version}/customers/{customer_id}/orders.json"
ORDERS_QUERY = {"status": "any"}

_SNIPPET_LIMIT = 500


class OrderFetcher:
    """
    Thin async client around the Shopify customer orders endpoint.
    """

    def __init__(self, settings: Settings, http: Optional[HttpClient] = None) -> None:
        self.settings = settings
        self.http = http or HttpClient(timeout_seconds=settings.upstream_timeout_seconds)

    def build_orders_url(self, customer_id: str) -> str:
        """
        Build the orders URL without the query string.

        Every reserved character in customer_id is escaped ('/' included).
        Dot-only ids ("." and "..") are rejected earlier by the request
        validator, so the id always stays one path segment.
        """
        if not self.settings.shop_name:
            raise ConfigurationError("SHOP_NAME is not set")

        path = ORDERS_PATH_TEMPLATE.format(
            api_version=quote(self.settings.shopify_api_version, safe=""),
            customer_id=quote(customer_id, safe=""),
        )
        return f"https://{self.settings.shop_name}{path}"

    async def fetch_orders(self, customer_id: str) -> Any:
        token = self.settings.shopify_access_token.get_secret_value() if self.settings.shopify_access_token else ""
        if not token or not self.settings.shop_name:
            logger.error(
                "config_error_shopify_credentials_missing",
                access_token_configured=bool(token),
                shop_name_configured=bool(self.settings.shop_name),
            )
            raise ConfigurationError("Missing Shopify credentials")

        url = self.build_orders_url(customer_id)
        headers = {
            ACCESS_TOKEN_HEADER: token,
            "Accept": "application/json",
        }
        ctx = {"customer_id": customer_id, "url": url}

        logger.info("upstream_request", **ctx)

        # ------------------------------------------------------------------
        # HTTP call
        # ------------------------------------------------------------------
        try:
            resp = await self.http.get(url, params=ORDERS_QUERY, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("upstream_request_failed", error_type=type(exc).__name__, error=str(exc), **ctx)
            raise UpstreamUnavailableError(f"Shopify request failed: {type(exc).__name__}") from exc

        # ------------------------------------------------------------------
        # Response handling
        # ------------------------------------------------------------------
        if not resp.is_success:
            logger.error(
                "upstream_http_error",
                status_code=resp.status_code,
                response_snippet=(resp.text or "")[:_SNIPPET_LIMIT],
                **ctx,
            )
            raise UpstreamUnavailableError(f"Shopify returned status={resp.status_code}")

        # ValueError covers JSONDecodeError and the int digit limit
        try:
            data = json.loads(resp.text)
        except ValueError as exc:
            logger.error(
                "upstream_invalid_json",
                status_code=resp.status_code,
                error=str(exc),
                response_snippet=(resp.text or "")[:_SNIPPET_LIMIT],
                **ctx,
            )
            raise UpstreamMalformedError("Shopify returned non-JSON body") from exc

        # Stricter than reading `orders` off anything: a non-object top level is malformed
        if not isinstance(data, dict):
            logger.error("upstream_body_not_object", type=type(data).__name__, **ctx)
            raise UpstreamMalformedError(f"Shopify returned JSON {type(data).__name__}, expected object")

        orders = data.get("orders")
        logger.info(
            "upstream_success",
            status_code=resp.status_code,
            orders_is_list=isinstance(orders, list),
            **ctx,
        )
        return orders
