"""
functions/proxy/customer_metrics_service.py

WHAT THIS FILE IS FOR
---------------------
This module runs the POST / pipeline end to end:

    raw body
      -> parse_request_body()  / validate_request()   (request_validator)
      -> OrderFetcher.fetch_orders()                  (Shopify Admin API)
      -> aggregate_orders()                           (order_aggregator)
      -> AggregationResult

Each stage either returns its value or raises a ProxyError; the first
failure ends the pipeline. A price too large to sum exactly is treated
as a malformed upstream response. Turning results and errors into HTTP
responses is api.py's job (via response_builder).

Settings are injected at construction time. Nothing here reads the
environment, so tests can build a service with any configuration.
"""

from __future__ import annotations

from decimal import DecimalException
from typing import Optional

import structlog

from functions.proxy.errors import UpstreamMalformedError
from functions.proxy.order_aggregator import AggregationResult, aggregate_orders
from functions.proxy.order_fetcher import OrderFetcher
from functions.proxy.request_validator import parse_request_body, validate_request
from functions.utils.settings import Settings

logger = structlog.get_logger(__name__)


class CustomerMetricsService:
    def __init__(self, settings: Settings, fetcher: Optional[OrderFetcher] = None) -> None:
        self.settings = settings
        self.fetcher = fetcher or OrderFetcher(settings)

    async def get_customer_metrics(self, raw_body: bytes) -> AggregationResult:
        request = parse_request_body(raw_body)
        customer_id = validate_request(request, self.settings)

        orders = await self.fetcher.fetch_orders(customer_id)
        try:
            result = aggregate_orders(orders)
        except DecimalException as exc:
            logger.error(
                "upstream_price_out_of_range",
                customer_id=customer_id,
                error_type=type(exc).__name__,
            )
            raise UpstreamMalformedError("Shopify order totals cannot be summed exactly") from exc

        logger.info(
            "customer_metrics_computed",
            customer_id=customer_id,
            order_count=result.order_count,
            customer_status=result.customer_status.value,
        )
        return result
