"""
functions/proxy/response_builder.py

Maps an already-classified outcome to the wire:

- AggregationResult -> 200 {success, customerStatus, orderCount, lifetimeValue}
- ProxyError        -> error.status_code {error: error.public_message}
- pre-flight        -> 204, empty body

Every response carries CORS_HEADERS so the pixel (sandboxed iframe,
`Origin: null`) can read success and error bodies alike.
"""

from __future__ import annotations

from typing import Dict

from fastapi.responses import JSONResponse, Response

from functions.proxy.errors import ProxyError
from functions.proxy.order_aggregator import AggregationResult
from schemas.output_schema import CustomerMetricsResponse, ErrorResponse

PREFLIGHT_MAX_AGE_SECONDS = 600

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Vary": "Origin",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Max-Age": str(PREFLIGHT_MAX_AGE_SECONDS),
}


def build_success(result: AggregationResult) -> JSONResponse:
    payload = CustomerMetricsResponse(
        customer_status=result.customer_status.value,
        order_count=result.order_count,
        lifetime_value=result.formatted_lifetime_value,
    )
    return JSONResponse(
        status_code=200,
        content=payload.model_dump(by_alias=True),
        headers=dict(CORS_HEADERS),
    )


def build_error(error: ProxyError) -> JSONResponse:
    payload = ErrorResponse(error=error.public_message)
    return JSONResponse(
        status_code=error.status_code,
        content=payload.model_dump(),
        headers=dict(CORS_HEADERS),
    )


def build_preflight() -> Response:
    return Response(status_code=204, headers=dict(CORS_HEADERS))
