"""
api.py

WHAT THIS FILE IS FOR
---------------------
This module defines the FastAPI application entrypoint for the
Shopify Customer Metrics Proxy.

A Shopify Custom Pixel runs in a sandboxed iframe and cannot hold the
private Admin API token. It POSTs {apiKey, customerId} here; this
service checks the shared secret, reads the customer's orders from the
Shopify Admin API and returns:

    {success, customerStatus, orderCount, lifetimeValue}

It is responsible for:
- Creating the FastAPI app instance (create_app)
- Registering middleware for:
    - CORS headers on every response, and pre-flight (OPTIONS -> 204)
      answered before routing, body parsing or authentication
    - Correlation ID propagation (X-Correlation-Id), bound into structlog
- Registering the ProxyError exception handler ({error} envelope)
- Exposing HTTP endpoints:
    - POST /                 customer metrics
    - GET  /health, /healthz liveness probe

ERROR CONTRACT
--------------
Every failure is converted into {"error": "<generic message>"} with the
status chosen by its ProxyError class. Unexpected exceptions are logged
with their stack and returned as 500; nothing reaches the transport as
an unhandled fault.

DESIGN INTENT
-------------
This file contains ONLY the HTTP layer:
- routing
- middleware
- exception handling

Validation, upstream calls and aggregation live in functions/proxy/*.
"""

from __future__ import annotations

import time
import uuid
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import Response

from functions.proxy.customer_metrics_service import CustomerMetricsService
from functions.proxy.errors import InternalProxyError, ProxyError
from functions.proxy.response_builder import CORS_HEADERS, build_error, build_preflight, build_success
from functions.utils.logging_config import configure_logging
from functions.utils.settings import Settings, get_settings

logger = structlog.get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-Id"


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------
def _get_or_create_correlation_id(request: Request) -> str:
    incoming = request.headers.get(CORRELATION_HEADER)
    return incoming.strip() if incoming and incoming.strip() else f"corr_{uuid.uuid4().hex}"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Shopify Customer Metrics Proxy",
        version="1.0.0",
        description="Server-side proxy that turns a customer's Shopify order history into pixel-ready metrics.",
    )
    app.state.settings = settings
    app.state.service = CustomerMetricsService(settings)

    # ---------------------------------------------------------------
    # Middleware (last registered runs first)
    # ---------------------------------------------------------------
    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next):
        correlation_id = _get_or_create_correlation_id(request)
        request.state.correlation_id = correlation_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id,
            method=request.method,
            path=request.url.path,
        )
        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response

    @app.middleware("http")
    async def cors_middleware(request: Request, call_next):
        # Pre-flight never reaches routing, parsing or auth
        if request.method == "OPTIONS":
            return build_preflight()

        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    # ---------------------------------------------------------------
    # Exception handlers
    # ---------------------------------------------------------------
    @app.exception_handler(ProxyError)
    async def proxy_error_handler(request: Request, exc: ProxyError):
        logger.info(
            "request_rejected",
            error_class=type(exc).__name__,
            status_code=exc.status_code,
            detail=str(exc),
        )
        return build_error(exc)

    # ---------------------------------------------------------------
    # Endpoints
    # ---------------------------------------------------------------
    @app.get("/healthz")
    @app.get("/health")
    async def health():
        return {
            "ok": True,
            "service": settings.service_name,
            "ts": int(time.time() * 1000),
        }

    @app.post("/")
    async def customer_metrics(request: Request) -> Response:
        service: CustomerMetricsService = request.app.state.service

        try:
            raw_body = await request.body()
            result = await service.get_customer_metrics(raw_body)
            return build_success(result)
        except ProxyError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("customer_metrics_unexpected_error", error=str(exc))
            raise InternalProxyError(f"Unexpected error: {type(exc).__name__}") from exc

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = app.state.settings
    uvicorn.run(app, host=_settings.host, port=_settings.port)
