"""
functions/utils/http_client.py

WHAT THIS FILE IS FOR
---------------------
This module provides a minimal, asynchronous HTTP client abstraction
used by the proxy layer to make outbound calls to the Shopify Admin API.

It exists to:
- Centralize basic HTTP call behavior (currently GET)
- Standardize timeout handling
- Avoid scattering raw `httpx.AsyncClient(...)` blocks across the codebase

The call is awaited, so a slow upstream suspends only the request that
issued it; other in-flight requests keep being served by the event loop.

WHAT THIS FILE IS NOT FOR
-------------------------
This module is NOT responsible for:
- Retry logic (the proxy makes exactly one attempt per request)
- Logging or structured tracing
- URL templating
- Response interpretation or error translation

Those responsibilities belong to OrderFetcher.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

import httpx

# Timeout can be:
# - single float -> applied to connect, read, write and pool
# - httpx.Timeout -> split behavior
TimeoutType = Union[float, httpx.Timeout]


class HttpClient:
    """
    Minimal asynchronous HTTP client wrapper over `httpx.AsyncClient`.

    It intentionally:
    - Does NOT add retries
    - Does NOT add logging
    - Does NOT interpret response payloads

    Raises httpx.HTTPError subclasses (timeout, connection, protocol)
    unchanged; the caller classifies them.
    """

    def __init__(self, timeout_seconds: TimeoutType = 10.0):
        self.timeout_seconds = timeout_seconds

    async def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout_seconds: Optional[TimeoutType] = None,
    ) -> httpx.Response:
        """
        Send a single GET request and return the response with its body read.

        Non-2xx responses are returned, not raised.
        """
        timeout = timeout_seconds if timeout_seconds is not None else self.timeout_seconds
        async with httpx.AsyncClient(timeout=timeout) as client:
            return await client.get(url, params=params, headers=headers or {})
