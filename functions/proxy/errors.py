"""
functions/proxy/errors.py

WHAT THIS FILE IS FOR
---------------------
Error classification for the customer metrics pipeline.

Every failure the pipeline can produce is one of the classes below.
Each class fixes:
- the HTTP status returned to the caller
- a generic, caller-safe `public_message`

Server-side detail (upstream status, parse errors, which setting is
missing) goes into the exception's own message and the logs. It is
never copied into `public_message`.

    Condition                              Class                      Status
    -------------------------------------  -------------------------  ------
    body is not a JSON object              MalformedRequestError      400
    shared secret / Shopify creds missing  ConfigurationError         500
    apiKey missing or mismatched           UnauthorizedError          401
    customerId missing or empty            BadRequestError            400
    upstream non-2xx / network failure     UpstreamUnavailableError   502
    upstream body unparsable               UpstreamMalformedError     502
    anything else                          InternalProxyError         500
"""

from __future__ import annotations

from typing import Optional


class ProxyError(Exception):
    """Base class for classified pipeline failures."""

    status_code: int = 500
    public_message: str = "Unexpected internal server error."

    def __init__(self, detail: Optional[str] = None, *, public_message: Optional[str] = None):
        super().__init__(detail or self.public_message)
        if public_message is not None:
            self.public_message = public_message


class MalformedRequestError(ProxyError):
    status_code = 400
    public_message = "Invalid JSON payload."


class ConfigurationError(ProxyError):
    """Operator problem, not a caller problem."""

    status_code = 500
    public_message = "Internal server configuration error."


class UnauthorizedError(ProxyError):
    status_code = 401
    public_message = "Unauthorized access."


class BadRequestError(ProxyError):
    status_code = 400
    public_message = "Missing customer ID."


class UpstreamUnavailableError(ProxyError):
    status_code = 502
    public_message = "Unable to retrieve customer data from Shopify."


class UpstreamMalformedError(ProxyError):
    status_code = 502
    public_message = "Invalid response from Shopify."


class InternalProxyError(ProxyError):
    status_code = 500
    public_message = "Unexpected internal server error."
