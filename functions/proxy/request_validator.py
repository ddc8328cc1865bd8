"""
functions/proxy/request_validator.py

WHAT THIS FILE IS FOR
---------------------
First stage of the POST / pipeline: turn the raw request body into a
validated customer id, or raise a classified ProxyError.

RULES (first match wins)
------------------------
1) Body is not a JSON object              -> MalformedRequestError (400)
2) Shared secret not configured           -> ConfigurationError    (500)
3) apiKey missing or not equal to secret  -> UnauthorizedError     (401)
4) customerId missing or empty            -> BadRequestError       (400)

The body is decoded regardless of Content-Type: the pixel may post
`text/plain` to skip the browser pre-flight.

LOGGING
-------
Each rejection emits one warning/error event describing the failure.
Neither the configured secret nor the key the caller submitted is ever
logged; only presence flags are.
"""

from __future__ import annotations

import hmac
import json
from typing import Any

import structlog
from pydantic import ValidationError

from functions.proxy.errors import (
    BadRequestError,
    ConfigurationError,
    MalformedRequestError,
    UnauthorizedError,
)
from functions.utils.settings import Settings
from schemas.input_schema import CustomerMetricsRequest

logger = structlog.get_logger(__name__)


def parse_request_body(raw: bytes) -> CustomerMetricsRequest:
    """Decode a JSON object body into CustomerMetricsRequest."""
    # ValueError covers JSONDecodeError, UnicodeDecodeError and the int digit limit
    try:
        data = json.loads(raw.decode("utf-8"))
    except ValueError as exc:
        logger.warning("request_body_invalid_json", body_length=len(raw), error=str(exc))
        raise MalformedRequestError(f"Request body is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        logger.warning("request_body_not_object", type=type(data).__name__)
        raise MalformedRequestError(f"Request body must be a JSON object, got {type(data).__name__}")

    try:
        return CustomerMetricsRequest.model_validate(data)
    except ValidationError as exc:
        logger.warning("request_body_schema_error", error_count=exc.error_count())
        raise MalformedRequestError("Request body failed schema validation") from exc


def _normalize_customer_id(value: Any) -> str | None:
    # bool is an int subclass; true/false is never a customer id
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        value = value.strip()
        # "." and ".." are dot-segments: httpx would collapse them and move the path
        if not value.strip("."):
            return None
        return value
    return None


def validate_request(request: CustomerMetricsRequest, settings: Settings) -> str:
    """
    Apply the credential and customer-id checks in order.

    Returns the customer id as a non-empty string.
    """
    expected = settings.secret_api_key.get_secret_value() if settings.secret_api_key else ""
    if not expected:
        logger.error("config_error_secret_api_key_missing")
        raise ConfigurationError("SECRET_API_KEY is not set", public_message="Server misconfiguration (API key).")

    api_key = request.api_key
    if not isinstance(api_key, str) or not api_key:
        logger.warning("request_unauthorized", api_key_present=False)
        raise UnauthorizedError("apiKey missing")

    if not hmac.compare_digest(api_key.encode("utf-8"), expected.encode("utf-8")):
        logger.warning("request_unauthorized", api_key_present=True, reason="mismatch")
        raise UnauthorizedError("apiKey mismatch")

    customer_id = _normalize_customer_id(request.customer_id)
    if customer_id is None:
        logger.warning(
            "request_missing_customer_id",
            customer_id_type=type(request.customer_id).__name__,
        )
        raise BadRequestError("customerId missing or empty")

    return customer_id
