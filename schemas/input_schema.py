# -------------------------------------------------------------------
# schemas/input_schema.py
#
# WHAT THIS FILE IS FOR
# --------------------
# This module defines the **public request schema** for the
# Shopify Customer Metrics Proxy (POST /).
#
# KEY DESIGN DECISION
# -------------------
# Both fields are typed loosely (Any) and optional ON PURPOSE.
#
# The pipeline must classify failures in a fixed order:
#   1) malformed body        -> 400
#   2) secret not configured -> 500
#   3) bad / missing apiKey  -> 401
#   4) missing customerId    -> 400
#
# If pydantic rejected a missing apiKey or a numeric customerId here,
# a caller with a wrong key would see a 400 instead of a 401. So this
# schema only normalizes naming; presence and value checks live in
# functions/proxy/request_validator.py.
#
# The schema supports both camelCase and snake_case JSON field names:
#   - camelCase:  apiKey, customerId   (what the pixel sends)
#   - snake_case: api_key, customer_id
#
# Unknown fields are ignored.
# -------------------------------------------------------------------

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class CustomerMetricsRequest(BaseModel):
    """
    Request payload sent by the storefront pixel.

    Supports both snake_case and camelCase JSON field names.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
        json_schema_extra={
            "example": {
                "apiKey": "<shared secret>",
                "customerId": "7391827361",
            }
        },
    )

    api_key: Optional[Any] = Field(
        None,
        alias="apiKey",
        description="Shared secret agreed between the pixel and this service",
    )

    customer_id: Optional[Any] = Field(
        None,
        alias="customerId",
        description="Shopify customer ID (numeric part of gid://shopify/Customer/<id>)",
    )
