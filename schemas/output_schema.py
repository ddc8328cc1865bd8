# -------------------------------------------------------------------
# schemas/output_schema.py
#
# WHAT THIS FILE IS FOR
# --------------------
# This module defines the **public response schemas** returned by
# POST / of the Shopify Customer Metrics Proxy.
#
# Exactly one of these is emitted per request:
#   - CustomerMetricsResponse (HTTP 200)
#   - ErrorResponse           (HTTP 400 / 401 / 500 / 502)
#
# NAMING CONVENTION
# -----------------
# Fields are snake_case in Python and camelCase on the wire
# (alias_generator=to_camel). Serialize with model_dump(by_alias=True).
#
# Any change here is a public contract change: the pixel pushes these
# keys straight into the analytics dataLayer.
# -------------------------------------------------------------------

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CustomerMetricsResponse(BaseModel):
    """
    Success envelope.

    lifetime_value is a string with exactly two fractional digits
    (e.g. "15.75", "0.00") so no float rounding happens downstream.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    success: Literal[True] = True
    customer_status: str
    order_count: int = Field(..., ge=0)
    lifetime_value: str = Field(..., pattern=r"^-?\d+\.\d{2}$")


class ErrorResponse(BaseModel):
    """Failure envelope. `error` is always a generic, caller-safe message."""

    model_config = {"extra": "forbid"}

    error: str
