"""
functions/proxy/order_aggregator.py

WHAT THIS FILE IS FOR
---------------------
Pure reduction of a Shopify order list into the three customer metrics:

- order_count     number of entries
- lifetime_value  exact Decimal sum of each entry's `total_price`
- customer_status classification by count alone:
      0   -> "New - No Orders"
      1   -> "New - First Order"
      >=2 -> "Returning Customer"

DEFENSIVE COERCION
------------------
Upstream data is not trusted to be well-formed, but one bad record
must not fail the whole request:

- `orders` missing or not a list  -> treated as []
- entry that is not an object     -> counted, contributes 0
- `total_price` missing / null / non-numeric / NaN / Infinity -> 0

Negative prices are summed as-is (no clamping).

This module MUST NOT perform I/O or logging.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Context, Decimal, Inexact, InvalidOperation, localcontext
from enum import Enum
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field

PRICE_FIELD = "total_price"

_ZERO = Decimal("0")
_CENTS = Decimal("0.01")

# Sums stay exact up to this many significant digits; beyond that the
# Inexact trap raises instead of rounding silently.
MONEY_PRECISION = 1000
_SUM_CONTEXT = Context(prec=MONEY_PRECISION, traps=[InvalidOperation, Inexact])
_FORMAT_CONTEXT = Context(prec=MONEY_PRECISION, rounding=ROUND_HALF_UP, traps=[InvalidOperation])


class CustomerStatus(str, Enum):
    NO_ORDERS = "New - No Orders"
    FIRST_ORDER = "New - First Order"
    RETURNING = "Returning Customer"


class AggregationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_count: int = Field(..., ge=0)
    lifetime_value: Decimal
    customer_status: CustomerStatus

    @property
    def formatted_lifetime_value(self) -> str:
        """Lifetime value with exactly two fractional digits, e.g. "15.75"."""
        return to_cents(self.lifetime_value)


def to_cents(value: Decimal) -> str:
    """
    Render value with exactly two fractional digits (ROUND_HALF_UP).

    Raises decimal.InvalidOperation when the result needs more than
    MONEY_PRECISION digits.
    """
    with localcontext(_FORMAT_CONTEXT):
        return str(value.quantize(_CENTS))


def classify_customer(order_count: int) -> CustomerStatus:
    if order_count <= 0:
        return CustomerStatus.NO_ORDERS
    if order_count == 1:
        return CustomerStatus.FIRST_ORDER
    return CustomerStatus.RETURNING


def coerce_price(value: Any) -> Decimal:
    """
    Convert an upstream price to Decimal; anything unusable becomes 0.

    Floats go through str() so 10.1 becomes Decimal("10.1"), not its
    binary expansion.
    """
    if value is None or isinstance(value, bool):
        return _ZERO
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return _ZERO

    try:
        price = Decimal(value.strip())
    except InvalidOperation:
        return _ZERO

    if not price.is_finite():
        return _ZERO
    return price


def aggregate_orders(orders: Any) -> AggregationResult:
    """
    Reduce an order list to count, exact total and status.

    Raises decimal.DecimalException when a price is too large to sum or
    render exactly; the caller classifies that as a malformed upstream.
    """
    entries: List[Any] = orders if isinstance(orders, list) else []

    total = _ZERO
    with localcontext(_SUM_CONTEXT):
        for entry in entries:
            if isinstance(entry, dict):
                total += coerce_price(entry.get(PRICE_FIELD))

    # fail here, not later in the response builder
    to_cents(total)

    return AggregationResult(
        order_count=len(entries),
        lifetime_value=total,
        customer_status=classify_customer(len(entries)),
    )
