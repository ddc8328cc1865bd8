# tests/test_order_aggregator.py
from __future__ import annotations

from decimal import Decimal, DecimalException

import pytest
from pydantic import ValidationError

from functions.proxy.order_aggregator import (
    AggregationResult,
    CustomerStatus,
    aggregate_orders,
    classify_customer,
    coerce_price,
)


@pytest.mark.parametrize(
    "count, expected",
    [
        (0, "New - No Orders"),
        (1, "New - First Order"),
        (2, "Returning Customer"),
        (50, "Returning Customer"),
    ],
)
def test_classify_customer_boundaries(count: int, expected: str) -> None:
    assert classify_customer(count).value == expected


def test_aggregate_two_orders_sums_exactly() -> None:
    out = aggregate_orders([{"total_price": "10.50"}, {"total_price": "5.25"}])

    assert out.order_count == 2
    assert out.lifetime_value == Decimal("15.75")
    assert out.formatted_lifetime_value == "15.75"
    assert out.customer_status is CustomerStatus.RETURNING


def test_aggregate_empty_list_is_zero() -> None:
    out = aggregate_orders([])

    assert out.order_count == 0
    assert out.formatted_lifetime_value == "0.00"
    assert out.customer_status is CustomerStatus.NO_ORDERS


@pytest.mark.parametrize("orders", [None, {"total_price": "5.00"}, "orders", 3])
def test_aggregate_non_list_is_treated_as_empty(orders) -> None:
    out = aggregate_orders(orders)

    assert out.order_count == 0
    assert out.lifetime_value == Decimal("0")


def test_aggregate_single_order_is_first_order() -> None:
    out = aggregate_orders([{"total_price": "99.99", "id": 1}])

    assert out.order_count == 1
    assert out.formatted_lifetime_value == "99.99"
    assert out.customer_status is CustomerStatus.FIRST_ORDER


def test_aggregate_bad_records_count_but_contribute_zero() -> None:
    orders = [
        {"total_price": "10.00"},
        {"total_price": "abc"},
        {"total_price": None},
        {},
        "not-an-order",
        {"total_price": "NaN"},
    ]
    out = aggregate_orders(orders)

    assert out.order_count == 6
    assert out.formatted_lifetime_value == "10.00"
    assert out.customer_status is CustomerStatus.RETURNING


def test_aggregate_avoids_float_drift() -> None:
    # 0.1 + 0.2 in binary floating point is 0.30000000000000004
    out = aggregate_orders([{"total_price": "0.10"}, {"total_price": "0.20"}] * 10)

    assert out.lifetime_value == Decimal("3.00")
    assert out.formatted_lifetime_value == "3.00"


def test_aggregate_negative_price_is_not_clamped() -> None:
    out = aggregate_orders([{"total_price": "10.00"}, {"total_price": "-2.50"}])

    assert out.formatted_lifetime_value == "7.50"


def test_formatted_lifetime_value_rounds_half_up() -> None:
    out = aggregate_orders([{"total_price": "1.005"}])

    assert out.formatted_lifetime_value == "1.01"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("12.34", Decimal("12.34")),
        (" 7 ", Decimal("7")),
        (3, Decimal("3")),
        (10.1, Decimal("10.1")),
        (None, Decimal("0")),
        (True, Decimal("0")),
        ("", Decimal("0")),
        ("Infinity", Decimal("0")),
        ({"amount": "1"}, Decimal("0")),
    ],
)
def test_coerce_price(value, expected: Decimal) -> None:
    assert coerce_price(value) == expected


def test_aggregation_result_is_immutable() -> None:
    out = aggregate_orders([])

    with pytest.raises(ValidationError):
        out.order_count = 5  # type: ignore[misc]

    assert isinstance(out, AggregationResult)


def test_aggregate_large_price_is_rendered_exactly() -> None:
    out = aggregate_orders([{"total_price": "1e30"}])

    assert out.formatted_lifetime_value == "1000000000000000000000000000000.00"


def test_aggregate_large_sum_is_not_rounded() -> None:
    out = aggregate_orders([{"total_price": "1e40"}, {"total_price": "0.01"}])

    assert out.lifetime_value == Decimal("10000000000000000000000000000000000000000.01")
    assert out.formatted_lifetime_value == "1" + "0" * 40 + ".01"


@pytest.mark.parametrize(
    "orders",
    [
        [{"total_price": "1e5000"}],
        [{"total_price": "1e5000"}, {"total_price": "0.01"}],
    ],
)
def test_aggregate_price_beyond_exact_precision_raises(orders) -> None:
    with pytest.raises(DecimalException):
        aggregate_orders(orders)
