from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from core.pricing import (
    LatestBatchPriceResolver,
    coerce_price,
    resolve_latest_unit_prices,
    to_instant,
    validate_strategy,
)
from schemas.stock import StockEntry, Unit


def entry(unit_id, price, at, batch_id=None):
    return StockEntry(unit_id=unit_id, price_per_quantity=price, stock_batch_created_at=at, stock_batch_id=batch_id)


def as_map(prices):
    return [(p.unit_id, p.price_per_quantity) for p in prices]


UNITS = [Unit(id="u1"), Unit(id="u2")]


def test_example_scenario_unit_missing_from_latest_batch_is_zero():
    stocks = [
        entry("u1", 10, "2025-01-01"),
        entry("u1", 15, "2025-02-01"),
        entry("u2", 5, "2025-01-01"),
    ]
    assert as_map(resolve_latest_unit_prices(stocks, UNITS)) == [("u1", 15.0), ("u2", 0.0)]


@pytest.mark.parametrize("stocks", [[], None])
def test_no_stocks_prices_every_unit_at_zero(stocks):
    assert as_map(resolve_latest_unit_prices(stocks, UNITS)) == [("u1", 0.0), ("u2", 0.0)]


@pytest.mark.parametrize("units", [[], None])
def test_no_units_is_empty(units):
    assert resolve_latest_unit_prices([entry("u1", 10, "2025-01-01")], units) == []


def test_output_follows_unit_order_and_covers_every_unit():
    units = [Unit(id="c"), Unit(id="a"), Unit(id="b")]
    stocks = [entry("a", 1, "2025-03-01"), entry("zz", 9, "2025-03-01"), entry("c", 3, "2025-03-01")]
    out = resolve_latest_unit_prices(stocks, units)
    assert [p.unit_id for p in out] == ["c", "a", "b"]
    assert as_map(out) == [("c", 3.0), ("a", 1.0), ("b", 0.0)]


def test_idempotent():
    stocks = [entry("u1", 10, "2025-01-01"), entry("u2", 7, "2025-01-01")]
    first = resolve_latest_unit_prices(stocks, UNITS)
    second = resolve_latest_unit_prices(stocks, UNITS)
    assert first == second


def test_older_batches_never_override_latest():
    stocks = [
        entry("u1", 30, "2025-03-01"),
        entry("u1", 10, "2025-01-01"),
        entry("u2", 8, "2025-02-01"),
        entry("u2", 4, "2025-03-01"),
    ]
    assert as_map(resolve_latest_unit_prices(stocks, UNITS)) == [("u1", 30.0), ("u2", 4.0)]


def test_batch_id_groups_entries_with_different_timestamps():
    stocks = [
        entry("u1", 10, "2025-01-01", batch_id="old"),
        entry("u2", 6, "2025-02-01T09:00:00Z", batch_id="new"),
        entry("u1", 12, "2025-02-01T09:00:05Z", batch_id="new"),
    ]
    assert as_map(resolve_latest_unit_prices(stocks, UNITS, "batch")) == [("u1", 12.0), ("u2", 6.0)]
    # exact-timestamp grouping only sees the newest line
    assert as_map(resolve_latest_unit_prices(stocks, UNITS, "timestamp")) == [("u1", 12.0), ("u2", 0.0)]


def test_batch_falls_back_to_timestamp_when_reference_has_no_batch_id():
    at = datetime(2025, 2, 1, 9, 0, tzinfo=timezone.utc)
    stocks = [
        entry("u1", 10, at - timedelta(days=30), batch_id="old"),
        entry("u1", 11, at),
        entry("u2", 3, at),
    ]
    assert as_map(resolve_latest_unit_prices(stocks, UNITS)) == [("u1", 11.0), ("u2", 3.0)]


def test_timestamp_collision_across_batches_is_split_by_batch_id():
    stocks = [
        entry("u1", 10, "2025-02-01", batch_id="a"),
        entry("u2", 20, "2025-02-01", batch_id="b"),
    ]
    # first entry wins the tie, only its batch contributes
    assert as_map(resolve_latest_unit_prices(stocks, UNITS, "batch")) == [("u1", 10.0), ("u2", 0.0)]
    assert as_map(resolve_latest_unit_prices(stocks, UNITS, "timestamp")) == [("u1", 10.0), ("u2", 20.0)]


def test_duplicate_unit_in_latest_batch_last_one_wins():
    stocks = [entry("u1", 10, "2025-02-01", "b"), entry("u1", 14, "2025-02-01", "b")]
    assert as_map(resolve_latest_unit_prices(stocks, UNITS)) == [("u1", 14.0), ("u2", 0.0)]


def test_latest_per_unit_uses_each_units_own_newest_line():
    stocks = [
        entry("u1", 10, "2025-01-01"),
        entry("u1", 15, "2025-02-01"),
        entry("u2", 5, "2025-01-01"),
    ]
    assert as_map(resolve_latest_unit_prices(stocks, UNITS, "latest_per_unit")) == [("u1", 15.0), ("u2", 5.0)]


def test_latest_per_unit_tie_keeps_first_line():
    stocks = [entry("u1", 10, "2025-01-01"), entry("u1", 12, "2025-01-01")]
    assert as_map(resolve_latest_unit_prices(stocks, UNITS, "latest_per_unit")) == [("u1", 10.0), ("u2", 0.0)]


def test_malformed_entries_degrade_to_zero():
    stocks = [
        entry("u1", "not a price", "2025-01-01"),
        entry("u2", None, "garbage"),
        entry(None, 99, "2026-01-01"),
    ]
    # the unit-less line is the latest; its batch prices nothing we know
    assert as_map(resolve_latest_unit_prices(stocks, UNITS)) == [("u1", 0.0), ("u2", 0.0)]
    stocks = [entry("u1", "not a price", "2025-01-01"), entry("u2", 4, "garbage")]
    assert as_map(resolve_latest_unit_prices(stocks, UNITS)) == [("u1", 0.0), ("u2", 0.0)]


def test_all_bad_timestamps_group_together_at_zero():
    stocks = [entry("u1", 3, None), entry("u2", 4, "nope")]
    assert as_map(resolve_latest_unit_prices(stocks, UNITS)) == [("u1", 3.0), ("u2", 4.0)]


def test_unknown_strategy_is_rejected():
    with pytest.raises(ValueError):
        resolve_latest_unit_prices([], UNITS, "fifo")
    with pytest.raises(ValueError):
        LatestBatchPriceResolver("fifo")
    assert validate_strategy(" Batch ") == "batch"


def test_resolver_object_matches_function():
    stocks = [entry("u1", 10, "2025-01-01"), entry("u2", 2, "2025-01-02")]
    resolver = LatestBatchPriceResolver("timestamp")
    assert resolver.resolve(stocks, UNITS) == resolve_latest_unit_prices(stocks, UNITS, "timestamp")


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, 0.0),
        (True, 0.0),
        ("", 0.0),
        ("yesterday", 0.0),
        (float("nan"), 0.0),
        ([2025], 0.0),
        (1700000000, 1700000000.0),
        (Decimal("12.5"), 12.5),
        ("1970-01-01T00:01:00Z", 60.0),
        ("1970-01-01T01:00:00+01:00", 0.0),
        (datetime(1970, 1, 2), 86400.0),
        (date(1970, 1, 2), 86400.0),
    ],
)
def test_to_instant(value, expected):
    assert to_instant(value) == expected


def test_to_instant_orders_aware_and_naive_consistently():
    naive = datetime(2025, 1, 1, 12, 0)
    aware = datetime(2025, 1, 1, 13, 0, tzinfo=timezone(timedelta(hours=2)))
    assert to_instant(aware) < to_instant(naive)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, 0.0),
        (False, 0.0),
        ("abc", 0.0),
        ("12.50", 12.5),
        (Decimal("3.25"), 3.25),
        (7, 7.0),
        (float("inf"), 0.0),
        (object(), 0.0),
    ],
)
def test_coerce_price(value, expected):
    assert coerce_price(value) == expected
