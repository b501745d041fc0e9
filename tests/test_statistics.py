# tests/test_statistics.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from delivery_ledger.domain.models import MaterialTotals
from delivery_ledger.reporting.statistics import (
    Period,
    aggregate,
    filter_by_period,
    period_stats,
    stats_frames,
)

from conftest import day, entry

NOW = date(2025, 11, 30)


def _ids(days):
    return [d.id for d in days]


def test_all_period_sorted_newest_first(sample_days):
    assert _ids(filter_by_period(sample_days, "all", NOW)) == ["day-003", "day-002", "day-001"]


def test_same_date_days_keep_stored_order():
    days = [
        day("a", date(2025, 11, 22), entry("1", "A", ("Sand", 1, 1))),
        day("b", date(2025, 11, 23), entry("1", "A", ("Sand", 1, 1))),
        day("c", date(2025, 11, 22), entry("1", "A", ("Sand", 1, 1))),
    ]
    assert _ids(filter_by_period(days, Period.ALL, NOW)) == ["b", "a", "c"]


def test_week_window_is_inclusive(sample_days):
    # cutoff is 2025-11-23
    assert _ids(filter_by_period(sample_days, "week", NOW)) == ["day-003", "day-002"]
    assert _ids(filter_by_period(sample_days, "week", date(2025, 11, 29))) == ["day-003", "day-002", "day-001"]


def test_week_has_no_upper_bound():
    future = [day("f", date(2025, 12, 10), entry("1", "A", ("Sand", 1, 1)))]
    assert _ids(filter_by_period(future, "week", NOW)) == ["f"]


def test_month_matches_calendar_month_not_day_of_month(sample_days):
    days = sample_days + [
        day("oct", date(2025, 10, 24), entry("1", "A", ("Sand", 1, 1))),
        day("last-year", date(2024, 11, 24), entry("1", "A", ("Sand", 1, 1))),
    ]
    assert _ids(filter_by_period(days, "month", NOW)) == ["day-003", "day-002", "day-001"]


def test_year_period(sample_days):
    days = sample_days + [
        day("jan", date(2025, 1, 2), entry("1", "A", ("Sand", 1, 1))),
        day("old", date(2024, 12, 31), entry("1", "A", ("Sand", 1, 1))),
    ]
    assert _ids(filter_by_period(days, "year", NOW)) == ["day-003", "day-002", "day-001", "jan"]


def test_datetime_reference_is_accepted(sample_days):
    assert len(filter_by_period(sample_days, "month", datetime(2025, 11, 30, 23, 59))) == 3


@pytest.mark.parametrize("value", ["quarter", "", None, "  WEEK  "])
def test_period_parse(value):
    expected = Period.WEEK if value == "  WEEK  " else Period.ALL
    assert Period.parse(value) is expected


def test_unknown_period_returns_everything(sample_days):
    assert len(filter_by_period(sample_days, "fortnight", NOW)) == 3


def test_filter_does_not_mutate_input(sample_days):
    before = list(sample_days)
    filter_by_period(sample_days, "week", NOW)
    assert sample_days == before


def test_aggregate_sample_days(sample_days):
    stats = aggregate(sample_days)

    assert stats.total_shipments == 3
    assert stats.total_revenue == Decimal(4145)
    assert stats.avg_daily == Decimal(4145) / 3
    assert stats.by_client == {
        "Athens Construction": Decimal(3070),
        "Thessaloniki Landscaping": Decimal(1075),
    }
    assert stats.by_material == {
        "Sand": MaterialTotals(Decimal(150), Decimal(1720)),
        "Gravel": MaterialTotals(Decimal(50), Decimal(750)),
        "Cement": MaterialTotals(Decimal(40), Decimal(1675)),
    }


def test_client_totals_keyed_by_snapshot_name():
    days = [
        day("a", date(2025, 11, 1), entry("1", "Old Name", ("Sand", 1, 10))),
        day("b", date(2025, 11, 2), entry("1", "New Name", ("Sand", 2, 10))),
    ]
    assert aggregate(days).by_client == {"Old Name": Decimal(10), "New Name": Decimal(20)}


def test_aggregate_empty():
    stats = aggregate([])
    assert stats.total_shipments == 0
    assert stats.total_revenue == Decimal(0)
    assert stats.avg_daily == Decimal(0)
    assert stats.by_client == {}
    assert stats.by_material == {}


def test_period_stats(sample_days):
    stats = period_stats(sample_days, "week", NOW)
    assert stats.total_shipments == 2
    assert stats.total_revenue == Decimal(2695)


def test_stats_frames_sorted_by_revenue(sample_days):
    frames = stats_frames(aggregate(sample_days))

    assert list(frames["by_client"].columns) == ["Client", "Revenue"]
    assert list(frames["by_client"]["Client"]) == ["Athens Construction", "Thessaloniki Landscaping"]
    assert list(frames["by_material"]["Material"]) == ["Sand", "Cement", "Gravel"]
    assert frames["by_material"].iloc[0]["Tonnage"] == Decimal(150)


def test_stats_frames_empty():
    frames = stats_frames(aggregate([]))
    assert frames["by_client"].empty
    assert list(frames["by_material"].columns) == ["Material", "Tonnage", "Revenue"]
