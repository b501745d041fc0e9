# src/delivery_ledger/reporting/statistics.py
"""
Period filtering + aggregation over shipment days.

Pure functions only: the ledger is read, never written.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional, Union

import pandas as pd

from delivery_ledger.domain.models import ZERO, LedgerStats, MaterialTotals, ShipmentDay

WEEK_WINDOW_DAYS = 7


class Period(Enum):
    ALL = "all"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @classmethod
    def parse(cls, value: Union["Period", str, None]) -> "Period":
        """Unknown or missing values fall back to ALL."""
        if isinstance(value, Period):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.ALL


def _as_day(now: Union[date, datetime, None]) -> date:
    if now is None:
        return date.today()
    if isinstance(now, datetime):
        return now.date()
    return now


# ----------------------------
# Filtering
# ----------------------------

def filter_by_period(
    days: Iterable[ShipmentDay],
    period: Union[Period, str, None],
    now: Union[date, datetime, None] = None,
) -> List[ShipmentDay]:
    """
    Days in the period, newest first.

    - all:   everything
    - week:  date >= today - 7 days (inclusive)
    - month: same calendar month and year as today
    - year:  same calendar year as today
    """
    today = _as_day(now)
    period = Period.parse(period)

    # stable: same-date days keep their stored order
    ordered = sorted(days, key=lambda d: d.date, reverse=True)

    if period is Period.WEEK:
        cutoff = today - timedelta(days=WEEK_WINDOW_DAYS)
        return [d for d in ordered if d.date >= cutoff]
    if period is Period.MONTH:
        return [d for d in ordered if d.date.year == today.year and d.date.month == today.month]
    if period is Period.YEAR:
        return [d for d in ordered if d.date.year == today.year]
    return ordered


# ----------------------------
# Aggregation
# ----------------------------

def aggregate(filtered_days: Iterable[ShipmentDay]) -> LedgerStats:
    """
    Fold the days into totals by client name and by material.
    Client keys are snapshot names, so a renamed client shows up under
    each name it was saved with.
    """
    total_shipments = 0
    total_revenue = ZERO
    by_client: Dict[str, Decimal] = {}
    by_material: Dict[str, MaterialTotals] = {}

    for day in filtered_days:
        total_shipments += 1
        total_revenue += day.day_total

        for entry in day.client_entries:
            by_client[entry.client_name] = by_client.get(entry.client_name, ZERO) + entry.client_total

            for item in entry.line_items:
                if item.material not in by_material:
                    by_material[item.material] = MaterialTotals()
                totals = by_material[item.material]
                totals.tonnage += item.quantity
                totals.revenue += item.subtotal

    avg_daily = total_revenue / total_shipments if total_shipments else ZERO

    return LedgerStats(
        total_shipments=total_shipments,
        total_revenue=total_revenue,
        avg_daily=avg_daily,
        by_client=by_client,
        by_material=by_material,
    )


def period_stats(
    days: Iterable[ShipmentDay],
    period: Union[Period, str, None],
    now: Optional[Union[date, datetime]] = None,
) -> LedgerStats:
    return aggregate(filter_by_period(days, period, now))


# ----------------------------
# Tables
# ----------------------------

def stats_frames(stats: LedgerStats) -> Dict[str, pd.DataFrame]:
    """
    Returns summary tables for:
    - by_client   (Client, Revenue)
    - by_material (Material, Tonnage, Revenue)
    both sorted by revenue, highest first.
    """
    client_items = sorted(stats.by_client.items(), key=lambda kv: kv[1], reverse=True)
    material_items = sorted(stats.by_material.items(), key=lambda kv: kv[1].revenue, reverse=True)

    by_client = pd.DataFrame(
        [{"Client": name, "Revenue": total} for name, total in client_items],
        columns=["Client", "Revenue"],
    )
    by_material = pd.DataFrame(
        [{"Material": name, "Tonnage": t.tonnage, "Revenue": t.revenue} for name, t in material_items],
        columns=["Material", "Tonnage", "Revenue"],
    )
    return {"by_client": by_client, "by_material": by_material}
