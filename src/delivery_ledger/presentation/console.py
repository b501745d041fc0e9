from __future__ import annotations

import io
from typing import Iterable, List, Sequence

from delivery_ledger.domain.models import LedgerStats, MonthlyCalculation, ShipmentDay
from delivery_ledger.reporting.formatting import fmt_money, fmt_quantity
from delivery_ledger.reporting.statistics import Period, stats_frames


def _format_table(rows: Sequence[Sequence[object]], headers: List[str], max_rows: int | None = None) -> str:
    output = io.StringIO()
    rows = list(rows)

    if max_rows is not None and len(rows) > max_rows:
        shown = rows[:max_rows]
        omitted = len(rows) - max_rows
    else:
        shown = rows
        omitted = 0

    widths = [len(h) for h in headers]
    for row in shown:
        for i, v in enumerate(row):
            widths[i] = max(widths[i], len(str(v)))

    def fmt(r):
        return " ".join(str(r[i]).ljust(widths[i]) for i in range(len(headers)))

    print(fmt(headers), file=output)
    print(" ".join("-" * w for w in widths), file=output)
    for row in shown:
        print(fmt(row), file=output)

    if omitted:
        print(f"... ({omitted} more rows omitted) ...", file=output)

    return output.getvalue()


def render_stats(stats: LedgerStats, period: Period | str, currency: str = "€") -> str:
    period = Period.parse(period)
    out = io.StringIO()

    print("=" * 60, file=out)
    print(f"SHIPMENT STATISTICS - {period.value.upper()}", file=out)
    print("=" * 60, file=out)
    print(f"Shipment days:  {stats.total_shipments}", file=out)
    print(f"Total revenue:  {fmt_money(stats.total_revenue, currency)}", file=out)
    print(f"Daily average:  {fmt_money(stats.avg_daily, currency)}", file=out)
    print(file=out)

    if stats.total_shipments == 0:
        print("No shipment days recorded for the selected period.", file=out)
        return out.getvalue()

    frames = stats_frames(stats)

    print("== By Client ==\n", file=out)
    client_rows = [
        (row["Client"], fmt_money(row["Revenue"], currency))
        for _, row in frames["by_client"].iterrows()
    ]
    print(_format_table(client_rows, ["client", "revenue"]), file=out)

    print("== By Material ==\n", file=out)
    material_rows = [
        (row["Material"], fmt_quantity(row["Tonnage"]), fmt_money(row["Revenue"], currency))
        for _, row in frames["by_material"].iterrows()
    ]
    print(_format_table(material_rows, ["material", "tonnage", "revenue"]), file=out)

    return out.getvalue()


def render_days(days: Iterable[ShipmentDay], currency: str = "€", max_rows: int | None = 200) -> str:
    rows = [
        (
            d.id,
            d.date.isoformat(),
            len(d.client_entries),
            ", ".join(e.client_name for e in d.client_entries),
            fmt_money(d.day_total, currency),
        )
        for d in days
    ]
    return _format_table(rows, ["id", "date", "clients", "names", "day_total"], max_rows=max_rows)


def render_monthly(calculations: Iterable[MonthlyCalculation], currency: str = "€") -> str:
    rows = [
        (
            c.id,
            f"{c.month_name} {c.year}",
            c.description,
            c.saved_at.strftime("%Y-%m-%d"),
            fmt_money(c.total, currency),
        )
        for c in calculations
    ]
    return _format_table(rows, ["id", "month", "description", "saved", "total"])
