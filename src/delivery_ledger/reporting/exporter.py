# src/delivery_ledger/reporting/exporter.py
"""
Shipment CSV export.

One row per (day, client entry, line item), in ledger order. The day total
is written once, on the first row of each day, and left blank after that.
Output is UTF-8 with a leading BOM so spreadsheet tools pick the encoding.
"""

from __future__ import annotations

from dataclasses import astuple
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd

from delivery_ledger.domain.models import ExportRow, ShipmentDay
from delivery_ledger.reporting.formatting import fmt_decimal, fmt_export_date

EXPORT_COLUMNS = [
    "Date",
    "Client",
    "Material",
    "Quantity",
    "Price/Unit",
    "Subtotal",
    "Day Total",
]

BOM = "\ufeff"
ENCODING = "utf-8-sig"  # utf-8 + BOM
LINE_TERMINATOR = "\n"


def export_rows(days: Iterable[ShipmentDay]) -> List[ExportRow]:
    rows: List[ExportRow] = []
    for day in days:
        first_row = True
        day_date = fmt_export_date(day.date)
        for entry in day.client_entries:
            for item in entry.line_items:
                rows.append(
                    ExportRow(
                        date=day_date,
                        client=entry.client_name,
                        material=item.material,
                        quantity=fmt_decimal(item.quantity),
                        price_per_unit=fmt_decimal(item.price_per_unit),
                        subtotal=fmt_decimal(item.subtotal),
                        day_total=fmt_decimal(day.day_total) if first_row else "",
                    )
                )
                first_row = False
    return rows


def export_frame(days: Iterable[ShipmentDay]) -> pd.DataFrame:
    return pd.DataFrame(
        [astuple(row) for row in export_rows(days)],
        columns=EXPORT_COLUMNS,
    )


def to_csv_text(days: Iterable[ShipmentDay]) -> str:
    """BOM + header + rows, comma separated, newline terminated."""
    body = export_frame(days).to_csv(index=False, lineterminator=LINE_TERMINATOR)
    return BOM + body


def to_csv_bytes(days: Iterable[ShipmentDay]) -> bytes:
    return to_csv_text(days).encode("utf-8")


def default_export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"shipments_{today.isoformat()}_UTF8.csv"


def write_csv(days: Iterable[ShipmentDay], output_path: Path) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    export_frame(days).to_csv(
        output_path,
        index=False,
        encoding=ENCODING,
        lineterminator=LINE_TERMINATOR,
    )
    return output_path
