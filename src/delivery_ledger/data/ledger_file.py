# src/delivery_ledger/data/ledger_file.py
"""
JSON ledger file: the storage the CLI uses around the in-memory core.

Layout:
    {
      "materials": ["Sand", ...],
      "clients": [{"id", "name", "rates": {material: "12"}}],
      "shipment_days": [{"id", "date", "client_entries": [...]}],
      "monthly_calculations": [{"id", "month", "year", "description",
                                "client_entries", "total", "saved_at"}]
    }

Decimals are written as strings. Stored subtotals and totals are written
for readability but recomputed from quantities and rates on load; the one
exception is a monthly calculation's total, which is a frozen figure.
Zero-quantity lines are dropped on load, and a record left without any
positive line makes the file malformed.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from delivery_ledger.catalog.catalog import Catalog
from delivery_ledger.domain.models import (
    Client,
    ClientEntry,
    LineItem,
    MonthlyCalculation,
    ShipmentDay,
    as_decimal,
    resolve_month,
)
from delivery_ledger.domain.errors import EmptyDay, EmptyEntry, LedgerError
from delivery_ledger.pricing.pricing import normalize_entries
from delivery_ledger.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)


@dataclass
class LedgerSnapshot:
    catalog: Catalog
    store: LedgerStore
    path: Optional[Path] = None


class LedgerFileError(ValueError):
    """The ledger file exists but cannot be read as a ledger."""


# ===================================================================
# ENCODE
# ===================================================================

def _entry_to_dict(entry: ClientEntry) -> Dict[str, Any]:
    return {
        "client_id": entry.client_id,
        "client_name": entry.client_name,
        "line_items": [
            {
                "material": item.material,
                "quantity": str(item.quantity),
                "price_per_unit": str(item.price_per_unit),
                "subtotal": str(item.subtotal),
            }
            for item in entry.line_items
        ],
        "client_total": str(entry.client_total),
    }


def ledger_to_dict(catalog: Catalog, store: LedgerStore) -> Dict[str, Any]:
    return {
        "materials": list(catalog.materials),
        "clients": [
            {"id": c.id, "name": c.name, "rates": {m: str(r) for m, r in c.rates.items()}}
            for c in catalog.clients
        ],
        "shipment_days": [
            {
                "id": d.id,
                "date": d.date.isoformat(),
                "client_entries": [_entry_to_dict(e) for e in d.client_entries],
                "day_total": str(d.day_total),
            }
            for d in store.days
        ],
        "monthly_calculations": [
            {
                "id": m.id,
                "month": m.month,
                "year": m.year,
                "description": m.description,
                "client_entries": [_entry_to_dict(e) for e in m.client_entries],
                "total": str(m.total),
                "saved_at": m.saved_at.isoformat(),
            }
            for m in store.monthly_calculations
        ],
    }


# ===================================================================
# DECODE
# ===================================================================

def _entry_from_dict(raw: Dict[str, Any]) -> ClientEntry:
    return ClientEntry(
        client_id=str(raw["client_id"]),
        client_name=raw["client_name"],
        line_items=tuple(
            LineItem(
                material=item["material"],
                quantity=as_decimal(item["quantity"]),
                price_per_unit=as_decimal(item["price_per_unit"]),
            )
            for item in raw.get("line_items", [])
        ),
    )


def _entries_from_list(raw_entries: List[Dict[str, Any]]) -> Tuple[ClientEntry, ...]:
    # same rule as a live save: zero lines and empty entries are dropped
    return normalize_entries(_entry_from_dict(e) for e in raw_entries)


def _day_from_dict(raw: Dict[str, Any]) -> ShipmentDay:
    entries = _entries_from_list(raw.get("client_entries", []))
    if not entries:
        raise EmptyDay(f"Shipment day {raw.get('id')!r} has no positive quantities")
    return ShipmentDay(id=raw["id"], date=date.fromisoformat(raw["date"]), client_entries=entries)


def _monthly_from_dict(raw: Dict[str, Any]) -> MonthlyCalculation:
    entries = _entries_from_list(raw.get("client_entries", []))
    if not entries:
        raise EmptyEntry(f"Monthly calculation {raw.get('id')!r} has no positive quantities")
    return MonthlyCalculation(
        id=raw["id"],
        month=resolve_month(raw["month"]),
        year=int(raw["year"]),
        description=raw.get("description", ""),
        client_entries=entries,
        total=as_decimal(raw["total"]),
        saved_at=datetime.fromisoformat(raw["saved_at"]),
    )


def ledger_from_dict(data: Dict[str, Any]) -> LedgerSnapshot:
    if not isinstance(data, dict):
        raise LedgerFileError(f"Malformed ledger data: expected an object, got {type(data).__name__}")

    try:
        catalog = Catalog(
            materials=data.get("materials", []),
            clients=[
                Client(
                    id=str(c["id"]),
                    name=c["name"],
                    rates={m: as_decimal(r) for m, r in c.get("rates", {}).items()},
                )
                for c in data.get("clients", [])
            ],
        )
        days = [_day_from_dict(d) for d in data.get("shipment_days", [])]
        monthly = [_monthly_from_dict(m) for m in data.get("monthly_calculations", [])]
    except (AttributeError, KeyError, TypeError, ValueError, LedgerError) as exc:
        raise LedgerFileError(f"Malformed ledger data: {exc}") from exc

    return LedgerSnapshot(catalog=catalog, store=LedgerStore(days, monthly))


# ===================================================================
# FILE I/O
# ===================================================================

def load_ledger(path: Path) -> LedgerSnapshot:
    path = Path(path)
    if not path.exists():
        logger.info(f"No ledger at {path}, starting empty")
        return LedgerSnapshot(catalog=Catalog(), store=LedgerStore(), path=path)

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise LedgerFileError(f"{path} is not valid JSON: {exc}") from exc

    snapshot = ledger_from_dict(data)
    snapshot.path = path
    logger.debug(
        f"Loaded ledger {path}: {len(snapshot.store.days)} days, "
        f"{len(snapshot.store.monthly_calculations)} monthly calculations"
    )
    return snapshot


def save_ledger(path: Path, catalog: Catalog, store: LedgerStore) -> Path:
    """Write to a temp file beside the target, then replace it."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(ledger_to_dict(catalog, store), f, ensure_ascii=False, indent=2)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise

    logger.debug(f"Saved ledger {path}")
    return path
