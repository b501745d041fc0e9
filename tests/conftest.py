# tests/conftest.py
from __future__ import annotations

import itertools
import os
import tempfile
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

# keep test runs from writing logs into the working tree
os.environ.setdefault("LOG_FILE", str(Path(tempfile.gettempdir()) / "delivery_ledger_tests.log"))

import pytest

from delivery_ledger.catalog.catalog import Catalog
from delivery_ledger.domain.models import Client, ClientEntry, LineItem, ShipmentDay
from delivery_ledger.services.ledger_store import LedgerStore


# ---------- tiny builders ----------
def entry(client_id: str, client_name: str, *lines) -> ClientEntry:
    """entry("1", "Acme", ("Sand", 50, 12), ("Gravel", 30, 15))"""
    return ClientEntry(
        client_id=client_id,
        client_name=client_name,
        line_items=tuple(LineItem(m, Decimal(str(q)), Decimal(str(p))) for m, q, p in lines),
    )


def day(day_id: str, on: date, *entries: ClientEntry) -> ShipmentDay:
    return ShipmentDay(id=day_id, date=on, client_entries=entries)


def sequential_ids():
    counter = itertools.count(1)
    return lambda prefix: f"{prefix}-{next(counter):03d}"


# ---------- fixtures ----------
@pytest.fixture
def catalog() -> Catalog:
    ids = iter(["c3", "c4", "c5", "c6"])
    return Catalog(
        materials=["Sand", "Gravel", "Cement"],
        clients=[
            Client("1", "Athens Construction", {"Sand": Decimal(12), "Gravel": Decimal(15), "Cement": Decimal(40)}),
            Client("2", "Thessaloniki Landscaping", {"Sand": Decimal(10), "Gravel": Decimal(18), "Cement": Decimal(45)}),
        ],
        id_factory=lambda: next(ids),
    )


@pytest.fixture
def store() -> LedgerStore:
    return LedgerStore(
        id_factory=sequential_ids(),
        clock=lambda: datetime(2025, 11, 30, 18, 0, 0),
    )


@pytest.fixture
def sample_days():
    """Three days of demo deliveries, stored out of date order."""
    return [
        day(
            "day-001",
            date(2025, 11, 22),
            entry("1", "Athens Construction", ("Sand", 50, 12), ("Gravel", 30, 15)),
            entry("2", "Thessaloniki Landscaping", ("Sand", 40, 10)),
        ),
        day(
            "day-003",
            date(2025, 11, 24),
            entry("1", "Athens Construction", ("Sand", 60, 12), ("Gravel", 20, 15)),
            entry("2", "Thessaloniki Landscaping", ("Cement", 15, 45)),
        ),
        day(
            "day-002",
            date(2025, 11, 23),
            entry("1", "Athens Construction", ("Cement", 25, 40)),
        ),
    ]
