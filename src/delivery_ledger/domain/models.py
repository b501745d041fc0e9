# src/delivery_ledger/domain/models.py
from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Dict, Mapping, Tuple, Union

Number = Union[Decimal, int, float, str]

ZERO = Decimal(0)


def as_decimal(value: Number) -> Decimal:
    """
    Coerce a quantity or price to Decimal.
    Floats go through str() so 0.1 stays 0.1 instead of its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        value = str(value)
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Not a number: {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def resolve_month(value: Union[int, str]) -> int:
    """Month number 1-12 from an int, a digit string or an English month name."""
    if isinstance(value, int) and not isinstance(value, bool):
        month = value
    else:
        text = str(value).strip()
        if text.isdigit():
            month = int(text)
        else:
            lowered = text.lower()
            names = [n.lower() for n in calendar.month_name]
            abbrs = [a.lower() for a in calendar.month_abbr]
            if lowered in names:
                month = names.index(lowered)
            elif lowered in abbrs:
                month = abbrs.index(lowered)
            else:
                raise ValueError(f"Unknown month: {value!r}")
    if not 1 <= month <= 12:
        raise ValueError(f"Month out of range: {value!r}")
    return month


# ------------------------------------------------------------
# Catalog
# ------------------------------------------------------------
@dataclass(frozen=True)
class Client:
    id: str
    name: str
    rates: Mapping[str, Decimal] = field(default_factory=dict)  # material -> price per unit

    def __post_init__(self):
        # read-only copy: rates change only through Catalog
        object.__setattr__(self, "rates", MappingProxyType(dict(self.rates)))

    def rate_for(self, material: str) -> Decimal:
        return self.rates.get(material, ZERO)


# ------------------------------------------------------------
# Ledger records
# ------------------------------------------------------------
@dataclass(frozen=True)
class LineItem:
    material: str
    quantity: Decimal
    price_per_unit: Decimal
    subtotal: Decimal = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "quantity", as_decimal(self.quantity))
        object.__setattr__(self, "price_per_unit", as_decimal(self.price_per_unit))
        object.__setattr__(self, "subtotal", self.quantity * self.price_per_unit)


@dataclass(frozen=True)
class ClientEntry:
    client_id: str
    client_name: str  # snapshot at save time
    line_items: Tuple[LineItem, ...] = ()
    client_total: Decimal = field(init=False)

    def __post_init__(self):
        items = tuple(self.line_items)
        object.__setattr__(self, "line_items", items)
        object.__setattr__(self, "client_total", sum((i.subtotal for i in items), ZERO))


@dataclass(frozen=True)
class ShipmentDay:
    id: str
    date: date
    client_entries: Tuple[ClientEntry, ...] = ()
    day_total: Decimal = field(init=False)

    def __post_init__(self):
        entries = tuple(self.client_entries)
        object.__setattr__(self, "client_entries", entries)
        object.__setattr__(self, "day_total", sum((e.client_total for e in entries), ZERO))


@dataclass(frozen=True)
class MonthlyCalculation:
    """
    Frozen snapshot of a worksheet total for one month.
    `total` is stored as supplied and never recomputed from the entries.
    """
    id: str
    month: int
    year: int
    description: str
    client_entries: Tuple[ClientEntry, ...]
    total: Decimal
    saved_at: datetime

    def __post_init__(self):
        object.__setattr__(self, "client_entries", tuple(self.client_entries))
        object.__setattr__(self, "total", as_decimal(self.total))

    @property
    def month_name(self) -> str:
        return calendar.month_name[self.month]


# ------------------------------------------------------------
# Reporting results
# ------------------------------------------------------------
@dataclass
class MaterialTotals:
    tonnage: Decimal = ZERO
    revenue: Decimal = ZERO


@dataclass
class LedgerStats:
    total_shipments: int
    total_revenue: Decimal
    avg_daily: Decimal
    by_client: Dict[str, Decimal]
    by_material: Dict[str, MaterialTotals]


@dataclass(frozen=True)
class BreakdownRow:
    client_id: str
    client_name: str
    material: str
    quantity: Decimal
    price_per_unit: Decimal
    subtotal: Decimal


@dataclass(frozen=True)
class ExportRow:
    date: str
    client: str
    material: str
    quantity: str
    price_per_unit: str
    subtotal: str
    day_total: str  # blank except on the first row of each day
