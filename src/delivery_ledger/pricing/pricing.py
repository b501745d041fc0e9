# src/delivery_ledger/pricing/pricing.py
"""
Pricing rules

Enterprise rules:
- Pure functions only
- No storage access
- No printing
- No config
- No side effects
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Mapping, Optional, Tuple

from delivery_ledger.domain.models import (
    ZERO,
    Client,
    ClientEntry,
    LineItem,
    Number,
    as_decimal,
)


# ----------------------------
# Line / entry / day totals
# ----------------------------

def price_line(material: str, quantity: Number, rate_per_unit: Number) -> Optional[LineItem]:
    """
    Price one (material, quantity) pair.
    Non-positive quantities return None so they never reach a saved record.
    """
    qty = as_decimal(quantity)
    if qty <= 0:
        return None
    return LineItem(material=material, quantity=qty, price_per_unit=as_decimal(rate_per_unit))


def total_client_entries(line_items: Iterable[LineItem]) -> Decimal:
    return sum((item.subtotal for item in line_items), ZERO)


def total_day(client_entries: Iterable[ClientEntry]) -> Decimal:
    return sum((entry.client_total for entry in client_entries), ZERO)


# ----------------------------
# Entry builders
# ----------------------------

def build_client_entry(client: Client, quantities: Mapping[str, Number]) -> Optional[ClientEntry]:
    """
    Price every material on the client's rate table with the quantity
    supplied for it (missing means 0). Returns None when no line survives.
    """
    lines = []
    for material, rate in client.rates.items():
        line = price_line(material, quantities.get(material, ZERO), rate)
        if line is not None:
            lines.append(line)

    if not lines:
        return None
    return ClientEntry(client_id=client.id, client_name=client.name, line_items=tuple(lines))


def normalize_entries(client_entries: Iterable[ClientEntry]) -> Tuple[ClientEntry, ...]:
    """
    Re-price every line from its own quantity and rate, drop non-positive
    lines, then drop entries left without lines.
    """
    result = []
    for entry in client_entries:
        lines = []
        for item in entry.line_items:
            line = price_line(item.material, item.quantity, item.price_per_unit)
            if line is not None:
                lines.append(line)
        if lines:
            result.append(
                ClientEntry(
                    client_id=entry.client_id,
                    client_name=entry.client_name,
                    line_items=tuple(lines),
                )
            )
    return tuple(result)
