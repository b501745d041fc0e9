# src/delivery_ledger/services/worksheet.py
"""
Quantity worksheet: the operator's scratch area before a day or a
monthly calculation is saved.

Holds, per selected client and material, the raw text typed, the last
valid quantity and any error message. Prices always come from the live
catalog; nothing is frozen until the entries are handed to LedgerStore.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional

from delivery_ledger.catalog.catalog import Catalog
from delivery_ledger.domain.errors import AlreadySelected, InvalidExpression, NotFound
from delivery_ledger.domain.models import ZERO, BreakdownRow, ClientEntry
from delivery_ledger.pricing.expression import quantity_from_input
from delivery_ledger.pricing.pricing import build_client_entry


class QuantityWorksheet:
    def __init__(self, catalog: Catalog):
        self.catalog = catalog
        self.selected: List[str] = []
        self._inputs: Dict[str, Dict[str, str]] = {}
        self._values: Dict[str, Dict[str, Decimal]] = {}
        self._errors: Dict[str, Dict[str, str]] = {}

    # ---------- client selection ----------
    def select_client(self, client_id: str) -> None:
        self.catalog.get_client(client_id)  # NotFound for unknown ids
        if client_id in self.selected:
            raise AlreadySelected(client_id)
        self.selected.append(client_id)

    def remove_client(self, client_id: str) -> None:
        if client_id not in self.selected:
            raise NotFound("Selected client", client_id)
        self.selected.remove(client_id)
        self._inputs.pop(client_id, None)
        self._values.pop(client_id, None)
        self._errors.pop(client_id, None)

    def clear(self) -> None:
        self.selected = []
        self._inputs = {}
        self._values = {}
        self._errors = {}

    # ---------- quantity input ----------
    def enter_quantity(self, client_id: str, material: str, text: str) -> Optional[Decimal]:
        """
        Record what the operator typed for one cell.

        Blank text sets the quantity to 0. Invalid text records an error
        for the cell and keeps its previous value; None is returned.
        """
        if client_id not in self.selected:
            raise NotFound("Selected client", client_id)

        self._inputs.setdefault(client_id, {})[material] = text
        cell_errors = self._errors.setdefault(client_id, {})
        try:
            value = quantity_from_input(text)
        except InvalidExpression as exc:
            cell_errors[material] = exc.reason
            return None

        cell_errors.pop(material, None)
        self._values.setdefault(client_id, {})[material] = value
        return value

    def value(self, client_id: str, material: str) -> Decimal:
        return self._values.get(client_id, {}).get(material, ZERO)

    def raw_input(self, client_id: str, material: str) -> str:
        return self._inputs.get(client_id, {}).get(material, "")

    def errors(self) -> Dict[str, Dict[str, str]]:
        return {cid: dict(errs) for cid, errs in self._errors.items() if errs}

    def has_errors(self) -> bool:
        return any(self._errors.values())

    def rename_material(self, old_name: str, new_name: str) -> None:
        """Carry pending cells over a catalog rename."""
        for table in (self._inputs, self._values, self._errors):
            for cells in table.values():
                if old_name in cells:
                    cells[new_name] = cells.pop(old_name)

    # ---------- totals ----------
    def breakdown_rows(self) -> List[BreakdownRow]:
        rows = []
        for entry in self.client_entries():
            for item in entry.line_items:
                rows.append(
                    BreakdownRow(
                        client_id=entry.client_id,
                        client_name=entry.client_name,
                        material=item.material,
                        quantity=item.quantity,
                        price_per_unit=item.price_per_unit,
                        subtotal=item.subtotal,
                    )
                )
        return rows

    def client_subtotal(self, client_id: str) -> Decimal:
        entry = self._entry_for(client_id)
        return entry.client_total if entry else ZERO

    def grand_total(self) -> Decimal:
        return sum((self.client_subtotal(cid) for cid in self.selected), ZERO)

    def client_entries(self) -> List[ClientEntry]:
        """Priced entries for selected clients, empty ones dropped."""
        entries = []
        for client_id in self.selected:
            entry = self._entry_for(client_id)
            if entry is not None:
                entries.append(entry)
        return entries

    def _entry_for(self, client_id: str) -> Optional[ClientEntry]:
        client = self.catalog.get_client(client_id)
        return build_client_entry(client, self._values.get(client_id, {}))
