from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Tuple, TypeVar, Union

from delivery_ledger.catalog.catalog import Catalog
from delivery_ledger.data.ledger_file import LedgerSnapshot, load_ledger, save_ledger
from delivery_ledger.domain.errors import InvalidExpression, LedgerError, NotFound
from delivery_ledger.domain.models import (
    Client,
    LedgerStats,
    MonthlyCalculation,
    Number,
    ShipmentDay,
)
from delivery_ledger.reporting.exporter import default_export_filename, write_csv
from delivery_ledger.reporting.statistics import Period, aggregate, filter_by_period
from delivery_ledger.services.worksheet import QuantityWorksheet
from delivery_ledger.utils.config import config

# handlers are attached by the entry point (utils.logger.get_logger)
logger = logging.getLogger("delivery_ledger")

T = TypeVar("T")

# client id or name -> material -> raw quantity text ("50+30*2")
QuantityInput = Mapping[str, Mapping[str, str]]


class LedgerApplication:
    """
    Application-layer orchestration around one ledger file.
    Every write is load -> operate -> save; a failed operation saves nothing.
    """

    def __init__(self, ledger_path: Optional[Path] = None):
        self.ledger_path = Path(ledger_path) if ledger_path else config.ledger_path

    # ============================================================
    # READ
    # ============================================================

    def load(self) -> LedgerSnapshot:
        return load_ledger(self.ledger_path)

    def stats(
        self,
        period: Union[Period, str, None] = None,
        now: Optional[date] = None,
    ) -> Tuple[List[ShipmentDay], LedgerStats]:
        snapshot = self.load()
        days = filter_by_period(snapshot.store.days, period or config.DEFAULT_PERIOD, now)
        return days, aggregate(days)

    def recent_days(self, limit: Optional[int] = None) -> List[ShipmentDay]:
        return self.load().store.recent_days(limit or config.RECENT_DAYS_LIMIT)

    def export(
        self,
        period: Union[Period, str, None] = None,
        output_dir: Optional[Path] = None,
        now: Optional[date] = None,
    ) -> Path:
        days, _ = self.stats(period, now)
        output_dir = Path(output_dir) if output_dir else config.export_path
        path = write_csv(days, output_dir / default_export_filename(now))
        logger.info(f"Exported {len(days)} shipment days to {path}")
        return path

    # ============================================================
    # SHIPMENT DAYS / MONTHLY CALCULATIONS
    # ============================================================

    def add_day(self, day_date: Union[date, str], quantities: QuantityInput) -> ShipmentDay:
        def op(snapshot: LedgerSnapshot) -> ShipmentDay:
            sheet = self._fill_worksheet(snapshot.catalog, quantities)
            return snapshot.store.add_day(day_date, sheet.client_entries())

        return self._write("add day", op)

    def save_monthly(
        self,
        month: Union[int, str],
        year: int,
        description: str,
        quantities: QuantityInput,
    ) -> MonthlyCalculation:
        def op(snapshot: LedgerSnapshot) -> MonthlyCalculation:
            sheet = self._fill_worksheet(snapshot.catalog, quantities)
            return snapshot.store.add_monthly(
                month, year, description, sheet.client_entries(), sheet.grand_total()
            )

        return self._write("save monthly calculation", op)

    def update_day(
        self,
        day_id: str,
        quantities: QuantityInput,
        day_date: Union[date, str, None] = None,
    ) -> ShipmentDay:
        """Replace a saved day's entries, re-priced at today's rates. The date is kept unless given."""
        def op(snapshot: LedgerSnapshot) -> ShipmentDay:
            current = snapshot.store.get_day(day_id)
            sheet = self._fill_worksheet(snapshot.catalog, quantities)
            return snapshot.store.update_day(day_id, day_date or current.date, sheet.client_entries())

        return self._write("update day", op)

    def delete_day(self, day_id: str) -> ShipmentDay:
        return self._write("delete day", lambda s: s.store.delete_day(day_id))

    def delete_monthly(self, calc_id: str) -> MonthlyCalculation:
        return self._write("delete monthly calculation", lambda s: s.store.delete_monthly(calc_id))

    # ============================================================
    # CATALOG
    # ============================================================

    def add_material(self, name: str) -> str:
        return self._write("add material", lambda s: s.catalog.add_material(name))

    def rename_material(self, old_name: str, new_name: str) -> str:
        return self._write("rename material", lambda s: s.catalog.rename_material(old_name, new_name))

    def delete_material(self, name: str) -> None:
        return self._write("delete material", lambda s: s.catalog.delete_material(name))

    def add_client(self, name: str, rates: Optional[Mapping[str, Number]] = None) -> Client:
        return self._write("add client", lambda s: s.catalog.add_client(name, rates))

    def update_client(
        self,
        key: str,
        name: Optional[str] = None,
        rates: Optional[Mapping[str, Number]] = None,
    ) -> Client:
        """Rename and/or reprice a client by id or name; rates not given are kept."""
        def op(snapshot: LedgerSnapshot) -> Client:
            client = self._resolve_client(snapshot.catalog, key)
            return snapshot.catalog.update_client(
                client.id, name or client.name, {**client.rates, **(rates or {})}
            )

        return self._write("update client", op)

    def delete_client(self, key: str) -> Client:
        def op(snapshot: LedgerSnapshot) -> Client:
            client = self._resolve_client(snapshot.catalog, key)
            return snapshot.catalog.delete_client(client.id)

        return self._write("delete client", op)

    # ============================================================
    # HELPERS
    # ============================================================

    def _write(self, action: str, op: Callable[[LedgerSnapshot], T]) -> T:
        snapshot = self.load()
        try:
            result = op(snapshot)
        except (LedgerError, ValueError) as exc:
            logger.warning(f"{action} rejected: {exc}")
            raise
        save_ledger(self.ledger_path, snapshot.catalog, snapshot.store)
        return result

    @staticmethod
    def _resolve_client(catalog: Catalog, key: str) -> Client:
        try:
            return catalog.get_client(key)
        except NotFound:
            client = catalog.find_client_by_name(key)
            if client is None:
                raise
            return client

    def _fill_worksheet(self, catalog: Catalog, quantities: QuantityInput) -> QuantityWorksheet:
        sheet = QuantityWorksheet(catalog)
        for key, cells in quantities.items():
            client = self._resolve_client(catalog, key)
            sheet.select_client(client.id)
            for material, text in cells.items():
                if material not in catalog.materials:
                    raise NotFound("Material", material)
                if sheet.enter_quantity(client.id, material, text) is None:
                    reason = sheet.errors()[client.id][material]
                    raise InvalidExpression(text, reason)
        return sheet
