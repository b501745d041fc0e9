# src/delivery_ledger/services/ledger_store.py

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import Callable, Iterable, List, Tuple, Union

from delivery_ledger.domain.errors import EmptyDay, EmptyEntry, NotFound
from delivery_ledger.domain.models import (
    ClientEntry,
    MonthlyCalculation,
    Number,
    ShipmentDay,
    resolve_month,
)
from delivery_ledger.pricing.pricing import normalize_entries

logger = logging.getLogger(__name__)

DateLike = Union[date, str]


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def to_date(value: DateLike) -> date:
    """Accept a date, a datetime or an ISO YYYY-MM-DD string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())


class LedgerStore:
    """
    Owns the shipment days and monthly calculations.

    - Totals are always recomputed from quantities and rates on write
    - Every write builds the new collection first, then swaps it in
    - Failed writes leave the store untouched
    """

    def __init__(
        self,
        days: Iterable[ShipmentDay] = (),
        monthly_calculations: Iterable[MonthlyCalculation] = (),
        *,
        id_factory: Callable[[str], str] = _new_id,
        clock: Callable[[], datetime] = datetime.now,
    ):
        # copies, so callers' lists are never mutated
        self._days: Tuple[ShipmentDay, ...] = tuple(days)
        self._monthly: Tuple[MonthlyCalculation, ...] = tuple(monthly_calculations)
        self._id_factory = id_factory
        self._clock = clock

    # ============================================================
    # READ VIEW
    # ============================================================

    @property
    def days(self) -> Tuple[ShipmentDay, ...]:
        return self._days

    @property
    def monthly_calculations(self) -> Tuple[MonthlyCalculation, ...]:
        return self._monthly

    def get_day(self, day_id: str) -> ShipmentDay:
        for day in self._days:
            if day.id == day_id:
                return day
        raise NotFound("Shipment day", day_id)

    def get_monthly(self, calc_id: str) -> MonthlyCalculation:
        for calc in self._monthly:
            if calc.id == calc_id:
                return calc
        raise NotFound("Monthly calculation", calc_id)

    def recent_days(self, limit: int = 5) -> List[ShipmentDay]:
        """Newest dates first; same-date days keep their stored order."""
        return sorted(self._days, key=lambda d: d.date, reverse=True)[:limit]

    # ============================================================
    # SHIPMENT DAYS
    # ============================================================

    def add_day(self, day_date: DateLike, client_entries: Iterable[ClientEntry]) -> ShipmentDay:
        day = self._build_day(self._id_factory("day"), day_date, client_entries)
        self._days = self._days + (day,)
        logger.info(f"Shipment day saved: {day.id} {day.date.isoformat()} total={day.day_total}")
        return day

    def update_day(self, day_id: str, day_date: DateLike, client_entries: Iterable[ClientEntry]) -> ShipmentDay:
        self.get_day(day_id)
        day = self._build_day(day_id, day_date, client_entries)
        self._days = tuple(day if d.id == day_id else d for d in self._days)
        logger.info(f"Shipment day updated: {day.id} {day.date.isoformat()} total={day.day_total}")
        return day

    def delete_day(self, day_id: str) -> ShipmentDay:
        removed = self.get_day(day_id)
        self._days = tuple(d for d in self._days if d.id != day_id)
        logger.info(f"Shipment day deleted: {day_id}")
        return removed

    def _build_day(self, day_id: str, day_date: DateLike, client_entries: Iterable[ClientEntry]) -> ShipmentDay:
        parsed = to_date(day_date)
        entries = normalize_entries(client_entries)
        if not entries:
            raise EmptyDay()
        return ShipmentDay(id=day_id, date=parsed, client_entries=entries)

    # ============================================================
    # MONTHLY CALCULATIONS
    # ============================================================

    def add_monthly(
        self,
        month: Union[int, str],
        year: int,
        description: str | None,
        client_entries: Iterable[ClientEntry],
        total: Number,
    ) -> MonthlyCalculation:
        """
        Freeze a worksheet total for a month.
        The total is kept as supplied: later catalog edits never move it.
        """
        month_number = resolve_month(month)
        entries = normalize_entries(client_entries)
        if not entries:
            raise EmptyEntry()

        calc = MonthlyCalculation(
            id=self._id_factory("monthly"),
            month=month_number,
            year=int(year),
            description=(description or "").strip(),
            client_entries=entries,
            total=total,
            saved_at=self._clock(),
        )
        self._monthly = self._monthly + (calc,)
        logger.info(f"Monthly calculation saved: {calc.month_name} {calc.year} total={calc.total}")
        return calc

    def delete_monthly(self, calc_id: str) -> MonthlyCalculation:
        removed = self.get_monthly(calc_id)
        self._monthly = tuple(c for c in self._monthly if c.id != calc_id)
        logger.info(f"Monthly calculation deleted: {calc_id}")
        return removed
