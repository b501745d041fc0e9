# src/delivery_ledger/cli/ledger_cli.py

from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Sequence
import argparse
import sys

from delivery_ledger.application.ledger_app import LedgerApplication
from delivery_ledger.domain.errors import LedgerError
from delivery_ledger.presentation.console import render_days, render_monthly, render_stats
from delivery_ledger.reporting.statistics import Period
from delivery_ledger.utils.config import config
from delivery_ledger.utils.file_utils import cleanup_old_exports
from delivery_ledger.utils.logger import get_logger


def parse_quantity(spec: str) -> tuple:
    """ 'Client:Material=50+30*2' -> ('Client', 'Material', '50+30*2') """
    target, sep, expression = spec.partition("=")
    client, colon, material = target.rpartition(":")
    if not sep or not colon or not client.strip() or not material.strip():
        raise ValueError(f"Quantity must look like CLIENT:MATERIAL=EXPRESSION, got {spec!r}")
    return client.strip(), material.strip(), expression


def group_quantities(specs: Sequence[str]) -> Dict[str, Dict[str, str]]:
    grouped: Dict[str, Dict[str, str]] = {}
    for spec in specs:
        client, material, expression = parse_quantity(spec)
        grouped.setdefault(client, {})[material] = expression
    return grouped


def parse_rate(spec: str) -> tuple:
    material, sep, price = spec.partition("=")
    if not sep or not material.strip():
        raise ValueError(f"Rate must look like MATERIAL=PRICE, got {spec!r}")
    return material.strip(), price.strip()


def resolve_date(date_arg: Optional[str]) -> date:
    if not date_arg:
        return date.today()
    return date.fromisoformat(date_arg)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="delivery-ledger",
        description="Material delivery ledger: daily shipments, pricing and statistics.",
    )
    parser.add_argument(
        "--ledger",
        type=str,
        default=None,
        help=f"Ledger JSON file. Defaults to LEDGER_FILE ({config.LEDGER_FILE}).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    periods = [p.value for p in Period]

    p_stats = sub.add_parser("stats", help="Totals by client and material for a period.")
    p_stats.add_argument("--period", choices=periods, default=config.DEFAULT_PERIOD)
    p_stats.add_argument("--date", help="Reference date (YYYY-MM-DD). Defaults to today.")
    p_stats.add_argument("--days", action="store_true", help="Also list the matching days.")

    p_export = sub.add_parser("export", help="Write the period's shipments to CSV.")
    p_export.add_argument("--period", choices=periods, default=config.DEFAULT_PERIOD)
    p_export.add_argument("--date", help="Reference date (YYYY-MM-DD). Defaults to today.")
    p_export.add_argument("--output", type=str, default=config.EXPORT_DIR)
    p_export.add_argument("--cleanup", action="store_true", help="Delete exports past the retention window.")

    p_add = sub.add_parser("add-day", help="Save a shipment day.")
    p_add.add_argument("--date", help="Shipment date (YYYY-MM-DD). Defaults to today.")
    p_add.add_argument(
        "--qty",
        action="append",
        default=[],
        metavar="CLIENT:MATERIAL=EXPR",
        help="Quantity for one client and material, e.g. 'Acme:Sand=50+30*2'. Repeatable.",
    )

    p_update = sub.add_parser("update-day", help="Replace the entries of a saved shipment day.")
    p_update.add_argument("day_id")
    p_update.add_argument("--date", help="New shipment date (YYYY-MM-DD). Defaults to the saved date.")
    p_update.add_argument("--qty", action="append", default=[], metavar="CLIENT:MATERIAL=EXPR")

    p_del = sub.add_parser("delete-day", help="Delete a shipment day by id.")
    p_del.add_argument("day_id")

    sub.add_parser("recent", help="Most recent shipment days.")

    p_monthly = sub.add_parser("monthly", help="Monthly calculations.")
    monthly_sub = p_monthly.add_subparsers(dest="monthly_command", required=True)
    m_save = monthly_sub.add_parser("save")
    m_save.add_argument("--month", required=True, help="1-12 or month name.")
    m_save.add_argument("--year", type=int, required=True)
    m_save.add_argument("--description", default="")
    m_save.add_argument("--qty", action="append", default=[], metavar="CLIENT:MATERIAL=EXPR")
    monthly_sub.add_parser("list")
    m_delete = monthly_sub.add_parser("delete")
    m_delete.add_argument("calc_id")

    p_material = sub.add_parser("material", help="Manage materials.")
    material_sub = p_material.add_subparsers(dest="material_command", required=True)
    material_sub.add_parser("add").add_argument("name")
    m_rename = material_sub.add_parser("rename")
    m_rename.add_argument("old_name")
    m_rename.add_argument("new_name")
    material_sub.add_parser("delete").add_argument("name")

    p_client = sub.add_parser("client", help="Manage clients.")
    client_sub = p_client.add_subparsers(dest="client_command", required=True)
    c_add = client_sub.add_parser("add")
    c_add.add_argument("name")
    c_add.add_argument("--rate", action="append", default=[], metavar="MATERIAL=PRICE")
    c_update = client_sub.add_parser("update")
    c_update.add_argument("client", help="Client id or name.")
    c_update.add_argument("--name")
    c_update.add_argument("--rate", action="append", default=[], metavar="MATERIAL=PRICE")
    client_sub.add_parser("delete").add_argument("client", help="Client id or name.")

    return parser


def run(args: argparse.Namespace) -> str:
    app = LedgerApplication(Path(args.ledger) if args.ledger else None)
    currency = config.CURRENCY_SYMBOL

    if args.command == "stats":
        days, stats = app.stats(args.period, resolve_date(args.date))
        text = render_stats(stats, args.period, currency)
        if args.days:
            text += "\n" + render_days(days, currency)
        return text

    if args.command == "export":
        path = app.export(args.period, Path(args.output), resolve_date(args.date))
        if args.cleanup:
            cleanup_old_exports(args.output)
        return f"Exported to {path}"

    if args.command == "add-day":
        day = app.add_day(resolve_date(args.date), group_quantities(args.qty))
        return f"Saved {day.id} ({day.date.isoformat()}): {day.day_total}"

    if args.command == "update-day":
        new_date = date.fromisoformat(args.date) if args.date else None
        day = app.update_day(args.day_id, group_quantities(args.qty), new_date)
        return f"Updated {day.id} ({day.date.isoformat()}): {day.day_total}"

    if args.command == "delete-day":
        day = app.delete_day(args.day_id)
        return f"Deleted {day.id} ({day.date.isoformat()})"

    if args.command == "recent":
        return render_days(app.recent_days(), currency)

    if args.command == "monthly":
        if args.monthly_command == "save":
            calc = app.save_monthly(args.month, args.year, args.description, group_quantities(args.qty))
            return f"Saved {calc.id} for {calc.month_name} {calc.year}: {calc.total}"
        if args.monthly_command == "list":
            return render_monthly(app.load().store.monthly_calculations, currency)
        calc = app.delete_monthly(args.calc_id)
        return f"Deleted {calc.id}"

    if args.command == "material":
        if args.material_command == "add":
            return f"Material added: {app.add_material(args.name)}"
        if args.material_command == "rename":
            new_name = app.rename_material(args.old_name, args.new_name)
            return f"Material renamed: {args.old_name} -> {new_name}"
        app.delete_material(args.name)
        return f"Material deleted: {args.name}"

    if args.command == "client":
        if args.client_command == "add":
            client = app.add_client(args.name, dict(parse_rate(r) for r in args.rate))
            return f"Client added: {client.name} ({client.id})"
        if args.client_command == "update":
            client = app.update_client(args.client, args.name, dict(parse_rate(r) for r in args.rate))
            return f"Client updated: {client.name} ({client.id})"
        client = app.delete_client(args.client)
        return f"Client deleted: {client.name} ({client.id})"

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    get_logger()

    try:
        print(run(args))
        return 0

    except (LedgerError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
