# tests/test_cli.py
from __future__ import annotations

import json

import pytest

from delivery_ledger.cli.ledger_cli import group_quantities, main, parse_quantity, parse_rate


@pytest.fixture
def ledger(tmp_path):
    path = tmp_path / "ledger.json"
    base = ["--ledger", str(path)]
    assert main(base + ["material", "add", "Sand"]) == 0
    assert main(base + ["material", "add", "Gravel"]) == 0
    assert main(base + ["client", "add", "Acme", "--rate", "Sand=12", "--rate", "Gravel=15"]) == 0
    return path


def _run(ledger, *argv):
    return main(["--ledger", str(ledger), *argv])


def test_parse_quantity():
    assert parse_quantity("Acme:Sand=50+30*2") == ("Acme", "Sand", "50+30*2")
    assert parse_quantity("Acme: Ltd:Sand=5") == ("Acme: Ltd", "Sand", "5")
    with pytest.raises(ValueError):
        parse_quantity("Acme=5")
    with pytest.raises(ValueError):
        parse_quantity("Acme:Sand")


def test_group_quantities():
    assert group_quantities(["A:Sand=1", "A:Gravel=2", "B:Sand=3"]) == {
        "A": {"Sand": "1", "Gravel": "2"},
        "B": {"Sand": "3"},
    }


def test_parse_rate():
    assert parse_rate("Sand = 12.5") == ("Sand", "12.5")
    with pytest.raises(ValueError):
        parse_rate("Sand")


def test_add_day_and_stats(ledger, capsys):
    capsys.readouterr()
    assert _run(ledger, "add-day", "--date", "2025-11-22", "--qty", "Acme:Sand=50+30*2") == 0
    out = capsys.readouterr().out
    assert "(2025-11-22): 1320" in out

    assert _run(ledger, "stats", "--period", "month", "--date", "2025-11-30", "--days") == 0
    out = capsys.readouterr().out
    assert "SHIPMENT STATISTICS - MONTH" in out
    assert "Shipment days:  1" in out
    assert "1,320.00" in out
    assert "Acme" in out

    data = json.loads(ledger.read_text(encoding="utf-8"))
    assert data["shipment_days"][0]["day_total"] == "1320"


def test_stats_empty_period(ledger, capsys):
    capsys.readouterr()
    assert _run(ledger, "stats", "--period", "week", "--date", "2025-11-30") == 0
    assert "No shipment days recorded for the selected period." in capsys.readouterr().out


def test_invalid_quantity_saves_nothing(ledger, capsys):
    before = ledger.read_text(encoding="utf-8")
    capsys.readouterr()

    assert _run(ledger, "add-day", "--date", "2025-11-22", "--qty", "Acme:Sand=5kg") == 1
    assert "ERROR: Invalid characters in expression" in capsys.readouterr().err
    assert ledger.read_text(encoding="utf-8") == before


def test_empty_day_rejected(ledger, capsys):
    capsys.readouterr()
    assert _run(ledger, "add-day", "--date", "2025-11-22", "--qty", "Acme:Sand=0") == 1
    assert "ERROR:" in capsys.readouterr().err
    assert json.loads(ledger.read_text(encoding="utf-8"))["shipment_days"] == []


def test_unknown_client_and_material(ledger, capsys):
    capsys.readouterr()
    assert _run(ledger, "add-day", "--qty", "Nobody:Sand=1") == 1
    assert "Client not found: Nobody" in capsys.readouterr().err
    assert _run(ledger, "add-day", "--qty", "Acme:Clay=1") == 1
    assert "Material not found: Clay" in capsys.readouterr().err


def test_export_writes_bom_csv(ledger, tmp_path, capsys):
    _run(ledger, "add-day", "--date", "2025-11-22", "--qty", "Acme:Sand=110")
    out_dir = tmp_path / "exports"
    capsys.readouterr()

    assert _run(ledger, "export", "--period", "all", "--date", "2025-11-30", "--output", str(out_dir)) == 0
    path = out_dir / "shipments_2025-11-30_UTF8.csv"
    assert f"Exported to {path}" in capsys.readouterr().out

    data = path.read_bytes()
    assert data.startswith(b"\xef\xbb\xbf")
    assert data.decode("utf-8-sig").splitlines()[1] == "22/11/2025,Acme,Sand,110,12,1320,1320"


def test_delete_day(ledger, capsys):
    _run(ledger, "add-day", "--date", "2025-11-22", "--qty", "Acme:Gravel=2")
    day_id = json.loads(ledger.read_text(encoding="utf-8"))["shipment_days"][0]["id"]
    capsys.readouterr()

    assert _run(ledger, "delete-day", day_id) == 0
    assert f"Deleted {day_id}" in capsys.readouterr().out
    assert _run(ledger, "delete-day", day_id) == 1


def test_monthly_save_list_delete(ledger, capsys):
    capsys.readouterr()
    assert _run(ledger, "monthly", "save", "--month", "November", "--year", "2025", "--qty", "Acme:Sand=10") == 0
    assert "for November 2025: 120" in capsys.readouterr().out

    assert _run(ledger, "monthly", "list") == 0
    assert "November 2025" in capsys.readouterr().out

    calc_id = json.loads(ledger.read_text(encoding="utf-8"))["monthly_calculations"][0]["id"]
    assert _run(ledger, "monthly", "delete", calc_id) == 0
    assert json.loads(ledger.read_text(encoding="utf-8"))["monthly_calculations"] == []


def test_material_rename_keeps_history(ledger, capsys):
    _run(ledger, "add-day", "--date", "2025-11-22", "--qty", "Acme:Sand=1")
    capsys.readouterr()

    assert _run(ledger, "material", "rename", "Sand", "Fine Sand") == 0
    assert "Material renamed: Sand -> Fine Sand" in capsys.readouterr().out

    data = json.loads(ledger.read_text(encoding="utf-8"))
    assert data["materials"] == ["Fine Sand", "Gravel"]
    assert data["clients"][0]["rates"]["Fine Sand"] == "12"
    assert data["shipment_days"][0]["client_entries"][0]["line_items"][0]["material"] == "Sand"


def test_duplicate_material_rejected(ledger, capsys):
    capsys.readouterr()
    assert _run(ledger, "material", "add", "Sand") == 1
    assert "Material already exists: Sand" in capsys.readouterr().err


def test_recent(ledger, capsys):
    _run(ledger, "add-day", "--date", "2025-11-22", "--qty", "Acme:Sand=1")
    _run(ledger, "add-day", "--date", "2025-11-24", "--qty", "Acme:Sand=2")
    capsys.readouterr()

    assert _run(ledger, "recent") == 0
    out = capsys.readouterr().out
    assert out.index("2025-11-24") < out.index("2025-11-22")


def test_update_day_replaces_entries_and_keeps_id(ledger, capsys):
    _run(ledger, "add-day", "--date", "2025-11-22", "--qty", "Acme:Sand=10")
    day_id = json.loads(ledger.read_text(encoding="utf-8"))["shipment_days"][0]["id"]
    capsys.readouterr()

    assert _run(ledger, "update-day", day_id, "--qty", "Acme:Gravel=2", "--qty", "Acme:Sand=1") == 0
    assert f"Updated {day_id} (2025-11-22): 42" in capsys.readouterr().out

    days = json.loads(ledger.read_text(encoding="utf-8"))["shipment_days"]
    assert [d["id"] for d in days] == [day_id]
    assert days[0]["day_total"] == "42"

    assert _run(ledger, "update-day", day_id, "--date", "2025-11-23", "--qty", "Acme:Sand=1") == 0
    assert json.loads(ledger.read_text(encoding="utf-8"))["shipment_days"][0]["date"] == "2025-11-23"


def test_update_day_errors_leave_file_untouched(ledger, capsys):
    _run(ledger, "add-day", "--date", "2025-11-22", "--qty", "Acme:Sand=10")
    day_id = json.loads(ledger.read_text(encoding="utf-8"))["shipment_days"][0]["id"]
    before = ledger.read_text(encoding="utf-8")
    capsys.readouterr()

    assert _run(ledger, "update-day", day_id, "--qty", "Acme:Sand=0") == 1
    assert _run(ledger, "update-day", "day-missing", "--qty", "Acme:Sand=1") == 1
    assert "Shipment day not found: day-missing" in capsys.readouterr().err
    assert ledger.read_text(encoding="utf-8") == before


def test_client_update_keeps_unlisted_rates(ledger, capsys):
    capsys.readouterr()
    assert _run(ledger, "client", "update", "Acme", "--name", "Acme SA", "--rate", "Sand=13") == 0
    assert "Client updated: Acme SA" in capsys.readouterr().out

    client = json.loads(ledger.read_text(encoding="utf-8"))["clients"][0]
    assert client["name"] == "Acme SA"
    assert client["rates"] == {"Sand": "13", "Gravel": "15"}


def test_client_delete(ledger, capsys):
    _run(ledger, "add-day", "--date", "2025-11-22", "--qty", "Acme:Sand=10")
    capsys.readouterr()

    assert _run(ledger, "client", "delete", "Acme") == 0
    assert "Client deleted: Acme" in capsys.readouterr().out

    data = json.loads(ledger.read_text(encoding="utf-8"))
    assert data["clients"] == []
    assert data["shipment_days"][0]["client_entries"][0]["client_name"] == "Acme"

    assert _run(ledger, "client", "delete", "Acme") == 1
    assert "Client not found: Acme" in capsys.readouterr().err
