from __future__ import annotations

import json

import pytest

from fleet_availability.availability import cli as availability_cli
from fleet_availability.data import cli as records_cli
from fleet_availability.data.store import FleetRecordStore


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'cli.db'}"


def test_availability_from_orders_file(tmp_path, capsys):
    orders = tmp_path / "orders.csv"
    orders.write_text(
        "vehicle_class,status,opened_date,opened_time,closed_date,closed_time\n"
        "unit,Completed,01-01-2024,09:00,01-01-2024,11:00\n",
        encoding="utf-8",
    )

    availability_cli.main(
        ["--date", "01-01-2024", "--orders-file", str(orders), "--fleet-size", "2", "--vehicle-class", "unit"]
    )

    out = capsys.readouterr().out
    assert "UNITS (TRACTORS)" in out
    assert "COMPOSITIONS" not in out
    assert "Full day" in out
    assert "93.8" in out


def test_availability_bad_date_exits_nonzero(capsys):
    with pytest.raises(SystemExit) as exc:
        availability_cli.main(["--date", "2024/01/01", "--orders-file", "x.csv", "--fleet-size", "1"])
    assert exc.value.code == 1


def test_availability_from_database(db_url, capsys):
    records_cli.main(["--db", db_url, "add-unit", "T2506", "QAH0J25"])
    records_cli.main(["--db", db_url, "add-composition", "C01", "QAH0J27", "QAH0J28"])
    capsys.readouterr()

    availability_cli.main(["--db", db_url, "--date", "2024-01-01", "--target", "95"])

    out = capsys.readouterr().out
    assert "UNITS (TRACTORS)" in out
    assert "COMPOSITIONS" in out
    assert "Target 95.0%" in out


def test_records_order_lifecycle(db_url, capsys):
    records_cli.main(["--db", db_url, "add-unit", "T2506", "QAH0J25"])
    unit = FleetRecordStore(db_url).list_units()[0]

    records_cli.main([
        "--db", db_url, "add-order",
        "--vehicle-class", "unit",
        "--vehicle-id", unit.id,
        "--plate", unit.plate,
        "--opened-date", "01-01-2024",
        "--opened-time", "09:00",
        "--maintenance-type", "Corrective",
    ])
    order = FleetRecordStore(db_url).list_work_orders()[0]

    records_cli.main(["--db", db_url, "close-order", order.id, "--date", "01-01-2024", "--time", "12:30"])
    records_cli.main(["--db", db_url, "stats"])

    out = capsys.readouterr().out
    assert "completed at 01-01-2024 12:30" in out
    assert "Completed:             1" in out
    assert "Mean resolution (h):   3.5" in out


def test_records_invalid_input_exits_nonzero(db_url):
    with pytest.raises(SystemExit) as exc:
        records_cli.main(["--db", db_url, "add-unit", "T1", "AB"])
    assert exc.value.code == 1

    with pytest.raises(SystemExit) as exc:
        records_cli.main(["--db", db_url, "close-order", "missing"])
    assert exc.value.code == 1


def test_records_bulk_import_and_json_backup(db_url, tmp_path, capsys):
    units = tmp_path / "units.txt"
    units.write_text("T2506 QAH0J25\nT2507 QAH0J26\n", encoding="utf-8")
    backup = tmp_path / "backup.json"

    records_cli.main(["--db", db_url, "import-units", str(units)])
    records_cli.main(["--db", db_url, "export-json", str(backup)])

    data = json.loads(backup.read_text(encoding="utf-8"))
    assert len(data["units"]) == 2

    restored_url = f"sqlite:///{tmp_path / 'restored.db'}"
    records_cli.main(["--db", restored_url, "import-json", str(backup)])
    assert FleetRecordStore(restored_url).fleet_size("unit") == 2

    assert "Imported: 2" in capsys.readouterr().out
