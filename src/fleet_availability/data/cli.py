"""
Record keeping CLI: units, compositions, drivers and work orders.

Examples:
    fleet-records add-unit T2506 QAH0J25
    fleet-records add-order --vehicle-class unit --vehicle-id <id> \
        --opened-date 01-01-2024 --opened-time 09:00 --maintenance-type Corrective
    fleet-records close-order <id> --date 01-01-2024 --time 11:00
    fleet-records list-orders --status Open
"""

from __future__ import annotations

import argparse
import json
from datetime import datetime
from pathlib import Path

from fleet_availability.availability.availability_models import (
    MaintenanceType,
    VehicleClass,
    WorkOrderStatus,
)
from fleet_availability.data.fleet_models import BulkImportResult
from fleet_availability.data.store import FleetRecordStore
from fleet_availability.data.work_order_files import read_work_orders, write_work_orders
from fleet_availability.errors import FleetAvailabilityError, InvalidInputError, RecordNotFoundError
from fleet_availability.presentation.console import format_table
from fleet_availability.services.work_order_stats import (
    compute_work_order_stats,
    filter_work_orders,
    sort_work_orders,
)
from fleet_availability.utils.dates import combine, format_date, format_time
from fleet_availability.utils.logger import get_logger

log = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fleet maintenance records")
    parser.add_argument("--db", type=str, default=None, help="Database URL. Defaults to DATABASE_URL.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("add-unit", help="Register a tractor unit")
    p.add_argument("fleet_name")
    p.add_argument("plate")

    p = sub.add_parser("add-composition", help="Register a composition")
    p.add_argument("identifier")
    p.add_argument("plates", nargs="+")

    p = sub.add_parser("add-driver", help="Register a driver")
    p.add_argument("name")

    p = sub.add_parser("add-order", help="Open (or record) a work order")
    p.add_argument("--vehicle-class", required=True, choices=[v.value for v in VehicleClass])
    p.add_argument("--vehicle-id", required=True)
    p.add_argument("--plate", default="")
    p.add_argument("--driver-id", default=None)
    p.add_argument("--opened-date", required=True, help="DD-MM-YYYY")
    p.add_argument("--opened-time", required=True, help="HH:MM")
    p.add_argument("--closed-date", default=None)
    p.add_argument("--closed-time", default=None)
    p.add_argument("--expected-date", default=None, help="Expected release date DD-MM-YYYY")
    p.add_argument("--expected-time", default=None, help="Expected release time HH:MM")
    p.add_argument("--maintenance-type", default=MaintenanceType.OTHER.value)
    p.add_argument("--description", default="")
    p.add_argument("--status", default=WorkOrderStatus.OPEN.value)
    p.add_argument(
        "--standby",
        action="store_true",
        help="For a composition order, also open a stand-by order on its first-plate unit.",
    )

    p = sub.add_parser("close-order", help="Complete a work order")
    p.add_argument("order_id")
    p.add_argument("--date", default=None, help="DD-MM-YYYY (defaults to now)")
    p.add_argument("--time", default=None, help="HH:MM (defaults to now)")

    p = sub.add_parser("cancel-order", help="Cancel a work order")
    p.add_argument("order_id")

    p = sub.add_parser("list-orders", help="List work orders")
    p.add_argument("--search", default=None)
    p.add_argument("--status", default=None)
    p.add_argument("--maintenance-type", default=None)
    p.add_argument("--vehicle-class", default=None)

    for name, help_text in (
        ("import-units", "Bulk import units, one 'FLEET PLATE' per line"),
        ("import-compositions", "Bulk import compositions, one 'ID PLATE1 PLATE2 ...' per line"),
        ("import-drivers", "Bulk import drivers, one name per line"),
        ("import-orders", "Import work orders from CSV/XLSX"),
        ("export-orders", "Export work orders to CSV/XLSX"),
        ("export-json", "Write a JSON backup of every record"),
        ("import-json", "Restore records from a JSON backup"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("path", type=Path)

    sub.add_parser("stats", help="Work order statistics")

    return parser


def _print_bulk(result: BulkImportResult) -> None:
    print(f"Imported: {result.success}")
    for err in result.errors:
        print(f"  - {err}")


def _vehicle_labels(store: FleetRecordStore) -> dict:
    labels = {u.id: u.fleet_name for u in store.list_units()}
    labels.update({c.id: c.identifier for c in store.list_compositions()})
    return labels


def _cmd_add_order(store: FleetRecordStore, args) -> None:
    record = {
        "vehicle_class": args.vehicle_class,
        "vehicle_id": args.vehicle_id,
        "plate": args.plate,
        "driver_id": args.driver_id,
        "opened_date": args.opened_date,
        "opened_time": args.opened_time,
        "closed_date": args.closed_date,
        "closed_time": args.closed_time,
        "expected_release_date": args.expected_date,
        "expected_release_time": args.expected_time,
        "maintenance_type": args.maintenance_type,
        "description": args.description,
        "status": args.status,
    }
    order = store.add_work_order(record)
    print(f"Work order {order.id} ({order.status.value})")

    if args.standby and order.vehicle_class is VehicleClass.COMPOSITION:
        standby = store.create_standby_order(order.vehicle_id, record)
        if standby is None:
            print("No stand-by order: composition or first-plate unit not found")
        else:
            print(f"Stand-by work order {standby.id} on unit {standby.plate}")


def _cmd_close_order(store: FleetRecordStore, args) -> None:
    closed_at = None
    if args.date or args.time:
        now = datetime.now()
        closed_at = combine(args.date or format_date(now), args.time or format_time(now))
    order = store.close_work_order(args.order_id, closed_at)
    print(f"Work order {order.id} completed at {format_date(order.closed_at)} {format_time(order.closed_at)}")


def _cmd_list_orders(store: FleetRecordStore, args) -> None:
    orders = filter_work_orders(
        store.list_work_orders(),
        search=args.search,
        status=args.status,
        maintenance_type=args.maintenance_type,
        vehicle_class=args.vehicle_class,
        vehicle_labels=_vehicle_labels(store),
    )
    rows = [
        (
            o.id,
            o.vehicle_class.value,
            o.plate,
            f"{format_date(o.opened_at)} {format_time(o.opened_at)}",
            f"{format_date(o.closed_at)} {format_time(o.closed_at)}" if o.closed_at else "",
            o.maintenance_type.value,
            o.status.value,
            "yes" if o.is_standby else "",
        )
        for o in sort_work_orders(orders)
    ]
    print(format_table(rows, ["id", "class", "plate", "opened", "closed", "type", "status", "stand-by"]), end="")
    print(f"{len(rows)} work orders")


def _cmd_import_orders(store: FleetRecordStore, path: Path) -> None:
    orders = read_work_orders(path)
    for order in orders:
        store.add_work_order(order)
    print(f"Imported: {len(orders)} work orders")


def _cmd_stats(store: FleetRecordStore) -> None:
    s = compute_work_order_stats(store.list_work_orders())
    print(f"Total work orders:     {s.total}")
    print(f"Open:                  {s.open}")
    print(f"Completed:             {s.completed}")
    print(f"Cancelled:             {s.cancelled}")
    print(f"Mean resolution (h):   {s.mean_resolution_hours:.1f}")
    print(f"Units / Compositions:  {store.fleet_size(VehicleClass.UNIT)} / "
          f"{store.fleet_size(VehicleClass.COMPOSITION)}")


def main(argv=None) -> None:
    args = _build_parser().parse_args(argv)

    try:
        store = FleetRecordStore(args.db)
        cmd = args.command

        if cmd == "add-unit":
            unit = store.add_unit(args.fleet_name, args.plate)
            print(f"Unit {unit.id} {unit.fleet_name} {unit.plate}")
        elif cmd == "add-composition":
            comp = store.add_composition(args.identifier, args.plates)
            print(f"Composition {comp.id} {comp.identifier} {' '.join(comp.plates)}")
        elif cmd == "add-driver":
            driver = store.add_driver(args.name)
            print(f"Driver {driver.id} {driver.name}")
        elif cmd == "add-order":
            _cmd_add_order(store, args)
        elif cmd == "close-order":
            _cmd_close_order(store, args)
        elif cmd == "cancel-order":
            order = store.cancel_work_order(args.order_id)
            print(f"Work order {order.id} cancelled")
        elif cmd == "list-orders":
            _cmd_list_orders(store, args)
        elif cmd == "import-units":
            _print_bulk(store.import_units_bulk(args.path.read_text(encoding="utf-8")))
        elif cmd == "import-compositions":
            _print_bulk(store.import_compositions_bulk(args.path.read_text(encoding="utf-8")))
        elif cmd == "import-drivers":
            _print_bulk(store.import_drivers_bulk(args.path.read_text(encoding="utf-8")))
        elif cmd == "import-orders":
            _cmd_import_orders(store, args.path)
        elif cmd == "export-orders":
            path = write_work_orders(store.list_work_orders(), args.path)
            print(f"Exported work orders to {path}")
        elif cmd == "export-json":
            args.path.write_text(json.dumps(store.export_snapshot(), indent=2), encoding="utf-8")
            print(f"Backup written to {args.path}")
        elif cmd == "import-json":
            try:
                data = json.loads(args.path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                raise InvalidInputError(f"{args.path}: not a JSON backup ({e})") from e
            store.import_snapshot(data)
            print(f"Backup restored from {args.path}")
        elif cmd == "stats":
            _cmd_stats(store)

    except RecordNotFoundError as e:
        log.error("Record not found: %s", e)
        raise SystemExit(1)
    except FleetAvailabilityError as e:
        log.error("%s failed: %s", args.command, e)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
