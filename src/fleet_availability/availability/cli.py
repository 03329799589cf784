import argparse
import time
from datetime import date, datetime
from pathlib import Path

from fleet_availability.availability.availability_calculator import compute_availability
from fleet_availability.availability.availability_models import VehicleClass
from fleet_availability.data.store import FleetRecordStore
from fleet_availability.data.work_order_files import read_work_orders
from fleet_availability.errors import FleetAvailabilityError, InvalidInputError
from fleet_availability.presentation.console import render_overview
from fleet_availability.reports.chart_builder import build_hourly_chart
from fleet_availability.reports.excel_builder import write_availability_workbook
from fleet_availability.services.availability_service import (
    AvailabilityOverview,
    build_availability_overview,
    evaluate_target,
)
from fleet_availability.utils.config import AvailabilitySettings, config
from fleet_availability.utils.dates import coerce_date
from fleet_availability.utils.file_utils import cleanup_old_files
from fleet_availability.utils.logger import get_logger

logger = get_logger(__name__)


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Hourly Mechanical Availability Report"
    )

    parser.add_argument(
        "--date",
        type=str,
        default=None,
        help="Analysis date (DD-MM-YYYY or YYYY-MM-DD). Defaults to today.",
    )

    parser.add_argument(
        "--vehicle-class",
        choices=["unit", "composition", "both"],
        default="both",
        help="Which fleet to analyse.",
    )

    parser.add_argument(
        "--target",
        type=float,
        default=None,
        help="Availability target in percent. Defaults to AVAILABILITY_TARGET_PCT (90).",
    )

    parser.add_argument(
        "--db",
        type=str,
        default=None,
        help="Database URL. Defaults to DATABASE_URL.",
    )

    parser.add_argument(
        "--orders-file",
        type=Path,
        default=None,
        help="Read work orders from a CSV/XLSX file instead of the database (requires --fleet-size).",
    )

    parser.add_argument(
        "--fleet-size",
        type=int,
        default=None,
        help="Fleet size to use with --orders-file.",
    )

    parser.add_argument("--xlsx", action="store_true", help="Write the Excel workbook to OUTPUT_DIR.")
    parser.add_argument("--chart", action="store_true", help="Write hourly bar charts to OUTPUT_DIR.")

    parser.add_argument(
        "--watch",
        action="store_true",
        help="Recompute every REFRESH_INTERVAL_SECONDS while the date is today.",
    )

    args = parser.parse_args(argv)

    if args.orders_file is not None and args.fleet_size is None:
        parser.error("--orders-file requires --fleet-size")

    return args


def _selected_classes(choice: str) -> list:
    if choice == "both":
        return list(VehicleClass)
    return [VehicleClass.parse(choice)]


def _overview_from_file(args, day: date, target_pct: float, now: datetime) -> AvailabilityOverview:
    orders = read_work_orders(args.orders_file)
    classes = {
        vc: evaluate_target(
            compute_availability(args.fleet_size, orders, day, vc, now=now),
            target_pct,
        )
        for vc in _selected_classes(args.vehicle_class)
    }
    return AvailabilityOverview(target_date=day, generated_at=now, classes=classes)


def _run_once(args, day: date, settings: AvailabilitySettings) -> AvailabilityOverview:
    # One clock read per refresh; every class in the overview shares it
    now = datetime.now()
    target_pct = args.target if args.target is not None else settings.availability_target_pct

    if args.orders_file is not None:
        overview = _overview_from_file(args, day, target_pct, now)
    else:
        overview = build_availability_overview(
            FleetRecordStore(args.db),
            day,
            now=now,
            target_pct=target_pct,
            vehicle_classes=_selected_classes(args.vehicle_class),
        )

    print(render_overview(overview))

    if args.xlsx or args.chart:
        output_dir = Path(config.OUTPUT_DIR)
        if args.xlsx:
            path = write_availability_workbook(overview, output_dir)
            print(f"Workbook: {path}")
        if args.chart:
            for item in overview.classes.values():
                path = build_hourly_chart(item.report, output_dir, target_pct=item.target_pct)
                print(f"Chart: {path}")
        cleanup_old_files(output_dir, settings.report_retention_days)

    return overview


def main(argv=None) -> None:
    args = _parse_args(argv)
    settings = AvailabilitySettings()

    try:
        day = coerce_date(args.date) if args.date else date.today()
        if args.fleet_size is not None and args.fleet_size < 0:
            raise InvalidInputError(f"Fleet size must be >= 0: {args.fleet_size}")

        overview = _run_once(args, day, settings)

        while args.watch and overview.is_live_day:
            time.sleep(settings.refresh_interval_seconds)
            overview = _run_once(args, day, settings)

    except FleetAvailabilityError as e:
        logger.error("Availability report failed: %s", e)
        raise SystemExit(1)
    except KeyboardInterrupt:
        logger.info("Live refresh stopped")


if __name__ == "__main__":
    main()
