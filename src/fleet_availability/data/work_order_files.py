# src/fleet_availability/data/work_order_files.py
"""
CSV / XLSX exchange of work orders.

Reads and writes the column layout of WORK_ORDER_FIELDS only; every cell is
read as text so DD-MM-YYYY and HH:MM survive untouched.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

import pandas as pd

from fleet_availability.availability.availability_models import WORK_ORDER_FIELDS, WorkOrder
from fleet_availability.errors import InvalidInputError
from fleet_availability.utils.logger import get_logger

logger = get_logger(__name__)

_REQUIRED_COLUMNS = {"vehicle_class", "status", "opened_date", "opened_time"}


def _check_suffix(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix not in (".csv", ".xlsx"):
        raise InvalidInputError(f"Unsupported work order file type: {path.name} (use .csv or .xlsx)")
    return suffix


def read_work_orders(path: str | Path) -> List[WorkOrder]:
    """
    Load work orders from a CSV or XLSX file.

    Raises InvalidInputError when columns are missing or a row does not parse;
    the message carries the spreadsheet row number.
    """
    path = Path(path)
    suffix = _check_suffix(path)

    if suffix == ".csv":
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    else:
        df = pd.read_excel(path, dtype=str, engine="openpyxl").fillna("")

    missing = _REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise InvalidInputError(f"{path.name}: missing columns {sorted(missing)}")

    orders: List[WorkOrder] = []
    for idx, row in df.iterrows():
        try:
            orders.append(WorkOrder.from_record(row.to_dict()))
        except InvalidInputError as e:
            # +2: header row and 1-based numbering
            raise InvalidInputError(f"{path.name} row {idx + 2}: {e}") from e

    logger.info("Read %d work orders from %s", len(orders), path)
    return orders


def write_work_orders(orders: Iterable[WorkOrder], path: str | Path) -> Path:
    path = Path(path)
    suffix = _check_suffix(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame([o.to_record() for o in orders], columns=WORK_ORDER_FIELDS)

    if suffix == ".csv":
        df.to_csv(path, index=False)
    else:
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Work Orders", index=False)

    logger.info("Wrote %d work orders to %s", len(df), path)
    return path
