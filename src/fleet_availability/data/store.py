# src/fleet_availability/data/store.py
"""
Record store for units, compositions, drivers and work orders.

SQLAlchemy Core over whatever DATABASE_URL points at (SQLite by default).
Work-order dates stay in the DD-MM-YYYY / HH:MM wire format on disk so
stored records remain readable by the existing spreadsheets.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Union

import pandas as pd
from sqlalchemy import (
    Boolean,
    Column,
    MetaData,
    String,
    Table,
    create_engine,
    delete,
    func,
    insert,
    select,
    update,
)

from fleet_availability.availability.availability_models import (
    WORK_ORDER_FIELDS,
    MaintenanceType,
    VehicleClass,
    WorkOrder,
    WorkOrderStatus,
    parse_flag,
)
from fleet_availability.data.fleet_models import BulkImportResult, Composition, Driver, Unit
from fleet_availability.errors import InvalidInputError, RecordNotFoundError, ValidationError
from fleet_availability.services.validation import (
    validate_composition,
    validate_driver,
    validate_unique_open_order,
    validate_unit,
    validate_work_order,
)
from fleet_availability.utils.config import config
from fleet_availability.utils.dates import format_date, format_time, is_blank
from fleet_availability.utils.logger import get_logger

logger = get_logger(__name__)

metadata = MetaData()

units_table = Table(
    "units",
    metadata,
    Column("id", String, primary_key=True),
    Column("fleet_name", String, nullable=False),
    Column("plate", String, nullable=False),
    Column("created_at", String),
)

compositions_table = Table(
    "compositions",
    metadata,
    Column("id", String, primary_key=True),
    Column("identifier", String, nullable=False),
    Column("plates", String, nullable=False),  # comma-separated
    Column("first_plate", String, nullable=False),
    Column("second_plate", String, nullable=False),
    Column("created_at", String),
)

drivers_table = Table(
    "drivers",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("created_at", String),
)

work_orders_table = Table(
    "work_orders",
    metadata,
    *[
        Column(name, Boolean, nullable=False, default=False)
        if name == "is_standby"
        else Column(name, String, primary_key=(name == "id"))
        for name in WORK_ORDER_FIELDS
    ],
)

WorkOrderInput = Union[WorkOrder, Mapping[str, Any]]


def _new_id() -> str:
    return str(uuid.uuid4())


def _now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


def _parse_created(value: Any) -> Optional[datetime]:
    if is_blank(value):
        return None
    return datetime.fromisoformat(str(value))


def _unit_from_row(row: Mapping[str, Any]) -> Unit:
    return Unit(
        id=row["id"],
        fleet_name=row["fleet_name"],
        plate=row["plate"],
        created_at=_parse_created(row.get("created_at")),
    )


def _composition_from_row(row: Mapping[str, Any]) -> Composition:
    plates = [p for p in str(row["plates"] or "").split(",") if p]
    return Composition(
        id=row["id"],
        identifier=row["identifier"],
        plates=plates,
        first_plate=row["first_plate"],
        second_plate=row["second_plate"],
        created_at=_parse_created(row.get("created_at")),
    )


def _driver_from_row(row: Mapping[str, Any]) -> Driver:
    return Driver(
        id=row["id"],
        name=row["name"],
        created_at=_parse_created(row.get("created_at")),
    )


def _order_record(order: WorkOrderInput) -> Dict[str, Any]:
    if isinstance(order, WorkOrder):
        return order.to_record()
    record = {name: order.get(name) for name in WORK_ORDER_FIELDS}
    if is_blank(record.get("maintenance_type")):
        record["maintenance_type"] = MaintenanceType.OTHER.value
    return record


def _normalise_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """Canonical enum spellings and blank -> None before writing."""
    out = {k: (None if is_blank(v) else v) for k, v in record.items()}
    out["vehicle_class"] = VehicleClass.parse(out["vehicle_class"]).value
    out["status"] = WorkOrderStatus.parse(out["status"]).value
    out["maintenance_type"] = MaintenanceType.parse(out["maintenance_type"]).value
    out["is_standby"] = parse_flag(record.get("is_standby"))
    return out


class FleetRecordStore:
    """
    CRUD over the four record collections.

    Add/update validate before writing and raise ValidationError.
    Update/delete return False when the id does not exist.
    """

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or config.SQLALCHEMY_DATABASE_URI
        self.engine = create_engine(self.database_url)
        metadata.create_all(self.engine)
        logger.debug("Record store ready | db=%s", self.database_url)

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------
    def _read(self, table: Table, *criteria) -> List[Dict[str, Any]]:
        stmt = select(table).where(*criteria) if criteria else select(table)
        with self.engine.connect() as conn:
            df = pd.read_sql(stmt, conn)
        df = df.astype(object).where(df.notna(), None)
        return df.to_dict("records")

    def _update(self, table: Table, record_id: str, values: Dict[str, Any]) -> bool:
        with self.engine.begin() as conn:
            result = conn.execute(update(table).where(table.c.id == record_id).values(**values))
        return result.rowcount > 0

    def _delete(self, table: Table, record_id: str) -> bool:
        with self.engine.begin() as conn:
            result = conn.execute(delete(table).where(table.c.id == record_id))
        return result.rowcount > 0

    @staticmethod
    def _replace_all(conn, table: Table, rows: List[Dict[str, Any]]) -> None:
        conn.execute(delete(table))
        if rows:
            conn.execute(insert(table), rows)

    # ------------------------------------------------------------
    # Units
    # ------------------------------------------------------------
    def list_units(self) -> List[Unit]:
        return [_unit_from_row(r) for r in self._read(units_table)]

    def get_unit(self, unit_id: str) -> Optional[Unit]:
        rows = self._read(units_table, units_table.c.id == unit_id)
        return _unit_from_row(rows[0]) if rows else None

    def add_unit(self, fleet_name: str, plate: str) -> Unit:
        validate_unit(fleet_name, plate)
        unit = Unit(
            id=_new_id(),
            fleet_name=fleet_name.strip(),
            plate=plate.strip(),
            created_at=datetime.now().replace(microsecond=0),
        )
        with self.engine.begin() as conn:
            conn.execute(
                insert(units_table).values(
                    id=unit.id,
                    fleet_name=unit.fleet_name,
                    plate=unit.plate,
                    created_at=unit.created_at.isoformat(),
                )
            )
        logger.info("Unit added | %s %s", unit.fleet_name, unit.plate)
        return unit

    def update_unit(self, unit_id: str, **changes) -> bool:
        current = self.get_unit(unit_id)
        if current is None:
            return False
        merged = replace(current, **changes)
        validate_unit(merged.fleet_name, merged.plate)
        return self._update(units_table, unit_id, {"fleet_name": merged.fleet_name, "plate": merged.plate})

    def delete_unit(self, unit_id: str) -> bool:
        return self._delete(units_table, unit_id)

    def import_units_bulk(self, text: str) -> BulkImportResult:
        """One `FLEET_NAME PLATE` per line; existing fleet names or plates are skipped."""
        units = self.list_units()
        success = 0
        errors: List[str] = []

        for line in (ln for ln in text.splitlines() if ln.strip()):
            parts = line.split()
            if len(parts) < 2:
                errors.append(f"Invalid line: {line}")
                continue

            fleet_name, plate = parts[0], parts[1]
            if any(u.fleet_name == fleet_name or u.plate == plate for u in units):
                errors.append(f"Unit {fleet_name} {plate} already exists")
                continue

            units.append(self.add_unit(fleet_name, plate))
            success += 1

        return BulkImportResult(success=success, errors=errors)

    # ------------------------------------------------------------
    # Compositions
    # ------------------------------------------------------------
    def list_compositions(self) -> List[Composition]:
        return [_composition_from_row(r) for r in self._read(compositions_table)]

    def get_composition(self, composition_id: str) -> Optional[Composition]:
        rows = self._read(compositions_table, compositions_table.c.id == composition_id)
        return _composition_from_row(rows[0]) if rows else None

    def add_composition(
        self,
        identifier: str,
        plates: List[str],
        first_plate: Optional[str] = None,
        second_plate: Optional[str] = None,
    ) -> Composition:
        plates = [p.strip() for p in plates]
        if first_plate is None and plates:
            first_plate = plates[0]
        if second_plate is None and len(plates) > 1:
            second_plate = plates[1]

        validate_composition(identifier, plates, first_plate, second_plate)

        comp = Composition(
            id=_new_id(),
            identifier=identifier.strip(),
            plates=plates,
            first_plate=first_plate.strip(),
            second_plate=second_plate.strip(),
            created_at=datetime.now().replace(microsecond=0),
        )
        with self.engine.begin() as conn:
            conn.execute(
                insert(compositions_table).values(
                    id=comp.id,
                    identifier=comp.identifier,
                    plates=",".join(comp.plates),
                    first_plate=comp.first_plate,
                    second_plate=comp.second_plate,
                    created_at=comp.created_at.isoformat(),
                )
            )
        logger.info("Composition added | %s %s", comp.identifier, ",".join(comp.plates))
        return comp

    def update_composition(self, composition_id: str, **changes) -> bool:
        current = self.get_composition(composition_id)
        if current is None:
            return False
        merged = replace(current, **changes)
        validate_composition(merged.identifier, merged.plates, merged.first_plate, merged.second_plate)
        return self._update(
            compositions_table,
            composition_id,
            {
                "identifier": merged.identifier,
                "plates": ",".join(merged.plates),
                "first_plate": merged.first_plate,
                "second_plate": merged.second_plate,
            },
        )

    def delete_composition(self, composition_id: str) -> bool:
        return self._delete(compositions_table, composition_id)

    def import_compositions_bulk(self, text: str) -> BulkImportResult:
        """One `IDENTIFIER PLATE1 PLATE2 [PLATE...]` per line; existing identifiers are skipped."""
        compositions = self.list_compositions()
        success = 0
        errors: List[str] = []

        for line in (ln for ln in text.splitlines() if ln.strip()):
            parts = line.split()
            if len(parts) < 3:
                errors.append(f"Invalid line: {line}")
                continue

            identifier = parts[0]
            if any(c.identifier == identifier for c in compositions):
                errors.append(f"Composition {identifier} already exists")
                continue

            compositions.append(
                self.add_composition(identifier, parts[1:], first_plate=parts[1], second_plate=parts[2])
            )
            success += 1

        return BulkImportResult(success=success, errors=errors)

    # ------------------------------------------------------------
    # Drivers
    # ------------------------------------------------------------
    def list_drivers(self) -> List[Driver]:
        return [_driver_from_row(r) for r in self._read(drivers_table)]

    def get_driver(self, driver_id: str) -> Optional[Driver]:
        rows = self._read(drivers_table, drivers_table.c.id == driver_id)
        return _driver_from_row(rows[0]) if rows else None

    def add_driver(self, name: str) -> Driver:
        validate_driver(name)
        driver = Driver(id=_new_id(), name=name.strip(), created_at=datetime.now().replace(microsecond=0))
        with self.engine.begin() as conn:
            conn.execute(
                insert(drivers_table).values(
                    id=driver.id, name=driver.name, created_at=driver.created_at.isoformat()
                )
            )
        logger.info("Driver added | %s", driver.name)
        return driver

    def update_driver(self, driver_id: str, **changes) -> bool:
        current = self.get_driver(driver_id)
        if current is None:
            return False
        merged = replace(current, **changes)
        validate_driver(merged.name)
        return self._update(drivers_table, driver_id, {"name": merged.name})

    def delete_driver(self, driver_id: str) -> bool:
        return self._delete(drivers_table, driver_id)

    def import_drivers_bulk(self, text: str) -> BulkImportResult:
        """One name per line; names already present (any case) are skipped."""
        known = {d.name.lower() for d in self.list_drivers()}
        success = 0
        errors: List[str] = []

        for line in text.splitlines():
            name = line.strip()
            if not name:
                continue
            if name.lower() in known:
                errors.append(f"Driver {name} already exists")
                continue
            self.add_driver(name)
            known.add(name.lower())
            success += 1

        return BulkImportResult(success=success, errors=errors)

    # ------------------------------------------------------------
    # Work orders
    # ------------------------------------------------------------
    def list_work_orders(self) -> List[WorkOrder]:
        return [WorkOrder.from_record(r) for r in self._read(work_orders_table)]

    def get_work_order(self, order_id: str) -> Optional[WorkOrder]:
        rows = self._read(work_orders_table, work_orders_table.c.id == order_id)
        return WorkOrder.from_record(rows[0]) if rows else None

    def add_work_order(self, order: WorkOrderInput) -> WorkOrder:
        record = _order_record(order)
        validate_work_order(record)
        if WorkOrderStatus.parse(record["status"]) is WorkOrderStatus.OPEN:
            validate_unique_open_order(
                self.list_work_orders(), record["vehicle_id"], record["vehicle_class"]
            )

        record = _normalise_record(record)
        record["id"] = _new_id()
        record["created_at"] = _now_iso()

        with self.engine.begin() as conn:
            conn.execute(insert(work_orders_table).values(**record))

        logger.info(
            "Work order added | id=%s class=%s vehicle=%s status=%s",
            record["id"], record["vehicle_class"], record["vehicle_id"], record["status"],
        )
        return WorkOrder.from_record(record)

    def update_work_order(self, order_id: str, **changes) -> bool:
        """`changes` use wire-format keys (opened_date, closed_time, status, ...)."""
        current = self.get_work_order(order_id)
        if current is None:
            return False

        unknown = set(changes) - set(WORK_ORDER_FIELDS)
        if unknown:
            raise InvalidInputError(f"Unknown work order fields: {sorted(unknown)}")

        record = current.to_record()
        record.update(changes)
        validate_work_order(record)

        record = _normalise_record(record)
        record.pop("id")
        return self._update(work_orders_table, order_id, record)

    def close_work_order(self, order_id: str, closed_at: Optional[datetime] = None) -> WorkOrder:
        closed_at = closed_at or datetime.now().replace(second=0, microsecond=0)
        updated = self.update_work_order(
            order_id,
            status=WorkOrderStatus.COMPLETED.value,
            closed_date=format_date(closed_at),
            closed_time=format_time(closed_at),
        )
        if not updated:
            raise RecordNotFoundError(f"Work order not found: {order_id}")
        logger.info("Work order closed | id=%s at=%s", order_id, closed_at)
        return self.get_work_order(order_id)

    def cancel_work_order(self, order_id: str) -> WorkOrder:
        if not self.update_work_order(order_id, status=WorkOrderStatus.CANCELLED.value):
            raise RecordNotFoundError(f"Work order not found: {order_id}")
        logger.info("Work order cancelled | id=%s", order_id)
        return self.get_work_order(order_id)

    def delete_work_order(self, order_id: str) -> bool:
        return self._delete(work_orders_table, order_id)

    def orders_for_vehicle(self, vehicle_id: str, vehicle_class: VehicleClass | str) -> List[WorkOrder]:
        vehicle_class = VehicleClass.parse(vehicle_class)
        return [
            o for o in self.list_work_orders()
            if o.vehicle_id == vehicle_id and o.vehicle_class is vehicle_class
        ]

    def open_work_orders(self) -> List[WorkOrder]:
        return [o for o in self.list_work_orders() if o.status is WorkOrderStatus.OPEN]

    def create_standby_order(self, composition_id: str, order: WorkOrderInput) -> Optional[WorkOrder]:
        """
        Mirror a composition's work order onto the tractor carrying its first plate.

        Returns None when the composition or that unit cannot be found, or when
        an Open stand-by order would be a second open order on that unit.
        """
        comp = self.get_composition(composition_id)
        if comp is None or not comp.plates:
            return None

        unit = next((u for u in self.list_units() if u.plate == comp.plates[0]), None)
        if unit is None:
            logger.warning(
                "No unit with plate %s for stand-by of composition %s", comp.plates[0], comp.identifier
            )
            return None

        record = _order_record(order)
        record.update(
            vehicle_class=VehicleClass.UNIT.value,
            vehicle_id=unit.id,
            plate=unit.plate,
            description=f"STAND-BY {comp.identifier} - {record.get('description') or ''}",
            is_standby=True,
            origin_composition_id=composition_id,
        )
        if WorkOrderStatus.parse(record.get("status")) is WorkOrderStatus.OPEN:
            try:
                validate_unique_open_order(self.list_work_orders(), unit.id, VehicleClass.UNIT)
            except ValidationError as e:
                logger.warning("Stand-by order skipped | unit=%s | %s", unit.plate, e)
                return None
        return self.add_work_order(record)

    # ------------------------------------------------------------
    # Fleet counts
    # ------------------------------------------------------------
    def fleet_size(self, vehicle_class: VehicleClass | str) -> int:
        table = units_table if VehicleClass.parse(vehicle_class) is VehicleClass.UNIT else compositions_table
        with self.engine.connect() as conn:
            return int(conn.execute(select(func.count()).select_from(table)).scalar_one())

    # ------------------------------------------------------------
    # Snapshot (backup / restore)
    # ------------------------------------------------------------
    def export_snapshot(self) -> Dict[str, Any]:
        return {
            "units": self._read(units_table),
            "compositions": [
                {**r, "plates": [p for p in str(r["plates"] or "").split(",") if p]}
                for r in self._read(compositions_table)
            ],
            "drivers": self._read(drivers_table),
            "work_orders": [
                {**r, "is_standby": bool(r.get("is_standby"))}
                for r in self._read(work_orders_table)
            ],
            "exportDate": _now_iso(),
        }

    def import_snapshot(self, data: Mapping[str, Any]) -> None:
        """
        Replace every collection present in `data`; absent collections are left alone.

        All records are checked before anything is written, and the replace runs
        in a single transaction, so a bad snapshot leaves the store untouched.
        """
        if not isinstance(data, Mapping):
            raise InvalidInputError("Snapshot must be a JSON object")

        replacements = []
        try:
            if "units" in data:
                replacements.append(
                    (units_table, [{c: r.get(c) for c in units_table.c.keys()} for r in data["units"]])
                )
            if "compositions" in data:
                rows = []
                for r in data["compositions"]:
                    row = {c: r.get(c) for c in compositions_table.c.keys()}
                    if isinstance(row["plates"], list):
                        row["plates"] = ",".join(row["plates"])
                    rows.append(row)
                replacements.append((compositions_table, rows))
            if "drivers" in data:
                replacements.append(
                    (drivers_table, [{c: r.get(c) for c in drivers_table.c.keys()} for r in data["drivers"]])
                )
            if "work_orders" in data:
                rows = []
                for r in data["work_orders"]:
                    WorkOrder.from_record(r)
                    rows.append(_normalise_record({name: r.get(name) for name in WORK_ORDER_FIELDS}))
                replacements.append((work_orders_table, rows))
        except (AttributeError, TypeError) as e:
            raise InvalidInputError(f"Malformed snapshot: {e}") from e

        with self.engine.begin() as conn:
            for table, rows in replacements:
                self._replace_all(conn, table, rows)

        logger.info("Snapshot imported | collections=%s", sorted(k for k in data if k != "exportDate"))
