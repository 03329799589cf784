# src/fleet_availability/services/validation.py
"""
Record validation.

The calculator trusts its inputs; these checks are what make that safe.
Each validator raises ValidationError with a message fit for the operator.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from fleet_availability.availability.availability_models import (
    MaintenanceType,
    VehicleClass,
    WorkOrder,
    WorkOrderStatus,
)
from fleet_availability.errors import InvalidInputError, ValidationError
from fleet_availability.utils.dates import combine, is_blank, parse_date, parse_time


def _valid_date(value: Any) -> bool:
    try:
        parse_date(value)
        return True
    except InvalidInputError:
        return False


def _valid_time(value: Any) -> bool:
    try:
        parse_time(value)
        return True
    except InvalidInputError:
        return False


def _valid_enum(enum_cls, value: Any) -> bool:
    try:
        enum_cls.parse(value)
        return True
    except InvalidInputError:
        return False


def validate_unit(fleet_name: Any, plate: Any) -> None:
    if is_blank(plate):
        raise ValidationError("Plate is required")
    if len(str(plate).strip()) < 3:
        raise ValidationError("Plate must have at least 3 characters")
    if is_blank(fleet_name):
        raise ValidationError("Fleet name is required")


def validate_composition(
    identifier: Any,
    plates: Sequence[Any],
    first_plate: Any,
    second_plate: Any,
) -> None:
    if is_blank(identifier):
        raise ValidationError("Identifier is required")
    if not plates:
        raise ValidationError("At least one plate is required")
    if any(is_blank(p) for p in plates):
        raise ValidationError("All plates must be valid")
    if is_blank(first_plate):
        raise ValidationError("First plate is required")
    if is_blank(second_plate):
        raise ValidationError("Second plate is required")


def validate_driver(name: Any) -> None:
    if is_blank(name):
        raise ValidationError("Name is required")
    if len(str(name).strip()) < 2:
        raise ValidationError("Name must have at least 2 characters")


def validate_work_order(record: Mapping[str, Any]) -> None:
    """Validate a wire-format work order record (see WORK_ORDER_FIELDS)."""
    if is_blank(record.get("vehicle_id")):
        raise ValidationError("Vehicle is required")

    if not _valid_enum(VehicleClass, record.get("vehicle_class")):
        raise ValidationError("Invalid vehicle class")

    if is_blank(record.get("opened_date")) or not _valid_date(record.get("opened_date")):
        raise ValidationError("Invalid opening date")

    if is_blank(record.get("opened_time")) or not _valid_time(record.get("opened_time")):
        raise ValidationError("Invalid opening time")

    if not _valid_enum(MaintenanceType, record.get("maintenance_type")):
        raise ValidationError("Invalid maintenance type")

    if not _valid_enum(WorkOrderStatus, record.get("status")):
        raise ValidationError("Invalid status")

    closed_date = record.get("closed_date")
    closed_time = record.get("closed_time")

    if not is_blank(closed_date) and not _valid_date(closed_date):
        raise ValidationError("Invalid closing date")

    if not is_blank(closed_time) and not _valid_time(closed_time):
        raise ValidationError("Invalid closing time")

    if not is_blank(closed_date) and not is_blank(closed_time):
        opened = combine(record["opened_date"], record["opened_time"])
        closed = combine(closed_date, closed_time)
        if closed <= opened:
            raise ValidationError("Closing date/time must be after opening")

    status = WorkOrderStatus.parse(record.get("status"))
    if status is WorkOrderStatus.COMPLETED and (is_blank(closed_date) or is_blank(closed_time)):
        raise ValidationError("A completed work order needs a closing date and time")


def validate_unique_open_order(
    orders: Iterable[WorkOrder],
    vehicle_id: Any,
    vehicle_class: VehicleClass | str,
) -> None:
    """A vehicle may carry at most one Open work order."""
    vehicle_class = VehicleClass.parse(vehicle_class)
    for order in orders:
        if (
            order.status is WorkOrderStatus.OPEN
            and order.vehicle_id == vehicle_id
            and order.vehicle_class is vehicle_class
        ):
            raise ValidationError(
                f"An open work order already exists for {vehicle_class.value} {vehicle_id}"
            )
