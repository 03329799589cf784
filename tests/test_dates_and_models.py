from __future__ import annotations

from datetime import date, datetime, time

import pytest

from fleet_availability.availability.availability_models import (
    MaintenanceType,
    VehicleClass,
    WorkOrder,
    WorkOrderStatus,
)
from fleet_availability.errors import InvalidInputError
from fleet_availability.utils.dates import coerce_date, combine, parse_date, parse_time


def test_parse_date_wire_format():
    assert parse_date("05-03-2024") == date(2024, 3, 5)


@pytest.mark.parametrize("value", ["2024-03-05", "5-3-2024", "31-02-2024", "", None])
def test_parse_date_rejects(value):
    with pytest.raises(InvalidInputError):
        parse_date(value)


def test_parse_time_accepts_single_digit_hour():
    assert parse_time("9:05") == time(9, 5)
    assert parse_time("23:59") == time(23, 59)


@pytest.mark.parametrize("value", ["24:00", "12:60", "1200", "noon"])
def test_parse_time_rejects(value):
    with pytest.raises(InvalidInputError):
        parse_time(value)


def test_combine_and_coerce():
    assert combine("01-01-2024", "08:30") == datetime(2024, 1, 1, 8, 30)
    assert coerce_date("2024-01-01") == date(2024, 1, 1)
    assert coerce_date(datetime(2024, 1, 1, 23, 0)) == date(2024, 1, 1)


def test_enum_parse_is_case_insensitive():
    assert VehicleClass.parse("UNIT") is VehicleClass.UNIT
    assert WorkOrderStatus.parse("completed") is WorkOrderStatus.COMPLETED
    assert MaintenanceType.parse("stand-by") is MaintenanceType.STAND_BY
    with pytest.raises(InvalidInputError):
        WorkOrderStatus.parse("In Progress")


def test_work_order_from_record(record_factory):
    order = WorkOrder.from_record(
        record_factory(status="Completed", closed_date="01-01-2024", closed_time="11:15", is_standby="true")
    )

    assert order.vehicle_class is VehicleClass.UNIT
    assert order.status is WorkOrderStatus.COMPLETED
    assert order.opened_at == datetime(2024, 1, 1, 9, 0)
    assert order.closed_at == datetime(2024, 1, 1, 11, 15)
    assert order.maintenance_type is MaintenanceType.CORRECTIVE
    assert order.is_standby is True


def test_closing_date_without_time_is_not_a_closure(record_factory):
    order = WorkOrder.from_record(record_factory(closed_date="02-01-2024"))
    assert order.closed_at is None


def test_work_order_from_record_rejects_bad_values(record_factory):
    with pytest.raises(InvalidInputError):
        WorkOrder.from_record(record_factory(opened_time="25:00"))
    with pytest.raises(InvalidInputError):
        WorkOrder.from_record(record_factory(opened_date=None))


def test_to_record_uses_wire_format(record_factory):
    order = WorkOrder.from_record(record_factory(expected_release_date="03-01-2024", expected_release_time="07:00"))
    record = order.to_record()

    assert record["opened_date"] == "01-01-2024"
    assert record["opened_time"] == "09:00"
    assert record["closed_date"] is None
    assert record["expected_release_date"] == "03-01-2024"
    assert record["vehicle_class"] == "unit"
    assert record["status"] == "Open"
