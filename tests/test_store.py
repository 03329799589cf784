from __future__ import annotations

from datetime import datetime

import pytest

from fleet_availability.availability.availability_models import VehicleClass, WorkOrderStatus
from fleet_availability.data.store import FleetRecordStore
from fleet_availability.errors import InvalidInputError, RecordNotFoundError, ValidationError


def test_units_crud_and_fleet_size(store):
    unit = store.add_unit("T2506", "QAH0J25")
    store.add_unit("T2507", "QAH0J26")

    assert store.fleet_size(VehicleClass.UNIT) == 2
    assert store.fleet_size("composition") == 0
    assert store.get_unit(unit.id).plate == "QAH0J25"

    assert store.update_unit(unit.id, plate="QAH9Z99") is True
    assert store.get_unit(unit.id).plate == "QAH9Z99"
    assert store.update_unit("missing", plate="XYZ123") is False

    assert store.delete_unit(unit.id) is True
    assert store.delete_unit(unit.id) is False
    assert store.fleet_size(VehicleClass.UNIT) == 1


def test_add_unit_validates(store):
    with pytest.raises(ValidationError):
        store.add_unit("T1", "AB")
    assert store.list_units() == []


def test_bulk_units_skip_duplicates(store):
    store.add_unit("T2506", "QAH0J25")
    result = store.import_units_bulk("T2506 NEW0001\nT3000 QAH0J30\nlonely\n\nT3001 QAH0J25\n")

    assert result.success == 1
    assert len(result.errors) == 3
    assert "Invalid line: lonely" in result.errors
    assert {u.fleet_name for u in store.list_units()} == {"T2506", "T3000"}


def test_compositions_bulk_and_plates(store):
    result = store.import_compositions_bulk("C01 QAH0J25 QAH0J27 QAH0J28\nC01 A B\nC02 ONLY\n")

    assert result.success == 1
    assert len(result.errors) == 2
    comp = store.list_compositions()[0]
    assert comp.identifier == "C01"
    assert comp.plates == ["QAH0J25", "QAH0J27", "QAH0J28"]
    assert (comp.first_plate, comp.second_plate) == ("QAH0J25", "QAH0J27")
    assert store.fleet_size(VehicleClass.COMPOSITION) == 1


def test_drivers_bulk_is_case_insensitive(store):
    store.add_driver("Maria Souza")
    result = store.import_drivers_bulk("maria souza\nJoão Lima\n\nJOÃO LIMA\n")

    assert result.success == 1
    assert len(result.errors) == 2
    assert sorted(d.name for d in store.list_drivers()) == ["João Lima", "Maria Souza"]


def test_work_order_lifecycle(store, record_factory):
    order = store.add_work_order(record_factory())

    assert order.id
    assert order.created_at is not None
    assert [o.id for o in store.open_work_orders()] == [order.id]

    closed = store.close_work_order(order.id, datetime(2024, 1, 1, 11, 0))
    assert closed.status is WorkOrderStatus.COMPLETED
    assert closed.closed_at == datetime(2024, 1, 1, 11, 0)
    assert store.open_work_orders() == []

    assert store.update_work_order(order.id, description="Brake pads replaced") is True
    assert store.get_work_order(order.id).description == "Brake pads replaced"

    assert store.delete_work_order(order.id) is True
    assert store.get_work_order(order.id) is None


def test_work_order_validation_and_errors(store, record_factory):
    with pytest.raises(ValidationError):
        store.add_work_order(record_factory(status="Completed"))

    order = store.add_work_order(record_factory())
    with pytest.raises(ValidationError):
        store.close_work_order(order.id, datetime(2024, 1, 1, 8, 0))
    with pytest.raises(InvalidInputError):
        store.update_work_order(order.id, colour="red")
    with pytest.raises(RecordNotFoundError):
        store.close_work_order("missing", datetime(2024, 1, 2, 8, 0))
    with pytest.raises(RecordNotFoundError):
        store.cancel_work_order("missing")

    assert store.cancel_work_order(order.id).status is WorkOrderStatus.CANCELLED


def test_orders_for_vehicle(store, record_factory):
    store.add_work_order(record_factory(vehicle_id="u1"))
    store.add_work_order(record_factory(vehicle_id="u2"))
    store.add_work_order(record_factory(vehicle_id="u1", vehicle_class="composition"))

    assert len(store.orders_for_vehicle("u1", VehicleClass.UNIT)) == 1
    assert len(store.orders_for_vehicle("u1", "composition")) == 1


def test_standby_order_lands_on_first_plate_unit(store, record_factory):
    unit = store.add_unit("T2506", "QAH0J25")
    comp = store.add_composition("C01", ["QAH0J25", "QAH0J27"])
    record = record_factory(vehicle_class="composition", vehicle_id=comp.id, description="Axle")

    standby = store.create_standby_order(comp.id, record)

    assert standby is not None
    assert standby.vehicle_class is VehicleClass.UNIT
    assert standby.vehicle_id == unit.id
    assert standby.plate == "QAH0J25"
    assert standby.is_standby is True
    assert standby.origin_composition_id == comp.id
    assert standby.description == "STAND-BY C01 - Axle"


def test_standby_order_needs_matching_unit(store, record_factory):
    comp = store.add_composition("C02", ["ZZZ0001", "ZZZ0002"])

    assert store.create_standby_order(comp.id, record_factory()) is None
    assert store.create_standby_order("missing", record_factory()) is None


def test_snapshot_round_trip_into_new_store(store, record_factory, tmp_path):
    store.add_unit("T2506", "QAH0J25")
    store.add_composition("C01", ["QAH0J25", "QAH0J27"])
    store.add_driver("Maria Souza")
    order = store.add_work_order(record_factory(is_standby=True))

    snapshot = store.export_snapshot()
    assert snapshot["compositions"][0]["plates"] == ["QAH0J25", "QAH0J27"]
    assert "exportDate" in snapshot

    other = FleetRecordStore(f"sqlite:///{tmp_path / 'restored.db'}")
    other.import_snapshot(snapshot)

    assert other.fleet_size(VehicleClass.UNIT) == 1
    assert other.list_compositions()[0].plates == ["QAH0J25", "QAH0J27"]
    assert [d.name for d in other.list_drivers()] == ["Maria Souza"]
    restored = other.get_work_order(order.id)
    assert restored == order


def test_snapshot_rejects_garbage(store):
    with pytest.raises(InvalidInputError):
        store.import_snapshot(["not", "a", "mapping"])
    with pytest.raises(InvalidInputError):
        store.import_snapshot({"work_orders": [{"vehicle_class": "unit", "status": "Open"}]})


def test_second_open_order_on_same_vehicle_is_refused(store, record_factory):
    first = store.add_work_order(record_factory(vehicle_id="u1"))

    with pytest.raises(ValidationError, match="already exists"):
        store.add_work_order(record_factory(vehicle_id="u1", opened_time="10:00"))
    assert len(store.orders_for_vehicle("u1", "unit")) == 1

    # Completed history and other vehicles are unaffected
    store.add_work_order(
        record_factory(vehicle_id="u1", status="Completed", closed_date="01-01-2024", closed_time="11:00")
    )
    store.add_work_order(record_factory(vehicle_id="u1", vehicle_class="composition"))

    store.close_work_order(first.id, datetime(2024, 1, 1, 12, 0))
    store.add_work_order(record_factory(vehicle_id="u1", opened_date="02-01-2024"))
    assert len(store.orders_for_vehicle("u1", "unit")) == 3


def test_standby_order_skipped_when_unit_already_open(store, record_factory):
    unit = store.add_unit("T2506", "QAH0J25")
    comp = store.add_composition("C01", ["QAH0J25", "QAH0J27"])
    store.add_work_order(record_factory(vehicle_id=unit.id, plate=unit.plate))

    record = record_factory(vehicle_class="composition", vehicle_id=comp.id)

    assert store.create_standby_order(comp.id, record) is None
    assert len(store.orders_for_vehicle(unit.id, "unit")) == 1


def test_failed_snapshot_restore_leaves_store_untouched(store, record_factory):
    store.add_unit("T2506", "QAH0J25")
    store.add_unit("T2507", "QAH0J26")
    store.add_driver("Maria Souza")
    order = store.add_work_order(record_factory())

    with pytest.raises(InvalidInputError):
        store.import_snapshot({
            "units": [],
            "drivers": [],
            "work_orders": [{"vehicle_class": "unit", "status": "Open"}],
        })

    assert len(store.list_units()) == 2
    assert [d.name for d in store.list_drivers()] == ["Maria Souza"]
    assert [o.id for o in store.list_work_orders()] == [order.id]
