"""Shared fixtures: a throwaway SQLite store and a work-order factory."""

from __future__ import annotations

from datetime import datetime

import pytest

from fleet_availability.availability.availability_models import (
    VehicleClass,
    WorkOrder,
    WorkOrderStatus,
)
from fleet_availability.data.store import FleetRecordStore


@pytest.fixture
def store(tmp_path) -> FleetRecordStore:
    return FleetRecordStore(f"sqlite:///{tmp_path / 'fleet.db'}")


def make_order(
    opened: datetime,
    closed: datetime | None = None,
    status: WorkOrderStatus = WorkOrderStatus.OPEN,
    vehicle_class: VehicleClass = VehicleClass.UNIT,
    vehicle_id: str = "u1",
) -> WorkOrder:
    return WorkOrder(
        vehicle_class=vehicle_class,
        status=status,
        opened_at=opened,
        closed_at=closed,
        vehicle_id=vehicle_id,
    )


@pytest.fixture
def order_factory():
    return make_order


def order_record(**overrides) -> dict:
    record = {
        "vehicle_class": "unit",
        "vehicle_id": "u1",
        "plate": "ABC1234",
        "opened_date": "01-01-2024",
        "opened_time": "09:00",
        "maintenance_type": "Corrective",
        "description": "Brake check",
        "status": "Open",
    }
    record.update(overrides)
    return record


@pytest.fixture
def record_factory():
    return order_record
