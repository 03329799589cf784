from __future__ import annotations

from datetime import datetime

import pytest

from fleet_availability.availability.availability_models import VehicleClass
from fleet_availability.services.availability_service import build_availability_overview


@pytest.fixture
def populated(store, record_factory):
    u1 = store.add_unit("T2506", "QAH0J25")
    store.add_unit("T2507", "QAH0J26")
    comp = store.add_composition("C01", ["QAH0J27", "QAH0J28"])

    # Unit down 09:00-11:00, composition down from 06:00 onwards
    store.add_work_order(
        record_factory(vehicle_id=u1.id, status="Completed", closed_date="01-01-2024", closed_time="11:00")
    )
    store.add_work_order(
        record_factory(vehicle_class="composition", vehicle_id=comp.id, opened_time="06:00")
    )
    # Cancelled orders never count
    store.add_work_order(record_factory(vehicle_id=u1.id, opened_time="00:00", status="Cancelled"))
    return store


def test_overview_covers_both_classes(populated):
    now = datetime(2024, 3, 1, 10, 0)
    overview = build_availability_overview(populated, "01-01-2024", now=now, target_pct=90)

    units = overview.classes[VehicleClass.UNIT]
    comps = overview.classes[VehicleClass.COMPOSITION]

    assert overview.is_live_day is False
    assert overview.generated_at == now
    assert units.report.fleet_size == 2
    assert units.report.hourly[10].availability_percent == 50.0
    assert units.report.mean_availability_percent == pytest.approx((3 * 50 + 21 * 100) / 24)
    assert units.target_met is True

    assert comps.report.fleet_size == 1
    assert comps.report.hourly[5].available_count == 1
    assert comps.report.hourly[6].available_count == 0
    assert comps.report.mean_availability_percent == pytest.approx(6 * 100 / 24)
    assert comps.target_met is False


def test_overview_live_day_shares_one_clock(populated):
    now = datetime(2024, 1, 1, 7, 15)
    overview = build_availability_overview(populated, "01-01-2024", now=now, target_pct=80)

    assert overview.is_live_day is True
    for item in overview.classes.values():
        assert item.report.current_hour == 7
        assert item.report.generated_at == now
        assert sum(1 for s in item.report.hourly if s.is_future_hour) == 16


def test_overview_single_class_and_default_target(populated):
    overview = build_availability_overview(
        populated, "02-01-2024", now=datetime(2024, 3, 1, 10, 0), vehicle_classes=["unit"]
    )

    assert list(overview.classes) == [VehicleClass.UNIT]
    assert overview.classes[VehicleClass.UNIT].target_pct == 90.0
