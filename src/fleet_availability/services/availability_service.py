# src/fleet_availability/services/availability_service.py
"""
Availability overview: both vehicle classes for one day, checked against target.

Reads fleet sizes and work orders from the record store, captures "now"
once, and hands everything to the pure calculator.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Optional

from fleet_availability.availability.availability_calculator import compute_availability
from fleet_availability.availability.availability_models import AvailabilityReport, VehicleClass
from fleet_availability.data.store import FleetRecordStore
from fleet_availability.utils.config import AvailabilitySettings
from fleet_availability.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ClassAvailability:
    report: AvailabilityReport
    target_pct: float
    target_met: bool


@dataclass(frozen=True)
class AvailabilityOverview:
    target_date: date
    generated_at: datetime
    classes: Dict[VehicleClass, ClassAvailability]

    @property
    def is_live_day(self) -> bool:
        return any(c.report.is_live_day for c in self.classes.values())


def evaluate_target(report: AvailabilityReport, target_pct: float) -> ClassAvailability:
    return ClassAvailability(
        report=report,
        target_pct=target_pct,
        target_met=report.mean_availability_percent >= target_pct,
    )


def build_availability_overview(
    store: FleetRecordStore,
    target_date: str | date | datetime,
    now: Optional[datetime] = None,
    target_pct: Optional[float] = None,
    vehicle_classes: Optional[list] = None,
) -> AvailabilityOverview:
    if now is None:
        now = datetime.now()
    if target_pct is None:
        target_pct = AvailabilitySettings().availability_target_pct

    vehicle_classes = [VehicleClass.parse(v) for v in (vehicle_classes or list(VehicleClass))]
    orders = store.list_work_orders()

    classes: Dict[VehicleClass, ClassAvailability] = {}
    for vc in vehicle_classes:
        report = compute_availability(store.fleet_size(vc), orders, target_date, vc, now=now)
        classes[vc] = evaluate_target(report, target_pct)

        logger.info(
            "Availability | date=%s class=%s fleet=%d mean=%.1f%% target=%.1f%% live=%s",
            report.target_date, vc.value, report.fleet_size,
            report.mean_availability_percent, target_pct, report.is_live_day,
        )

    first = next(iter(classes.values()))
    return AvailabilityOverview(
        target_date=first.report.target_date,
        generated_at=now,
        classes=classes,
    )
