from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional

from fleet_availability.availability.availability_models import (
    MaintenanceType,
    VehicleClass,
    WorkOrder,
    WorkOrderStatus,
)


@dataclass(frozen=True)
class WorkOrderStats:
    total: int
    open: int
    completed: int
    cancelled: int
    mean_resolution_hours: float


def compute_work_order_stats(orders: Iterable[WorkOrder]) -> WorkOrderStats:
    """Counts per status, plus mean open->close hours over completed orders."""
    orders = list(orders)

    resolution_hours = [
        (o.closed_at - o.opened_at).total_seconds() / 3600
        for o in orders
        if o.status is WorkOrderStatus.COMPLETED and o.closed_at is not None
    ]

    return WorkOrderStats(
        total=len(orders),
        open=sum(1 for o in orders if o.status is WorkOrderStatus.OPEN),
        completed=sum(1 for o in orders if o.status is WorkOrderStatus.COMPLETED),
        cancelled=sum(1 for o in orders if o.status is WorkOrderStatus.CANCELLED),
        mean_resolution_hours=(
            sum(resolution_hours) / len(resolution_hours) if resolution_hours else 0.0
        ),
    )


def filter_work_orders(
    orders: Iterable[WorkOrder],
    search: Optional[str] = None,
    status: Optional[WorkOrderStatus | str] = None,
    maintenance_type: Optional[MaintenanceType | str] = None,
    vehicle_class: Optional[VehicleClass | str] = None,
    vehicle_labels: Optional[Mapping[str, str]] = None,
) -> List[WorkOrder]:
    """
    Keep orders matching every given criterion.

    `search` is case-insensitive over id, description, plate, maintenance
    type and the vehicle label (fleet name / composition identifier, looked
    up by vehicle id in `vehicle_labels`).
    """
    status = WorkOrderStatus.parse(status) if status else None
    maintenance_type = MaintenanceType.parse(maintenance_type) if maintenance_type else None
    vehicle_class = VehicleClass.parse(vehicle_class) if vehicle_class else None
    vehicle_labels = vehicle_labels or {}
    needle = (search or "").strip().lower()

    def matches(o: WorkOrder) -> bool:
        if status is not None and o.status is not status:
            return False
        if maintenance_type is not None and o.maintenance_type is not maintenance_type:
            return False
        if vehicle_class is not None and o.vehicle_class is not vehicle_class:
            return False
        if not needle:
            return True
        haystack = (
            o.id,
            o.description,
            o.plate,
            o.maintenance_type.value,
            vehicle_labels.get(o.vehicle_id, ""),
        )
        return any(needle in (h or "").lower() for h in haystack)

    return [o for o in orders if matches(o)]


def sort_work_orders(orders: Iterable[WorkOrder]) -> List[WorkOrder]:
    """Completed orders last; newest opening first within each group."""
    by_newest = sorted(orders, key=lambda o: o.opened_at, reverse=True)
    return sorted(by_newest, key=lambda o: o.status is WorkOrderStatus.COMPLETED)
