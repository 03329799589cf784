"""
Hourly Mechanical Availability Calculator

Purpose:
- Profile ONE day, ONE vehicle class, hour by hour (0..23)
- Count work orders covering each hour as unavailable vehicles
- Average availability over the hours that are actually known

Important:
- Pure: no I/O, no state between calls
- "now" is read ONCE per call (or injected) so an hour cannot flip
  between future and past inside one report
- A live day (target == today) leaves hours after the current one unknown
- Any other day, past or future, is computed for all 24 hours
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Iterable, List, Optional

from fleet_availability.availability.availability_models import (
    AvailabilityReport,
    HourSample,
    VehicleClass,
    WorkOrder,
    WorkOrderStatus,
)
from fleet_availability.errors import InvalidInputError
from fleet_availability.utils.dates import coerce_date

HOURS_PER_DAY = 24


def _covers(order: WorkOrder, moment: datetime) -> bool:
    """True when the order makes its vehicle unavailable at `moment`."""
    if order.status is WorkOrderStatus.OPEN and order.closed_at is None:
        # Never closes: unavailable from opening onwards, across later days too
        return moment >= order.opened_at

    if order.status is WorkOrderStatus.COMPLETED and order.closed_at is not None:
        return order.opened_at <= moment <= order.closed_at

    # Cancelled, or an open/closed combination without an effective window
    return False


def _check_fleet_size(fleet_size) -> int:
    if isinstance(fleet_size, bool) or not isinstance(fleet_size, int):
        raise InvalidInputError(f"Fleet size must be an integer: {fleet_size!r}")
    if fleet_size < 0:
        raise InvalidInputError(f"Fleet size must be >= 0: {fleet_size}")
    return fleet_size


def compute_availability(
    fleet_size: int,
    work_orders: Iterable[WorkOrder],
    target_date: str | date | datetime,
    vehicle_class: VehicleClass | str,
    now: Optional[datetime] = None,
) -> AvailabilityReport:
    """
    Build the 24-hour availability profile for `target_date`.

    Raises InvalidInputError for a negative fleet size, an unparseable date
    or an unknown vehicle class. Never returns a partial report.
    """
    fleet_size = _check_fleet_size(fleet_size)
    day = coerce_date(target_date)
    vehicle_class = VehicleClass.parse(vehicle_class)

    if now is None:
        now = datetime.now()

    is_live_day = day == now.date()
    current_hour = now.hour

    # Orders that can ever count for this class; cancelled never does
    candidates = [
        o for o in work_orders
        if o.vehicle_class is vehicle_class and o.status is not WorkOrderStatus.CANCELLED
    ]

    hourly: List[HourSample] = []

    for hour in range(HOURS_PER_DAY):
        is_future_hour = is_live_day and hour > current_hour

        if is_future_hour:
            hourly.append(
                HourSample(
                    hour=hour,
                    available_count=None,
                    unavailable_count=None,
                    availability_percent=None,
                    is_future_hour=True,
                )
            )
            continue

        moment = datetime.combine(day, time(hour, 0))
        unavailable = sum(1 for o in candidates if _covers(o, moment))

        available = max(0, fleet_size - unavailable)
        pct = (available / fleet_size) * 100 if fleet_size > 0 else 100.0

        hourly.append(
            HourSample(
                hour=hour,
                available_count=available,
                unavailable_count=unavailable,
                availability_percent=pct,
                is_future_hour=False,
            )
        )

    # ------------------------------------------------------------
    # Day averages over known hours only
    # ------------------------------------------------------------
    valid = [h for h in hourly if not h.is_future_hour]

    mean_pct = (
        sum(h.availability_percent for h in valid) / len(valid)
        if valid
        else 100.0
    )
    mean_available = (
        sum(h.available_count for h in valid) / len(valid)
        if valid
        else float(fleet_size)
    )

    return AvailabilityReport(
        fleet_size=fleet_size,
        hourly=hourly,
        mean_availability_percent=mean_pct,
        mean_available_count=mean_available,
        is_live_day=is_live_day,
        current_hour=current_hour if is_live_day else None,
        target_date=day,
        vehicle_class=vehicle_class,
        generated_at=now,
    )
