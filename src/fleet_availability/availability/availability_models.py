from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, List, Mapping, Optional

from fleet_availability.errors import InvalidInputError
from fleet_availability.utils.dates import (
    combine,
    format_date,
    format_time,
    is_blank,
)


class _ParseableEnum(Enum):
    @classmethod
    def parse(cls, value: Any):
        """Enum member from a member or a case-insensitive value string."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if member.value.lower() == wanted or member.name.lower() == wanted:
                    return member
        raise InvalidInputError(f"Invalid {cls.__name__}: {value!r}")


class VehicleClass(_ParseableEnum):
    UNIT = "unit"
    COMPOSITION = "composition"


class WorkOrderStatus(_ParseableEnum):
    OPEN = "Open"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class MaintenanceType(_ParseableEnum):
    PREVENTIVE = "Preventive"
    CORRECTIVE = "Corrective"
    TIRE = "Tire"
    ELECTRICAL = "Electrical"
    SOS = "SOS"
    TERMAC = "TERMAC"
    ITR = "ITR"
    STAND_BY = "STAND-BY"
    EXTERNAL = "External Maintenance"
    OTHER = "Other"


# Column order of the record/wire format (store rows, CSV/XLSX files)
WORK_ORDER_FIELDS = [
    "id",
    "vehicle_class",
    "vehicle_id",
    "plate",
    "driver_id",
    "opened_date",
    "opened_time",
    "closed_date",
    "closed_time",
    "expected_release_date",
    "expected_release_time",
    "maintenance_type",
    "description",
    "status",
    "is_standby",
    "origin_composition_id",
    "created_at",
]


def _text(value: Any) -> Optional[str]:
    if is_blank(value):
        return None
    return str(value).strip()


def parse_flag(value: Any) -> bool:
    if is_blank(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y")
    return bool(value)


def _optional_datetime(date_value: Any, time_value: Any) -> Optional[datetime]:
    # A closing date without a closing time is not a meaningful closure
    if is_blank(date_value) or is_blank(time_value):
        return None
    return combine(str(date_value).strip(), str(time_value).strip())


def _created_at(value: Any) -> Optional[datetime]:
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).strip())
    except ValueError as e:
        raise InvalidInputError(f"Invalid created_at: {value!r}") from e


# ------------------------------------------------------------
# Work order (calculator input)
# ------------------------------------------------------------
@dataclass(frozen=True)
class WorkOrder:
    vehicle_class: VehicleClass
    status: WorkOrderStatus
    opened_at: datetime
    closed_at: Optional[datetime] = None

    id: str = ""
    vehicle_id: str = ""
    plate: str = ""
    driver_id: Optional[str] = None
    maintenance_type: MaintenanceType = MaintenanceType.OTHER
    description: str = ""
    expected_release_at: Optional[datetime] = None
    is_standby: bool = False
    origin_composition_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "WorkOrder":
        """
        Build a WorkOrder from a wire-format record (DD-MM-YYYY / HH:MM strings).

        Raises InvalidInputError on unparseable values.
        """
        opened_date = record.get("opened_date")
        opened_time = record.get("opened_time")
        if is_blank(opened_date) or is_blank(opened_time):
            raise InvalidInputError(
                f"Work order {record.get('id') or '(new)'} has no opening date/time"
            )

        maintenance = record.get("maintenance_type")

        return cls(
            vehicle_class=VehicleClass.parse(record.get("vehicle_class")),
            status=WorkOrderStatus.parse(record.get("status")),
            opened_at=combine(str(opened_date).strip(), str(opened_time).strip()),
            closed_at=_optional_datetime(record.get("closed_date"), record.get("closed_time")),
            id=_text(record.get("id")) or "",
            vehicle_id=_text(record.get("vehicle_id")) or "",
            plate=_text(record.get("plate")) or "",
            driver_id=_text(record.get("driver_id")),
            maintenance_type=(
                MaintenanceType.OTHER if is_blank(maintenance) else MaintenanceType.parse(maintenance)
            ),
            description=_text(record.get("description")) or "",
            expected_release_at=_optional_datetime(
                record.get("expected_release_date"), record.get("expected_release_time")
            ),
            is_standby=parse_flag(record.get("is_standby")),
            origin_composition_id=_text(record.get("origin_composition_id")),
            created_at=_created_at(record.get("created_at")),
        )

    def to_record(self) -> dict:
        """Wire-format record, keys in WORK_ORDER_FIELDS order."""
        return {
            "id": self.id,
            "vehicle_class": self.vehicle_class.value,
            "vehicle_id": self.vehicle_id,
            "plate": self.plate,
            "driver_id": self.driver_id,
            "opened_date": format_date(self.opened_at),
            "opened_time": format_time(self.opened_at),
            "closed_date": format_date(self.closed_at) if self.closed_at else None,
            "closed_time": format_time(self.closed_at) if self.closed_at else None,
            "expected_release_date": (
                format_date(self.expected_release_at) if self.expected_release_at else None
            ),
            "expected_release_time": (
                format_time(self.expected_release_at) if self.expected_release_at else None
            ),
            "maintenance_type": self.maintenance_type.value,
            "description": self.description,
            "status": self.status.value,
            "is_standby": self.is_standby,
            "origin_composition_id": self.origin_composition_id,
            "created_at": self.created_at.isoformat(timespec="seconds") if self.created_at else None,
        }


# ------------------------------------------------------------
# Hourly sample (None = unknown, future hour of a live day)
# ------------------------------------------------------------
@dataclass(frozen=True)
class HourSample:
    hour: int
    available_count: Optional[int]
    unavailable_count: Optional[int]
    availability_percent: Optional[float]
    is_future_hour: bool


# ------------------------------------------------------------
# Final report object (single day, single vehicle class)
# ------------------------------------------------------------
@dataclass(frozen=True)
class AvailabilityReport:
    fleet_size: int
    hourly: List[HourSample]
    mean_availability_percent: float
    mean_available_count: float
    is_live_day: bool
    current_hour: Optional[int] = None

    # Metadata (not KPIs)
    target_date: Optional[date] = None
    vehicle_class: Optional[VehicleClass] = None
    generated_at: Optional[datetime] = None

    @property
    def valid_hours(self) -> List[HourSample]:
        return [h for h in self.hourly if not h.is_future_hour]

    @property
    def mean_unavailable_count(self) -> float:
        valid = self.valid_hours
        if not valid:
            return 0.0
        return sum(h.unavailable_count for h in valid) / len(valid)
