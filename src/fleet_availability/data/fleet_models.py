from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class Unit:
    id: str
    fleet_name: str  # e.g. T2506
    plate: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Composition:
    id: str
    identifier: str  # e.g. C01
    plates: List[str] = field(default_factory=list)
    first_plate: str = ""
    second_plate: str = ""
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Driver:
    id: str
    name: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class BulkImportResult:
    success: int
    errors: List[str]
