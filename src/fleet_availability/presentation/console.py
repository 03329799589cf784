from __future__ import annotations

import io
from typing import List, Optional, Sequence

from fleet_availability.availability.availability_models import AvailabilityReport
from fleet_availability.services.availability_service import AvailabilityOverview, ClassAvailability

UNKNOWN = "-"

_CLASS_TITLES = {
    "unit": "UNITS (TRACTORS)",
    "composition": "COMPOSITIONS",
}


def format_table(rows: Sequence[Sequence[object]], headers: List[str]) -> str:
    output = io.StringIO()

    widths = [len(h) for h in headers]
    for row in rows:
        for i, v in enumerate(row):
            widths[i] = max(widths[i], len(str(v)))

    def fmt(r):
        return " ".join(str(r[i]).rjust(widths[i]) if i else str(r[i]).ljust(widths[i])
                        for i in range(len(headers)))

    print(fmt(headers), file=output)
    print(" ".join("-" * w for w in widths), file=output)
    for row in rows:
        print(fmt(row), file=output)

    return output.getvalue()


def _cell(value: Optional[float], pattern: str = "{}") -> str:
    return UNKNOWN if value is None else pattern.format(value)


def render_availability_table(report: AvailabilityReport) -> str:
    """
    Hour-by-hour table (hours as columns, MEAN last).

    Future hours of a live day show '-' instead of a number.
    """
    out = io.StringIO()

    day = report.target_date.strftime("%d-%m-%Y") if report.target_date else "?"
    title = _CLASS_TITLES.get(report.vehicle_class.value if report.vehicle_class else "", "FLEET")

    print(f"MECHANICAL AVAILABILITY — {title} — {day}", file=out)
    if report.is_live_day:
        print(f"LIVE: hours after {report.current_hour:02d}h not yet known", file=out)
    else:
        print("Full day", file=out)
    print(file=out)

    headers = ["Metric"] + [f"{s.hour}h" for s in report.hourly] + ["MEAN"]
    rows = [
        ["Available"]
        + [_cell(s.available_count) for s in report.hourly]
        + [f"{report.mean_available_count:.1f}"],
        ["Availability %"]
        + [_cell(s.availability_percent, "{:.1f}") for s in report.hourly]
        + [f"{report.mean_availability_percent:.1f}"],
        ["Fleet total"]
        + [str(report.fleet_size) for _ in report.hourly]
        + [str(report.fleet_size)],
        ["Unavailable"]
        + [_cell(s.unavailable_count) for s in report.hourly]
        + [f"{report.mean_unavailable_count:.1f}"],
    ]

    print(format_table(rows, headers), file=out, end="")
    return out.getvalue()


def _render_class(item: ClassAvailability) -> str:
    verdict = "MET" if item.target_met else "MISSED"
    return (
        render_availability_table(item.report)
        + f"Target {item.target_pct:.1f}% → {verdict} "
          f"(mean {item.report.mean_availability_percent:.1f}%)\n"
    )


def render_overview(overview: AvailabilityOverview) -> str:
    out = io.StringIO()

    print("=" * 80, file=out)
    print("FLEET MECHANICAL AVAILABILITY", file=out)
    print("=" * 80, file=out)
    print(f"Date: {overview.target_date.strftime('%d-%m-%Y')}", file=out)
    print(f"Generated: {overview.generated_at.strftime('%d-%m-%Y %H:%M')}"
          + (" (live)" if overview.is_live_day else ""), file=out)
    print(file=out)

    for item in overview.classes.values():
        print(_render_class(item), file=out)

    return out.getvalue()
