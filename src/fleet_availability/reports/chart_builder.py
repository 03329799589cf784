# src/fleet_availability/reports/chart_builder.py
"""
Chart Builder — hourly availability bar chart
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt

from fleet_availability.availability.availability_models import AvailabilityReport


def build_hourly_chart(
    report: AvailabilityReport,
    output_dir: Path,
    target_pct: Optional[float] = None,
) -> Path:
    """Bars for known hours only; future hours of a live day leave a gap."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    vclass = report.vehicle_class.value if report.vehicle_class else "fleet"
    day = report.target_date.strftime("%Y%m%d") if report.target_date else "day"
    chart_path = output_dir / f"availability_{vclass}_{day}.png"

    known = report.valid_hours
    hours = [s.hour for s in known]
    values = [s.availability_percent for s in known]

    plt.figure(figsize=(11, 5))
    plt.bar(hours, values, width=0.8, label="Availability %", color='#003087')

    if target_pct is not None:
        plt.axhline(target_pct, color='#C8102E', linestyle='--', linewidth=1.5,
                    label=f"Target {target_pct:.0f}%")

    plt.xticks(range(24), [f"{h}h" for h in range(24)], fontsize=8)
    plt.xlim(-0.5, 23.5)
    plt.ylim(0, 105)
    plt.xlabel("Hour", fontsize=12)
    plt.ylabel("Availability (%)", fontsize=12)
    title_day = report.target_date.strftime("%d-%m-%Y") if report.target_date else ""
    plt.title(
        f"Mechanical Availability — {vclass.capitalize()} — {title_day} "
        f"(mean {report.mean_availability_percent:.1f}%)",
        fontsize=14,
    )
    plt.legend()
    plt.grid(True, axis='y', alpha=0.3)
    plt.tight_layout()

    plt.savefig(chart_path, dpi=200, bbox_inches='tight', facecolor='white')
    plt.close()
    return chart_path
