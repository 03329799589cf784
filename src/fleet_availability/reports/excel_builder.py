from pathlib import Path
import pandas as pd
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from fleet_availability.availability.availability_models import AvailabilityReport
from fleet_availability.services.availability_service import AvailabilityOverview


def _autosize_columns(ws):
    """
    Autosize Excel columns based on content length.
    """
    for col in ws.columns:
        max_len = 0
        col_letter = get_column_letter(col[0].column)
        for cell in col:
            if cell.value is not None:
                max_len = max(max_len, len(str(cell.value)))
        ws.column_dimensions[col_letter].width = min(max_len + 2, 30)


def _freeze_panes(ws):
    """
    Freeze header row.
    """
    ws.freeze_panes = "A2"


def _bold_mean(ws):
    """
    Bold the MEAN row.
    """
    for r in range(1, ws.max_row + 1):
        if str(ws.cell(row=r, column=1).value).upper() == "MEAN":
            for c in range(1, ws.max_column + 1):
                ws.cell(row=r, column=c).font = Font(bold=True)


def report_frame(report: AvailabilityReport) -> pd.DataFrame:
    """
    One row per hour plus a MEAN row. Unknown (future) hours stay empty.
    """
    rows = [
        {
            "Hour": f"{s.hour}h",
            "Available": s.available_count,
            "Unavailable": s.unavailable_count,
            "Fleet": report.fleet_size,
            "Availability %": round(s.availability_percent, 1) if s.availability_percent is not None else None,
        }
        for s in report.hourly
    ]
    rows.append(
        {
            "Hour": "MEAN",
            "Available": round(report.mean_available_count, 1),
            "Unavailable": round(report.mean_unavailable_count, 1),
            "Fleet": report.fleet_size,
            "Availability %": round(report.mean_availability_percent, 1),
        }
    )
    return pd.DataFrame(rows)


def write_availability_workbook(overview: AvailabilityOverview, output_dir: Path) -> Path:
    """
    Write the availability workbook:
    - one sheet per vehicle class
    - hour rows + MEAN row
    """

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    file_path = output_dir / f"Fleet_Availability_{overview.target_date.strftime('%Y-%m-%d')}.xlsx"

    with pd.ExcelWriter(file_path, engine="openpyxl") as writer:
        for vclass, item in overview.classes.items():
            sheet_name = vclass.value.capitalize()
            report_frame(item.report).to_excel(writer, sheet_name=sheet_name, index=False)

            ws = writer.book[sheet_name]

            _freeze_panes(ws)
            _autosize_columns(ws)
            _bold_mean(ws)

    return file_path
