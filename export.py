"""Export billing reports to Excel workbooks."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font

from models import ClientDailyBreakdown, ReportData

CURRENCY_FORMAT = '#,##0.00 "€"'
HOURS_FORMAT = "0.0"


def _bold_row(ws, row: int) -> None:
    for cell in ws[row]:
        cell.font = Font(bold=True)


def export_report_xlsx(
    path: Path,
    label: str,
    report: ReportData,
    daily: list[ClientDailyBreakdown],
    hourly_rate: Decimal,
) -> Path:
    """Write a report workbook with a Summary sheet and a Detail sheet.

    Returns the path written.
    """
    wb = Workbook()

    summary = wb.active
    summary.title = "Summary"
    summary.append([label])
    summary["A1"].font = Font(bold=True, size=14)
    summary.append(["Hourly rate", float(hourly_rate)])
    summary["B2"].number_format = CURRENCY_FORMAT
    summary.append([])
    summary.append(["Client", "Hours", "Amount"])
    _bold_row(summary, summary.max_row)

    for item in report.client_breakdown:
        summary.append([item.client_name, float(item.hours), float(item.amount)])

    summary.append(["TOTAL", float(report.total_hours), float(report.total_amount)])
    _bold_row(summary, summary.max_row)

    for row in summary.iter_rows(min_row=5, min_col=2, max_col=3):
        row[0].number_format = HOURS_FORMAT
        row[1].number_format = CURRENCY_FORMAT
    summary.column_dimensions["A"].width = 30
    summary.column_dimensions["B"].width = 10
    summary.column_dimensions["C"].width = 14

    detail = wb.create_sheet("Detail")
    detail.append(["Client", "Date", "Hours", "Amount"])
    _bold_row(detail, 1)
    for group in daily:
        for day in group.days:
            detail.append([group.client_name, day.date, float(day.hours), float(day.amount)])
            detail.cell(row=detail.max_row, column=2).number_format = "yyyy-mm-dd"
            detail.cell(row=detail.max_row, column=3).number_format = HOURS_FORMAT
            detail.cell(row=detail.max_row, column=4).number_format = CURRENCY_FORMAT
        detail.append([f"TOTAL {group.client_name}", None, float(group.total_hours), float(group.total_amount)])
        _bold_row(detail, detail.max_row)
    detail.column_dimensions["A"].width = 30
    detail.column_dimensions["B"].width = 12

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    return path
