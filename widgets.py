"""Custom widgets for the work hours application."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from textual.widgets import Static
from rich.text import Text

from models import ReportData
from utils import MONTH_NAMES, format_currency, format_hours


class NavHeader(Static):
    """Shows a title on the left and ◄ label ► navigation on the right."""

    # Navigation ends at this column so it lines up with the tables below
    TARGET_END_COL = 74

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.nav_start = 0
        self.left_arrow_pos = 0
        self.right_arrow_pos = 0

    def update_display(self, title: str, nav_label: str):
        nav = f"◄ {nav_label} ►"
        nav_start = max(self.TARGET_END_COL - len(nav), len(title) + 2)

        # Store positions for click detection
        self.nav_start = nav_start
        self.left_arrow_pos = nav_start
        self.right_arrow_pos = nav_start + len(nav) - 1

        text = Text()
        text.append(title, style="bold")
        text.append(" " * (nav_start - len(title)))
        text.append(nav, style="bold")
        self.update(text)

    def on_click(self, event) -> None:
        """Handle clicks on the arrows for previous/next navigation."""
        click_col = event.x
        if self.left_arrow_pos <= click_col < self.left_arrow_pos + 2:
            self.app.action_prev_period()  # type: ignore[attr-defined]
        elif self.right_arrow_pos <= click_col < self.right_arrow_pos + 2:
            self.app.action_next_period()  # type: ignore[attr-defined]


class MonthHeader(NavHeader):
    """Calendar header: month name with month navigation."""

    def __init__(self, year: int, month: int, **kwargs):
        super().__init__(**kwargs)
        self.year = year
        self.month = month

    def show_month(self, year: int, month: int, month_hours: Decimal):
        self.year = year
        self.month = month
        title = f"{MONTH_NAMES[month - 1].upper()} {year}"
        self.update_display(title, f"{format_hours(month_hours)}h this month")


class DaySummary(Static):
    """Totals line for a single day's entries."""

    def update_display(self, d: date, hours: Decimal, amount: Decimal, entry_count: int):
        text = Text()
        text.append(d.strftime("%A %d %B %Y"), style="bold")
        text.append("\n")
        if entry_count == 0:
            text.append("No hours logged", style="dim")
        else:
            plural = "entry" if entry_count == 1 else "entries"
            text.append(f"{format_hours(hours)}h  •  {format_currency(amount)}  ({entry_count} {plural})")
        self.update(text)


class ReportSummary(Static):
    """Report totals: hours, amount and the rate used."""

    def update_display(self, label: str, report: ReportData, hourly_rate: Decimal):
        text = Text()
        text.append(label, style="bold")
        text.append("\n\n")
        text.append(f"  Total hours   {format_hours(report.total_hours):>10}h\n")
        text.append(f"  Total amount  {format_currency(report.total_amount):>12}\n")
        text.append(f"  Rate          {format_currency(hourly_rate):>12}/h", style="dim")
        self.update(text)
