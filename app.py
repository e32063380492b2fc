#!/usr/bin/env python3
"""Work hours tracker TUI application."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.coordinate import Coordinate
from textual.widgets import DataTable, Footer, Static
from rich.text import Text

import storage
from export import export_report_xlsx
from logging_config import debug_enabled, setup_logger
from models import Client, WorkEntry
from screens import ConfirmScreen, DayScreen, EditClientScreen, EditRateScreen, NoticeScreen
from utils import (
    DAY_NAMES,
    calculate_report,
    client_daily_breakdown,
    format_currency,
    format_hours,
    format_hours_calendar,
    get_calendar_weeks,
    get_report_range,
    shift_month,
    shift_report_anchor,
)
from widgets import MonthHeader, NavHeader, ReportSummary

log = setup_logger("WorkHours", debug=debug_enabled())

VIEW_MODES = ("calendar", "clients", "reports")


class WorkHoursDataTable(DataTable):
    """DataTable that hands left/right to the app for period navigation in the reports view."""

    def on_key(self, event) -> None:
        if getattr(self.app, "view_mode", None) != "reports":
            return  # Let default handling occur

        if event.key == "left":
            self.app.action_prev_period()  # type: ignore[attr-defined]
            event.prevent_default()
            event.stop()
        elif event.key == "right":
            self.app.action_next_period()  # type: ignore[attr-defined]
            event.prevent_default()
            event.stop()


class WorkHoursApp(App):
    """Main work hours application."""

    CSS = """
    Screen {
        background: $surface;
    }

    #month-header, #clients-header, #report-header {
        height: auto;
        background: $primary;
        color: $text;
        padding: 0 1;
        text-style: bold;
    }

    #calendar-table {
        height: 1fr;
        margin: 1 2;
    }

    #calendar-legend, #clients-summary {
        height: auto;
        padding: 0 2;
        color: $text-muted;
    }

    #clients-table {
        height: 1fr;
        margin: 1 2;
    }

    #report-summary {
        height: auto;
        padding: 1 2;
        color: $text;
    }

    #report-table {
        height: auto;
        max-height: 12;
        margin: 0 2;
    }

    #report-detail-table {
        height: 1fr;
        margin: 1 2;
    }

    .hidden {
        display: none;
    }

    DataTable > .datatable--cursor {
        background: $secondary;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("c", "calendar_view", "Calendar"),
        Binding("l", "clients_view", "Clients"),
        Binding("r", "reports_view", "Reports"),
        Binding("comma", "prev_period", "<", show=False),
        Binding("full_stop", "next_period", ">", show=False),
        Binding("t", "goto_today", "Today"),
        Binding("$", "edit_rate", "Rate"),
        # Calendar view
        Binding("e", "edit", "Edit"),
        # Clients view
        Binding("n", "new_client", "New"),
        Binding("d", "delete_client", "Delete"),
        # Reports view
        Binding("w", "weekly_report", "Weekly"),
        Binding("m", "monthly_report", "Monthly"),
        Binding("x", "export_report", "Export"),
    ]

    def __init__(self):
        super().__init__()
        storage.init_db()

        # View mode: "calendar", "clients" or "reports"
        self.view_mode = "calendar"

        today = date.today()
        self.current_year = today.year
        self.current_month = today.month
        self.calendar_weeks = get_calendar_weeks(self.current_year, self.current_month)

        # Reports: type and a date inside the reported period
        self.report_type = "monthly"
        self.report_anchor = today

        self.clients: list[Client] = []

    def compose(self) -> ComposeResult:
        # Calendar view widgets
        yield MonthHeader(self.current_year, self.current_month, id="month-header")
        yield Container(WorkHoursDataTable(id="calendar-table"), id="calendar-table-container")
        yield Static(id="calendar-legend")
        # Clients view widgets (hidden by default)
        yield Static(id="clients-header", classes="hidden")
        yield Container(WorkHoursDataTable(id="clients-table"), id="clients-table-container", classes="hidden")
        yield Static(id="clients-summary", classes="hidden")
        # Reports view widgets (hidden by default)
        yield NavHeader(id="report-header", classes="hidden")
        yield ReportSummary(id="report-summary", classes="hidden")
        yield Container(
            WorkHoursDataTable(id="report-table"),
            WorkHoursDataTable(id="report-detail-table"),
            id="report-tables-container",
            classes="hidden",
        )
        yield Footer()

    def on_mount(self):
        self._setup_calendar_table()
        self._setup_clients_table()
        self._setup_report_tables()
        self.refresh_bindings()
        self._refresh_display()
        self._select_date(date.today())
        self.query_one("#calendar-table", DataTable).focus()

    def _setup_calendar_table(self):
        table = self.query_one("#calendar-table", DataTable)
        table.cursor_type = "cell"
        for name in DAY_NAMES:
            table.add_column(name, width=9, key=name)

    def _setup_clients_table(self):
        table = self.query_one("#clients-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Client", width=32)
        table.add_column("Entries", width=8)
        table.add_column("Created", width=12)

    def _setup_report_tables(self):
        table = self.query_one("#report-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Client", width=32)
        table.add_column("Hours", width=8)
        table.add_column("Amount", width=14)

        detail = self.query_one("#report-detail-table", DataTable)
        detail.cursor_type = "row"
        detail.add_column("Client", width=32)
        detail.add_column("Date", width=12)
        detail.add_column("Hours", width=8)
        detail.add_column("Amount", width=14)

    def _refresh_display(self):
        if self.view_mode == "calendar":
            self._refresh_calendar_display()
        elif self.view_mode == "clients":
            self._refresh_clients_display()
        elif self.view_mode == "reports":
            self._refresh_reports_display()

    # --- Calendar ---

    def _hours_by_day(self, entries: list[WorkEntry]) -> dict[date, Decimal]:
        """Total hours logged per date."""
        totals: dict[date, Decimal] = {}
        for entry in entries:
            totals[entry.date] = totals.get(entry.date, Decimal("0")) + entry.hours
        return totals

    def _day_cell(self, d: date, hours: Decimal | None) -> Text:
        """Two-line calendar cell: day number and hours logged."""
        in_month = d.month == self.current_month
        style = "" if in_month else "dim"
        if hours and in_month:
            style = "bold green"
        if d == date.today():
            style = f"{style} reverse".strip()

        text = Text(f"{d.day:>2}", style=style)
        text.append("\n")
        text.append(format_hours_calendar(hours) if hours else "", style=style)
        return text

    def _refresh_calendar_display(self):
        self.calendar_weeks = get_calendar_weeks(self.current_year, self.current_month)
        grid_start = self.calendar_weeks[0][0]
        grid_end = self.calendar_weeks[-1][-1]
        hours = self._hours_by_day(storage.get_entries_range(grid_start, grid_end))

        month_hours = sum(
            (h for d, h in hours.items() if d.month == self.current_month),
            Decimal("0"),
        )
        header = self.query_one("#month-header", MonthHeader)
        header.show_month(self.current_year, self.current_month, month_hours)

        table = self.query_one("#calendar-table", DataTable)
        cursor = table.cursor_coordinate
        table.clear()
        for week in self.calendar_weeks:
            table.add_row(*(self._day_cell(d, hours.get(d)) for d in week), key=week[0].isoformat(), height=2)
        if cursor.row < table.row_count:
            table.move_cursor(row=cursor.row, column=cursor.column)

        legend = self.query_one("#calendar-legend", Static)
        legend.update(Text.assemble(("■", "bold green"), " days with hours   ", ("■", "reverse"), " today"))

    def _cell_date(self, row: int, column: int) -> date | None:
        """Date shown at a calendar grid coordinate."""
        if 0 <= row < len(self.calendar_weeks) and 0 <= column < 7:
            return self.calendar_weeks[row][column]
        return None

    def _select_date(self, target: date):
        """Move the calendar cursor to target if it is on the grid."""
        for row, week in enumerate(self.calendar_weeks):
            if target in week:
                table = self.query_one("#calendar-table", DataTable)
                table.move_cursor(row=row, column=week.index(target))
                return

    def _open_day(self, d: date) -> None:
        self.push_screen(DayScreen(d), self._on_day_closed)

    def _on_day_closed(self, result: None) -> None:
        self._refresh_display()

    def on_data_table_cell_selected(self, event: DataTable.CellSelected) -> None:
        """Enter/click on a calendar cell opens that day."""
        if event.control.id != "calendar-table":
            return
        d = self._cell_date(event.coordinate.row, event.coordinate.column)
        if d:
            self._open_day(d)

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        """Enter on a client row edits the client."""
        if event.control.id == "clients-table":
            self.action_edit()

    # --- Clients ---

    def _refresh_clients_display(self):
        self.clients = storage.get_all_clients()
        counts: dict[str, int] = {}
        for entry in storage.get_all_entries():
            counts[entry.client_id] = counts.get(entry.client_id, 0) + 1

        header = self.query_one("#clients-header", Static)
        header.update(Text("CLIENTS", style="bold"))

        table = self.query_one("#clients-table", DataTable)
        table.clear()
        for client in self.clients:
            table.add_row(
                client.name,
                str(counts.get(client.id, 0)),
                client.created_at.strftime("%Y-%m-%d"),
                key=client.id,
            )

        summary = self.query_one("#clients-summary", Static)
        if self.clients:
            summary.update(f"{len(self.clients)} client(s). Clients with logged hours cannot be deleted.")
        else:
            summary.update("No clients yet. Press n to add one.")

    def _get_selected_client(self) -> Client | None:
        table = self.query_one("#clients-table", DataTable)
        if table.row_count == 0:
            return None
        row_key = table.coordinate_to_cell_key(Coordinate(table.cursor_row, 0)).row_key
        client_id = str(row_key.value) if row_key else None
        for client in self.clients:
            if client.id == client_id:
                return client
        return None

    def action_new_client(self) -> None:
        self.push_screen(EditClientScreen(self.clients), self._on_client_edited)

    def _on_client_edited(self, result: Client | None) -> None:
        if not result:
            return
        if storage.get_client(result.id):
            storage.update_client(result.id, name=result.name)
            self.notify(f"Client {result.name} renamed")
        else:
            storage.save_client(result)
            self.notify(f"Client {result.name} added")
        self._refresh_display()

    def action_delete_client(self) -> None:
        client = self._get_selected_client()
        if not client:
            self.notify("No client selected", severity="warning")
            return

        entry_count = storage.count_client_entries(client.id)
        if entry_count:
            plural = "entry" if entry_count == 1 else "entries"
            self.push_screen(
                NoticeScreen(
                    "Cannot delete client",
                    f"{client.name} has {entry_count} logged {plural}. "
                    "Delete those entries first.",
                )
            )
            return

        self.push_screen(
            ConfirmScreen(f"Delete client {client.name}?"),
            lambda confirmed: self._on_delete_client_confirmed(confirmed, client),
        )

    def _on_delete_client_confirmed(self, confirmed: bool | None, client: Client) -> None:
        if not confirmed:
            return
        if storage.delete_client(client.id):
            self.notify(f"Client {client.name} deleted")
        else:
            # Entries were added since the check above
            self.push_screen(NoticeScreen("Cannot delete client", f"{client.name} now has logged entries."))
        self._refresh_display()

    # --- Reports ---

    def _report_range(self) -> tuple[date, date, str]:
        return get_report_range(self.report_type, self.report_anchor)

    def _refresh_reports_display(self):
        start, end, label = self._report_range()
        entries = storage.get_entries_range(start, end)
        clients = storage.get_all_clients()
        rate = storage.get_config().hourly_rate
        report = calculate_report(entries, clients, rate)

        header = self.query_one("#report-header", NavHeader)
        kind = "WEEKLY" if self.report_type == "weekly" else "MONTHLY"
        header.update_display(f"{kind} REPORT", label)

        self.query_one("#report-summary", ReportSummary).update_display(label, report, rate)

        table = self.query_one("#report-table", DataTable)
        table.clear()
        if not report.client_breakdown:
            table.add_row(Text("No hours logged in this period", style="dim"), "", "")
        for item in report.client_breakdown:
            table.add_row(
                item.client_name,
                f"{format_hours(item.hours)}h",
                format_currency(item.amount),
                key=item.client_id,
            )
        if report.client_breakdown:
            table.add_row(
                Text("TOTAL", style="bold"),
                Text(f"{format_hours(report.total_hours)}h", style="bold"),
                Text(format_currency(report.total_amount), style="bold"),
            )

        detail = self.query_one("#report-detail-table", DataTable)
        detail.clear()
        for group in client_daily_breakdown(entries, clients, rate):
            for day in group.days:
                detail.add_row(
                    group.client_name,
                    day.date.strftime("%a %d %b"),
                    f"{format_hours(day.hours)}h",
                    format_currency(day.amount),
                )
            detail.add_row(
                Text(f"TOTAL {group.client_name}", style="bold"),
                "",
                Text(f"{format_hours(group.total_hours)}h", style="bold"),
                Text(format_currency(group.total_amount), style="bold"),
            )

    def action_weekly_report(self) -> None:
        self.report_type = "weekly"
        self.refresh_bindings()
        self._refresh_display()

    def action_monthly_report(self) -> None:
        self.report_type = "monthly"
        self.refresh_bindings()
        self._refresh_display()

    def action_export_report(self) -> None:
        start, end, label = self._report_range()
        entries = storage.get_entries_range(start, end)
        clients = storage.get_all_clients()
        rate = storage.get_config().hourly_rate
        path = storage.DB_PATH.parent / "reports" / f"report-{start.isoformat()}-{end.isoformat()}.xlsx"
        try:
            export_report_xlsx(
                path,
                label,
                calculate_report(entries, clients, rate),
                client_daily_breakdown(entries, clients, rate),
                rate,
            )
        except OSError as exc:
            log.error("Report export to %s failed: %s", path, exc)
            self.notify(f"Export failed: {exc}", severity="error")
            return
        log.info("Exported %s report to %s", label, path)
        self.notify(f"Report saved to {path}")

    # --- View switching ---

    def _set_view_mode(self, mode: str):
        """Switch between view modes and toggle widget visibility."""
        self.view_mode = mode

        view_widgets = {
            "calendar": ["#month-header", "#calendar-table-container", "#calendar-legend"],
            "clients": ["#clients-header", "#clients-table-container", "#clients-summary"],
            "reports": ["#report-header", "#report-summary", "#report-tables-container"],
        }
        for view, widget_ids in view_widgets.items():
            for widget_id in widget_ids:
                widget = self.query_one(widget_id)
                if view == mode:
                    widget.remove_class("hidden")
                else:
                    widget.add_class("hidden")

        self.refresh_bindings()
        self._refresh_display()

        focus_ids = {"calendar": "#calendar-table", "clients": "#clients-table", "reports": "#report-table"}
        self.query_one(focus_ids[mode], DataTable).focus()

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        """Check if an action is available based on current view mode."""
        if action == "calendar_view":
            return self.view_mode != "calendar"
        elif action == "clients_view":
            return self.view_mode != "clients"
        elif action == "reports_view":
            return self.view_mode != "reports"
        elif action == "edit":
            return True if self.view_mode in ("calendar", "clients") else None
        elif action in ("new_client", "delete_client"):
            return True if self.view_mode == "clients" else None
        elif action == "weekly_report":
            return True if self.view_mode == "reports" and self.report_type != "weekly" else None
        elif action == "monthly_report":
            return True if self.view_mode == "reports" and self.report_type != "monthly" else None
        elif action == "export_report":
            return True if self.view_mode == "reports" else None
        elif action in ("prev_period", "next_period", "goto_today"):
            return True if self.view_mode in ("calendar", "reports") else None
        return True

    def action_calendar_view(self):
        self._set_view_mode("calendar")

    def action_clients_view(self):
        self._set_view_mode("clients")

    def action_reports_view(self):
        self._set_view_mode("reports")

    # --- Navigation ---

    def _move_period(self, step: int):
        if self.view_mode == "calendar":
            self.current_year, self.current_month = shift_month(self.current_year, self.current_month, step)
        elif self.view_mode == "reports":
            self.report_anchor = shift_report_anchor(self.report_type, self.report_anchor, step)
        self._refresh_display()

    def action_prev_period(self):
        self._move_period(-1)

    def action_next_period(self):
        self._move_period(1)

    def action_goto_today(self):
        today = date.today()
        if self.view_mode == "calendar":
            self.current_year, self.current_month = today.year, today.month
            self._refresh_display()
            self._select_date(today)
        elif self.view_mode == "reports":
            self.report_anchor = today
            self._refresh_display()

    def action_edit(self) -> None:
        """Open the selected day, or edit the selected client."""
        if self.view_mode == "calendar":
            table = self.query_one("#calendar-table", DataTable)
            d = self._cell_date(table.cursor_row, table.cursor_column)
            if d:
                self._open_day(d)
        elif self.view_mode == "clients":
            client = self._get_selected_client()
            if not client:
                self.notify("No client selected", severity="warning")
                return
            self.push_screen(EditClientScreen(self.clients, client), self._on_client_edited)

    def action_edit_rate(self) -> None:
        self.push_screen(EditRateScreen(storage.get_config().hourly_rate), self._on_rate_edited)

    def _on_rate_edited(self, result: Decimal | None) -> None:
        if result is None:
            return
        storage.update_hourly_rate(result)
        self.notify(f"Hourly rate set to {format_currency(result)}")
        self._refresh_display()


def main():
    import sys
    if len(sys.argv) > 1 and sys.argv[1] == "--db-info":
        from datetime import datetime
        db_path = storage.DB_PATH
        print(f"Database: {db_path}")
        if db_path.exists():
            mtime = datetime.fromtimestamp(db_path.stat().st_mtime)
            size = db_path.stat().st_size
            print(f"Modified: {mtime.strftime('%Y-%m-%d %H:%M:%S')}")
            print(f"Size: {size:,} bytes")
        else:
            print("Status: Does not exist (will be created on first run)")
        return

    log.info("Starting with database %s", storage.DB_PATH)
    app = WorkHoursApp()
    app.run()


if __name__ == "__main__":
    main()
