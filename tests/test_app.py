"""Tests for the app module."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from models import Client, Config, WorkEntry


@pytest.fixture
def app():
    """A WorkHoursApp that is constructed but never run."""
    from app import WorkHoursApp

    with patch.object(WorkHoursApp, 'run'):
        instance = WorkHoursApp()
        instance.notify = MagicMock()
        yield instance


class TestAppInit:
    """Tests for initial application state."""

    def test_starts_on_current_month_calendar(self, app):
        today = date.today()
        assert app.view_mode == "calendar"
        assert app.current_year == today.year
        assert app.current_month == today.month
        assert app.report_type == "monthly"
        assert app.report_anchor == today

    def test_calendar_weeks_cover_today(self, app):
        assert any(date.today() in week for week in app.calendar_weeks)


class TestCalendarHelpers:
    """Tests for calendar grid helpers."""

    def test_hours_by_day(self, app, sample_entries):
        """Test that hours are summed per date."""
        totals = app._hours_by_day(sample_entries)

        assert totals[date(2025, 12, 9)] == Decimal("5.5")
        assert totals[date(2025, 12, 10)] == Decimal("4")
        assert totals[date(2025, 11, 27)] == Decimal("4.5")
        assert len(totals) == 3

    def test_hours_by_day_empty(self, app):
        assert app._hours_by_day([]) == {}

    def test_cell_date(self, app):
        """Test mapping a grid coordinate to its date."""
        app.current_year, app.current_month = 2025, 12
        from utils import get_calendar_weeks
        app.calendar_weeks = get_calendar_weeks(2025, 12)

        assert app._cell_date(0, 0) == date(2025, 12, 1)
        assert app._cell_date(1, 1) == date(2025, 12, 9)
        assert app._cell_date(4, 6) == date(2026, 1, 4)

    def test_cell_date_out_of_grid(self, app):
        from utils import get_calendar_weeks
        app.calendar_weeks = get_calendar_weeks(2025, 12)

        assert app._cell_date(5, 0) is None
        assert app._cell_date(0, 7) is None
        assert app._cell_date(-1, 0) is None

    def test_day_cell_with_hours(self, app):
        """Test that a day with hours shows the day number and hours."""
        app.current_year, app.current_month = 2025, 12
        cell = app._day_cell(date(2025, 12, 9), Decimal("5.5"))

        assert cell.plain == " 9\n5h 30min"
        assert "green" in str(cell.style)

    def test_day_cell_without_hours(self, app):
        app.current_year, app.current_month = 2025, 12
        cell = app._day_cell(date(2025, 12, 9), None)

        assert cell.plain == " 9\n"
        assert "green" not in str(cell.style)

    def test_day_cell_outside_month_is_dim(self, app):
        """Test that spill-over days are dimmed even when they have hours."""
        app.current_year, app.current_month = 2025, 12
        cell = app._day_cell(date(2025, 11, 27), Decimal("4"))

        assert "dim" in str(cell.style)
        assert "green" not in str(cell.style)

    def test_day_cell_today_is_highlighted(self, app):
        today = date.today()
        app.current_year, app.current_month = today.year, today.month

        assert "reverse" in str(app._day_cell(today, None).style)


class TestCheckAction:
    """Tests for view-dependent action availability."""

    def test_calendar_view(self, app):
        app.view_mode = "calendar"

        assert app.check_action("calendar_view", ()) is False
        assert app.check_action("clients_view", ()) is True
        assert app.check_action("edit", ()) is True
        assert app.check_action("prev_period", ()) is True
        assert app.check_action("new_client", ()) is None
        assert app.check_action("export_report", ()) is None

    def test_clients_view(self, app):
        app.view_mode = "clients"

        assert app.check_action("clients_view", ()) is False
        assert app.check_action("new_client", ()) is True
        assert app.check_action("delete_client", ()) is True
        assert app.check_action("next_period", ()) is None
        assert app.check_action("weekly_report", ()) is None

    def test_reports_view(self, app):
        app.view_mode = "reports"
        app.report_type = "monthly"

        assert app.check_action("reports_view", ()) is False
        assert app.check_action("weekly_report", ()) is True
        assert app.check_action("monthly_report", ()) is None
        assert app.check_action("export_report", ()) is True
        assert app.check_action("edit", ()) is None

    def test_global_actions_always_available(self, app):
        for mode in ("calendar", "clients", "reports"):
            app.view_mode = mode
            assert app.check_action("quit", ()) is True
            assert app.check_action("edit_rate", ()) is True


class TestNavigation:
    """Tests for period navigation."""

    def test_calendar_wraps_year(self, app):
        app.view_mode = "calendar"
        app.current_year, app.current_month = 2025, 12

        with patch.object(app, '_refresh_display') as refresh:
            app.action_next_period()
            assert (app.current_year, app.current_month) == (2026, 1)

            app.action_prev_period()
            app.action_prev_period()
            assert (app.current_year, app.current_month) == (2025, 11)

        assert refresh.call_count == 3

    def test_reports_move_by_report_type(self, app):
        app.view_mode = "reports"
        app.report_anchor = date(2025, 12, 10)

        with patch.object(app, '_refresh_display'):
            app.report_type = "weekly"
            app.action_next_period()
            assert app.report_anchor == date(2025, 12, 17)

            app.report_type = "monthly"
            app.action_prev_period()
            assert app.report_anchor == date(2025, 11, 17)

    def test_clients_view_ignores_navigation(self, app):
        app.view_mode = "clients"
        before = (app.current_year, app.current_month, app.report_anchor)

        with patch.object(app, '_refresh_display'):
            app.action_next_period()

        assert (app.current_year, app.current_month, app.report_anchor) == before

    def test_goto_today_in_reports(self, app):
        app.view_mode = "reports"
        app.report_anchor = date(2020, 1, 1)

        with patch.object(app, '_refresh_display'):
            app.action_goto_today()

        assert app.report_anchor == date.today()

    def test_report_range(self, app):
        app.report_type = "weekly"
        app.report_anchor = date(2025, 12, 10)

        start, end, label = app._report_range()

        assert (start, end) == (date(2025, 12, 8), date(2025, 12, 14))
        assert label == "Week of 8 December to 14 December 2025"


class TestDataCallbacks:
    """Tests for callbacks that write to storage."""

    def test_new_client_saved(self, app, temp_storage):
        client = Client(id="c-new", name="Gamma", created_at=datetime(2025, 12, 1))

        with patch.object(app, '_refresh_display'):
            app._on_client_edited(client)

        assert temp_storage.get_client("c-new") == client
        assert "added" in app.notify.call_args[0][0]

    def test_existing_client_renamed(self, app, temp_storage, sample_clients):
        temp_storage.save_client(sample_clients[0])
        renamed = Client(id="client-b", name="Beta Ltd", created_at=sample_clients[0].created_at)

        with patch.object(app, '_refresh_display'):
            app._on_client_edited(renamed)

        assert temp_storage.get_client("client-b").name == "Beta Ltd"
        assert len(temp_storage.get_all_clients()) == 1

    def test_cancelled_client_edit_does_nothing(self, app, temp_storage):
        with patch.object(app, '_refresh_display') as refresh:
            app._on_client_edited(None)

        refresh.assert_not_called()
        assert temp_storage.get_all_clients() == []

    def test_delete_client_confirmed(self, app, temp_storage, sample_clients):
        temp_storage.save_client(sample_clients[0])

        with patch.object(app, '_refresh_display'):
            app._on_delete_client_confirmed(True, sample_clients[0])

        assert temp_storage.get_client("client-b") is None

    def test_delete_client_with_new_entries_shows_notice(self, app, temp_storage, sample_clients):
        """Test that entries logged after the check still block deletion."""
        client = sample_clients[0]
        temp_storage.save_client(client)
        temp_storage.save_entry(
            WorkEntry(id="late", date=date(2025, 12, 1), hours=Decimal("1"), client_id=client.id)
        )

        with patch.object(app, '_refresh_display'), patch.object(app, 'push_screen') as push:
            app._on_delete_client_confirmed(True, client)

        assert temp_storage.get_client(client.id) == client
        push.assert_called_once()

    def test_rate_edited(self, app, temp_storage):
        with patch.object(app, '_refresh_display'):
            app._on_rate_edited(Decimal("12.5"))

        assert temp_storage.get_config() == Config(hourly_rate=Decimal("12.5"))
        assert "12.50 €" in app.notify.call_args[0][0]

    def test_rate_edit_cancelled(self, app, temp_storage):
        with patch.object(app, '_refresh_display'):
            app._on_rate_edited(None)

        assert temp_storage.get_config() == Config()
        app.notify.assert_not_called()


class TestExportReport:
    """Tests for exporting the current report."""

    def test_export_writes_file(self, app, temp_storage, sample_clients, sample_entries):
        for client in sample_clients:
            temp_storage.save_client(client)
        for entry in sample_entries:
            temp_storage.save_entry(entry)
        app.report_type = "monthly"
        app.report_anchor = date(2025, 12, 10)

        app.action_export_report()

        path = temp_storage.DB_PATH.parent / "reports" / "report-2025-12-01-2025-12-31.xlsx"
        assert path.exists()
        assert str(path) in app.notify.call_args[0][0]

    def test_export_failure_notifies(self, app, temp_storage):
        with patch('app.export_report_xlsx', side_effect=OSError("disk full")):
            app.action_export_report()

        assert "disk full" in app.notify.call_args[0][0]
        assert app.notify.call_args[1]["severity"] == "error"


class TestMain:
    """Tests for the command line entry point."""

    def test_db_info(self, temp_storage, monkeypatch, capsys):
        from app import main

        monkeypatch.setattr("sys.argv", ["workhours", "--db-info"])
        main()

        out = capsys.readouterr().out
        assert f"Database: {temp_storage.DB_PATH}" in out
        assert "Size:" in out

    def test_db_info_missing_database(self, tmp_path, monkeypatch, capsys):
        import storage
        from app import main

        monkeypatch.setattr(storage, "DB_PATH", tmp_path / "absent.db")
        monkeypatch.setattr("sys.argv", ["workhours", "--db-info"])
        main()

        assert "Does not exist" in capsys.readouterr().out
