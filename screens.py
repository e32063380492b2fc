"""Modal screens for the work hours application."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.coordinate import Coordinate
from textual.widgets import Button, DataTable, Input, Label, Select
from textual.screen import ModalScreen

from models import Client, HoursValidationError, WorkEntry
from utils import find_duplicate_client, format_currency, format_hours, validate_hours
from widgets import DaySummary
import storage


class ConfirmScreen(ModalScreen[bool]):
    """Simple confirmation dialog."""

    CSS = """
    ConfirmScreen {
        align: center middle;
    }

    #confirm-dialog {
        width: 50;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $warning;
    }

    #confirm-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
    }

    #confirm-buttons Button {
        width: 1fr;
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("y", "confirm", "Yes"),
        Binding("n", "cancel", "No"),
    ]

    def __init__(self, message: str):
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-dialog"):
            yield Label(self.message)
            with Horizontal(id="confirm-buttons"):
                yield Button("Yes (Y)", variant="warning", id="yes")
                yield Button("No (N)", variant="default", id="no")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "yes")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class NoticeScreen(ModalScreen[None]):
    """Blocking notice that must be acknowledged."""

    CSS = """
    NoticeScreen {
        align: center middle;
    }

    #notice-dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $error;
    }

    #notice-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #notice-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
        align: center middle;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "OK"),
        Binding("enter", "close", "OK", show=False),
    ]

    def __init__(self, title: str, message: str):
        super().__init__()
        self.title_text = title
        self.message = message

    def compose(self) -> ComposeResult:
        with Vertical(id="notice-dialog"):
            yield Label(self.title_text, id="notice-title")
            yield Label(self.message)
            with Horizontal(id="notice-buttons"):
                yield Button("OK", variant="primary", id="ok")

    def on_mount(self) -> None:
        self.query_one("#ok", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(None)

    def action_close(self) -> None:
        self.dismiss(None)


class EditEntryScreen(ModalScreen[WorkEntry | None]):
    """Modal screen for adding or editing one work entry.

    Returns the new or updated WorkEntry, or None if cancelled.
    """

    CSS = """
    EditEntryScreen {
        align: center middle;
    }

    #entry-dialog {
        width: 70;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }

    #entry-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }

    .field-group {
        width: 1fr;
        height: auto;
        margin: 0 1 0 0;
    }

    .field-label {
        height: 1;
        color: $text-muted;
    }

    .field-row {
        width: 100%;
        height: auto;
        margin-bottom: 1;
    }

    #hours-group {
        width: 16;
    }

    #no-clients-warning {
        color: $warning;
        margin-bottom: 1;
    }

    #entry-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    #entry-buttons Button {
        width: auto;
        min-width: 12;
        margin: 0 2;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, day: date, clients: list[Client], entry: WorkEntry | None = None):
        super().__init__()
        self.day = day
        self.clients = clients
        self.entry = entry  # None means adding a new entry

    def compose(self) -> ComposeResult:
        title = "Edit entry" if self.entry else "New entry"
        with Vertical(id="entry-dialog"):
            yield Label(f"{title}: {self.day.strftime('%a %b %d, %Y')}", id="entry-title")

            if not self.clients:
                yield Label(
                    "You have no clients yet. Add one from the Clients tab first.",
                    id="no-clients-warning",
                )

            with Horizontal(classes="field-row"):
                with Vertical(classes="field-group", id="hours-group"):
                    yield Label("Hours *", classes="field-label")
                    yield Input(
                        value=format_hours(self.entry.hours) if self.entry else "",
                        placeholder="8 or 8.5",
                        id="entry-hours",
                    )
                with Vertical(classes="field-group"):
                    yield Label("Client *", classes="field-label")
                    select_kwargs = {}
                    if self.entry and any(c.id == self.entry.client_id for c in self.clients):
                        select_kwargs["value"] = self.entry.client_id
                    yield Select(
                        [(c.name, c.id) for c in self.clients],
                        prompt="Select client...",
                        id="entry-client",
                        **select_kwargs,
                    )

            with Vertical(classes="field-row"):
                yield Label("Note (optional)", classes="field-label")
                yield Input(
                    value=(self.entry.note or "") if self.entry else "",
                    placeholder="What was the work?",
                    id="entry-note",
                )

            with Horizontal(id="entry-buttons"):
                yield Button("Save" if self.entry else "Add", variant="primary", id="save")
                yield Button("Cancel", variant="default", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#entry-hours", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Move to the next field on Enter, or save from the note field."""
        if event.input.id == "entry-hours":
            self.query_one("#entry-client", Select).focus()
        elif event.input.id == "entry-note":
            self._save_entry()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        elif event.button.id == "save":
            self._save_entry()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _save_entry(self) -> None:
        client_id = self.query_one("#entry-client", Select).value
        # A blank Select reports a sentinel rather than a client id
        if not isinstance(client_id, str):
            self.app.notify("Select a client", severity="error")
            return

        try:
            hours = validate_hours(self.query_one("#entry-hours", Input).value)
        except HoursValidationError as exc:
            self.app.notify(str(exc), severity="error")
            return

        note = self.query_one("#entry-note", Input).value.strip() or None

        if self.entry:
            updated = replace(self.entry, hours=hours, client_id=client_id, note=note)
        else:
            updated = WorkEntry(
                id=storage.generate_id(),
                date=self.day,
                hours=hours,
                client_id=client_id,
                note=note,
            )
        self.dismiss(updated)


class DayScreen(ModalScreen[None]):
    """Modal screen listing and editing the entries for one day."""

    CSS = """
    DayScreen {
        align: center middle;
    }

    #day-dialog {
        width: 80;
        height: 24;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }

    #day-summary {
        height: auto;
        margin-bottom: 1;
    }

    #day-table {
        height: 1fr;
    }

    #day-footer {
        width: 100%;
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    #day-footer Button {
        width: auto;
        min-width: 10;
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close"),
        Binding("a", "add_entry", "Add"),
        Binding("e", "edit_entry", "Edit"),
        Binding("d", "delete_entry", "Delete"),
    ]

    def __init__(self, day: date):
        super().__init__()
        self.day = day
        self.entries: list[WorkEntry] = []
        self.clients: list[Client] = []
        self.hourly_rate = Decimal("0")

    def compose(self) -> ComposeResult:
        with Vertical(id="day-dialog"):
            yield DaySummary(id="day-summary")
            yield DataTable(id="day-table")
            with Horizontal(id="day-footer"):
                yield Button("Add [a]", id="btn-add", variant="primary")
                yield Button("Edit [e]", id="btn-edit")
                yield Button("Delete [d]", id="btn-delete")
                yield Button("Close [Esc]", id="btn-close")

    def on_mount(self) -> None:
        table = self.query_one("#day-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Client", width=24)
        table.add_column("Hours", width=6)
        table.add_column("Amount", width=12)
        table.add_column("Note", width=28)
        self._load_data()
        self._refresh_table()
        table.focus()
        if not self.clients:
            self.app.notify(
                "No clients yet. Add one from the Clients tab to log hours.",
                severity="warning",
            )

    def _load_data(self) -> None:
        self.entries = storage.get_entries_by_date(self.day)
        self.clients = storage.get_all_clients()
        self.hourly_rate = storage.get_config().hourly_rate

    def day_totals(self) -> tuple[Decimal, Decimal]:
        """Total (hours, amount) for the day."""
        hours = sum((e.hours for e in self.entries), Decimal("0"))
        return hours, hours * self.hourly_rate

    def _client_name(self, client_id: str) -> str:
        for client in self.clients:
            if client.id == client_id:
                return client.name
        return "Unknown client"

    def _refresh_table(self) -> None:
        table = self.query_one("#day-table", DataTable)
        table.clear()
        for entry in self.entries:
            note = entry.note or ""
            table.add_row(
                self._client_name(entry.client_id),
                f"{format_hours(entry.hours)}h",
                format_currency(entry.amount(self.hourly_rate)),
                (note[:25] + "...") if len(note) > 28 else note,
                key=entry.id,
            )

        hours, amount = self.day_totals()
        self.query_one("#day-summary", DaySummary).update_display(
            self.day, hours, amount, len(self.entries)
        )

    def _reload(self) -> None:
        self._load_data()
        self._refresh_table()

    def _get_selected_entry(self) -> WorkEntry | None:
        table = self.query_one("#day-table", DataTable)
        if table.row_count == 0:
            return None
        row_key = table.coordinate_to_cell_key(Coordinate(table.cursor_row, 0)).row_key
        entry_id = str(row_key.value) if row_key else None
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "btn-add":
            self.action_add_entry()
        elif button_id == "btn-edit":
            self.action_edit_entry()
        elif button_id == "btn-delete":
            self.action_delete_entry()
        elif button_id == "btn-close":
            self.action_close()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        """Enter on a row edits the entry."""
        if event.control.id == "day-table":
            self.action_edit_entry()

    def action_close(self) -> None:
        self.dismiss(None)

    def action_add_entry(self) -> None:
        self.app.push_screen(EditEntryScreen(self.day, self.clients), self._on_entry_edited)

    def action_edit_entry(self) -> None:
        entry = self._get_selected_entry()
        if not entry:
            self.app.notify("No entry selected", severity="warning")
            return
        self.app.push_screen(EditEntryScreen(self.day, self.clients, entry), self._on_entry_edited)

    def _on_entry_edited(self, result: WorkEntry | None) -> None:
        if not result:
            return
        if any(e.id == result.id for e in self.entries):
            storage.update_entry(result.id, hours=result.hours, client_id=result.client_id, note=result.note)
            self.app.notify("Entry updated")
        else:
            storage.save_entry(result)
            self.app.notify(f"Logged {format_hours(result.hours)}h")
        self._reload()

    def action_delete_entry(self) -> None:
        entry = self._get_selected_entry()
        if not entry:
            self.app.notify("No entry selected", severity="warning")
            return
        self.app.push_screen(
            ConfirmScreen(
                f"Delete {format_hours(entry.hours)}h for {self._client_name(entry.client_id)}? "
                "This cannot be undone."
            ),
            lambda confirmed: self._on_delete_confirmed(confirmed, entry.id),
        )

    def _on_delete_confirmed(self, confirmed: bool | None, entry_id: str) -> None:
        if confirmed:
            storage.delete_entry(entry_id)
            self.app.notify("Entry deleted")
            self._reload()


class EditClientScreen(ModalScreen[Client | None]):
    """Modal screen for creating or renaming a client."""

    CSS = """
    EditClientScreen {
        align: center middle;
    }

    #client-dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }

    #client-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }

    .field-label {
        height: 1;
        color: $text-muted;
    }

    #client-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    #client-buttons Button {
        width: auto;
        min-width: 12;
        margin: 0 2;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, clients: list[Client], client: Client | None = None):
        super().__init__()
        self.clients = clients
        self.client = client  # None means creating new

    def compose(self) -> ComposeResult:
        title = "Edit Client" if self.client else "New Client"
        with Vertical(id="client-dialog"):
            yield Label(title, id="client-title")
            yield Label("Name", classes="field-label")
            yield Input(
                value=self.client.name if self.client else "",
                placeholder="e.g. Acme Ltd",
                id="client-name",
            )
            with Horizontal(id="client-buttons"):
                yield Button("Save", variant="primary", id="save")
                yield Button("Cancel", variant="default", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#client-name", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "client-name":
            self._save_client()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        elif event.button.id == "save":
            self._save_client()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _save_client(self) -> None:
        name = self.query_one("#client-name", Input).value.strip()

        if not name:
            self.app.notify("Name cannot be empty", severity="error")
            return

        exclude_id = self.client.id if self.client else None
        if find_duplicate_client(name, self.clients, exclude_id):
            self.app.notify(f"A client named {name} already exists", severity="error")
            return

        if self.client:
            self.dismiss(replace(self.client, name=name))
        else:
            self.dismiss(Client(id=storage.generate_id(), name=name, created_at=datetime.now()))


class EditRateScreen(ModalScreen[Decimal | None]):
    """Modal screen for changing the hourly rate."""

    CSS = """
    EditRateScreen {
        align: center middle;
    }

    #rate-dialog {
        width: 40;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }

    #rate-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #rate-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    #rate-buttons Button {
        width: auto;
        min-width: 10;
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, hourly_rate: Decimal):
        super().__init__()
        self.hourly_rate = hourly_rate

    def compose(self) -> ComposeResult:
        with Vertical(id="rate-dialog"):
            yield Label("Hourly rate (€)", id="rate-title")
            yield Input(value=str(self.hourly_rate), placeholder="10", id="rate-value")
            with Horizontal(id="rate-buttons"):
                yield Button("Save", variant="primary", id="save")
                yield Button("Cancel", variant="default", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#rate-value", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._save()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        elif event.button.id == "save":
            self._save()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _save(self) -> None:
        rate_str = self.query_one("#rate-value", Input).value.strip()

        if not rate_str:
            self.app.notify("Rate is required", severity="error")
            return

        try:
            rate = Decimal(rate_str)
        except InvalidOperation:
            self.app.notify("Invalid rate value", severity="error")
            return

        if not rate.is_finite() or rate <= 0:
            self.app.notify("Rate must be positive", severity="error")
            return

        self.dismiss(rate)
