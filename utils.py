"""Utility functions for calendar and report calculations."""

from __future__ import annotations

import unicodedata
from calendar import monthrange
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation

from models import (
    Client,
    ClientDailyBreakdown,
    ClientReportItem,
    DailyAmount,
    HoursValidationError,
    ReportData,
    WorkEntry,
)

MAX_DAY_HOURS = Decimal("24")

UNKNOWN_CLIENT_ID = "unknown"
UNKNOWN_CLIENT_NAME = "Unknown client"

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

REPORT_TYPES = ("weekly", "monthly")


def get_week_start(d: date) -> date:
    """Get the Monday that starts the week containing date d."""
    # isoweekday(): Monday = 1 ... Sunday = 7
    return d - timedelta(days=d.isoweekday() - 1)


def get_week_end(d: date) -> date:
    """Get the Sunday that ends the week containing date d."""
    return get_week_start(d) + timedelta(days=6)


def get_month_start(year: int, month: int) -> date:
    return date(year, month, 1)


def get_month_end(year: int, month: int) -> date:
    return date(year, month, monthrange(year, month)[1])


def get_calendar_days(year: int, month: int) -> list[date]:
    """Get every day shown on the month's calendar grid.

    Runs from the Monday on or before the 1st to the Sunday on or after the
    last day of the month, so the length is always a multiple of 7.
    month is 1-12, as in datetime.date.
    """
    current = get_week_start(get_month_start(year, month))
    end = get_week_end(get_month_end(year, month))

    days = []
    while current <= end:
        days.append(current)
        current += timedelta(days=1)
    return days


def get_calendar_weeks(year: int, month: int) -> list[list[date]]:
    """Calendar grid split into Monday-to-Sunday rows."""
    days = get_calendar_days(year, month)
    return [days[i:i + 7] for i in range(0, len(days), 7)]


def shift_month(year: int, month: int, step: int) -> tuple[int, int]:
    """Move (year, month) by step months."""
    index = year * 12 + (month - 1) + step
    return index // 12, index % 12 + 1


def validate_hours(hours) -> Decimal:
    """Check an hours value and return it as a Decimal.

    Hours must be positive, whole or half hours, and no more than 24.
    Raises HoursValidationError with a user-facing message otherwise.
    """
    try:
        value = Decimal(str(hours).strip())
    except InvalidOperation:
        raise HoursValidationError("Enter a valid number of hours") from None
    if not value.is_finite():
        raise HoursValidationError("Enter a valid number of hours")

    if value <= 0:
        raise HoursValidationError("Hours must be greater than 0")

    # Checked before the half-step test, which cannot divide huge values
    if value > MAX_DAY_HOURS:
        raise HoursValidationError("Hours cannot be more than 24")

    if (value * 2) % 1 != 0:
        raise HoursValidationError("Only whole or half hours are allowed (e.g. 1, 1.5, 2, 2.5)")

    return value


def _name_sort_key(name: str) -> tuple[str, str]:
    """Accent- and case-insensitive ordering, ties broken by the raw name."""
    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold(), name


def calculate_report(entries: list[WorkEntry], clients: list[Client], hourly_rate: Decimal) -> ReportData:
    """Aggregate entries already filtered to a date range.

    Entries whose client no longer exists are grouped under a single
    "unknown" bucket instead of being dropped.
    """
    names = {c.id: c.name for c in clients}
    total_hours = sum((e.hours for e in entries), Decimal("0"))

    breakdown: dict[str, ClientReportItem] = {}
    for entry in entries:
        if entry.client_id in names:
            key, name = entry.client_id, names[entry.client_id]
        else:
            key, name = UNKNOWN_CLIENT_ID, UNKNOWN_CLIENT_NAME

        item = breakdown.get(key)
        if item is None:
            item = breakdown[key] = ClientReportItem(
                client_id=key,
                client_name=name,
                hours=Decimal("0"),
                amount=Decimal("0"),
            )
        item.hours += entry.hours
        item.amount += entry.hours * hourly_rate

    return ReportData(
        total_hours=total_hours,
        total_amount=total_hours * hourly_rate,
        client_breakdown=sorted(breakdown.values(), key=lambda i: _name_sort_key(i.client_name)),
    )


def client_daily_breakdown(
    entries: list[WorkEntry], clients: list[Client], hourly_rate: Decimal
) -> list[ClientDailyBreakdown]:
    """Per-client list of logged days with amounts, ordered like the report."""
    names = {c.id: c.name for c in clients}
    groups: dict[str, ClientDailyBreakdown] = {}

    for entry in sorted(entries, key=lambda e: e.date):
        if entry.client_id in names:
            key, name = entry.client_id, names[entry.client_id]
        else:
            key, name = UNKNOWN_CLIENT_ID, UNKNOWN_CLIENT_NAME
        group = groups.setdefault(key, ClientDailyBreakdown(client_id=key, client_name=name))
        group.days.append(DailyAmount(entry.date, entry.hours, entry.hours * hourly_rate))

    return sorted(groups.values(), key=lambda g: _name_sort_key(g.client_name))


def get_report_range(report_type: str, anchor: date) -> tuple[date, date, str]:
    """Get (start, end, label) for the weekly or monthly report containing anchor."""
    if report_type == "weekly":
        start = get_week_start(anchor)
        end = get_week_end(anchor)
        label = (
            f"Week of {start.day} {MONTH_NAMES[start.month - 1]} "
            f"to {end.day} {MONTH_NAMES[end.month - 1]} {end.year}"
        )
        return start, end, label
    if report_type == "monthly":
        start = get_month_start(anchor.year, anchor.month)
        end = get_month_end(anchor.year, anchor.month)
        return start, end, f"{MONTH_NAMES[anchor.month - 1]} {anchor.year}"
    raise ValueError(f"Unknown report type: {report_type}")


def shift_report_anchor(report_type: str, anchor: date, step: int) -> date:
    """Move the anchor date by step weeks or months."""
    if report_type == "weekly":
        return anchor + timedelta(days=7 * step)
    year, month = shift_month(anchor.year, anchor.month, step)
    # Clamp e.g. Jan 31 -> Feb 28
    day = min(anchor.day, monthrange(year, month)[1])
    return date(year, month, day)


def format_currency(amount: Decimal) -> str:
    """Format money as e.g. '55.00 €'."""
    return f"{amount:.2f} €"


def format_hours(hours: Decimal) -> str:
    """Whole hours without decimals, otherwise one decimal place."""
    if hours == hours.to_integral_value():
        return str(int(hours))
    return f"{hours:.1f}"


def format_hours_calendar(hours: Decimal) -> str:
    """Format hours for a calendar cell, e.g. '8h' or '8h 30min'."""
    whole = int(hours)
    minutes = int((hours - whole) * 60)
    if minutes == 0:
        return f"{whole}h"
    return f"{whole}h {minutes}min"


def find_duplicate_client(name: str, clients: list[Client], exclude_id: str | None = None) -> Client | None:
    """Find another client whose name matches case-insensitively."""
    wanted = name.strip().casefold()
    for client in clients:
        if client.id != exclude_id and client.name.strip().casefold() == wanted:
            return client
    return None
