from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal


class HoursValidationError(ValueError):
    """Raised when an hours value cannot be logged."""


def _json_number(value: Decimal) -> int | float:
    """Render a Decimal as the plain JSON number the browser store used."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


@dataclass
class Client:
    id: str
    name: str
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Client:
        created = data.get("createdAt")
        return cls(
            id=str(data["id"]),
            name=data["name"],
            # Browser dumps use a trailing "Z" for UTC
            created_at=datetime.fromisoformat(created.replace("Z", "+00:00")) if created else datetime.now(),
        )


@dataclass
class WorkEntry:
    id: str
    date: date
    hours: Decimal
    client_id: str
    note: str | None = None

    def __post_init__(self):
        # An empty note is stored as no note at all
        if not self.note:
            self.note = None

    def amount(self, hourly_rate: Decimal) -> Decimal:
        """Billable amount for this entry at the given rate."""
        return self.hours * hourly_rate

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "date": self.date.isoformat(),
            "hours": _json_number(self.hours),
            "clientId": self.client_id,
        }
        if self.note:
            data["note"] = self.note
        return data

    @classmethod
    def from_dict(cls, data: dict) -> WorkEntry:
        return cls(
            id=str(data["id"]),
            date=date.fromisoformat(data["date"]),
            hours=Decimal(str(data["hours"])),
            client_id=str(data["clientId"]),
            note=data.get("note") or None,
        )


@dataclass
class Config:
    hourly_rate: Decimal = Decimal("10")

    def to_dict(self) -> dict:
        return {"hourlyRate": _json_number(self.hourly_rate)}

    @classmethod
    def from_dict(cls, data: dict) -> Config:
        config = cls()
        if "hourlyRate" in data:
            config.hourly_rate = Decimal(str(data["hourlyRate"]))
        return config


@dataclass
class ClientReportItem:
    client_id: str
    client_name: str
    hours: Decimal
    amount: Decimal


@dataclass
class ReportData:
    total_hours: Decimal
    total_amount: Decimal
    client_breakdown: list[ClientReportItem] = field(default_factory=list)


@dataclass
class DailyAmount:
    date: date
    hours: Decimal
    amount: Decimal


@dataclass
class ClientDailyBreakdown:
    """One client's entries in a report range, listed day by day."""

    client_id: str
    client_name: str
    days: list[DailyAmount] = field(default_factory=list)

    @property
    def total_hours(self) -> Decimal:
        return sum((d.hours for d in self.days), Decimal("0"))

    @property
    def total_amount(self) -> Decimal:
        return sum((d.amount for d in self.days), Decimal("0"))
