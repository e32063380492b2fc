"""Tests for models.py - record dataclasses and their serialized form."""

from datetime import date, datetime
from decimal import Decimal

from models import Client, ClientDailyBreakdown, Config, DailyAmount, HoursValidationError, WorkEntry


class TestWorkEntry:
    """Tests for WorkEntry dataclass."""

    def test_to_dict_uses_stored_field_names(self, sample_entry):
        """Test that serialization matches the browser storage format."""
        assert sample_entry.to_dict() == {
            "id": "entry-1",
            "date": "2025-12-09",
            "hours": 3.5,
            "clientId": "client-a",
            "note": "Maths lessons",
        }

    def test_whole_hours_serialize_as_int(self):
        """Test that whole hours are written without a fraction."""
        entry = WorkEntry(id="x", date=date(2025, 12, 1), hours=Decimal("8"), client_id="c")
        assert entry.to_dict()["hours"] == 8
        assert isinstance(entry.to_dict()["hours"], int)

    def test_note_omitted_when_empty(self):
        """Test that a missing note is not written."""
        entry = WorkEntry(id="x", date=date(2025, 12, 1), hours=Decimal("1"), client_id="c")
        assert "note" not in entry.to_dict()

    def test_from_dict_round_trip(self, sample_entry):
        """Test that a serialized entry loads back identical."""
        assert WorkEntry.from_dict(sample_entry.to_dict()) == sample_entry

    def test_from_dict_empty_note_is_none(self):
        """Test that an empty note string loads as None."""
        entry = WorkEntry.from_dict(
            {"id": "x", "date": "2025-12-01", "hours": 2, "clientId": "c", "note": ""}
        )
        assert entry.note is None
        assert entry.hours == Decimal("2")

    def test_amount(self, sample_entry):
        """Test billable amount at a rate."""
        assert sample_entry.amount(Decimal("10")) == Decimal("35")

    def test_empty_note_normalised_to_none(self):
        """Test that an empty note round-trips to an identical record."""
        entry = WorkEntry(id="x", date=date(2025, 12, 1), hours=Decimal("1"), client_id="c", note="")
        assert entry.note is None
        assert WorkEntry.from_dict(entry.to_dict()) == entry


class TestClient:
    """Tests for Client dataclass."""

    def test_round_trip(self, sample_clients):
        """Test that a serialized client loads back identical."""
        for client in sample_clients:
            assert Client.from_dict(client.to_dict()) == client

    def test_from_browser_timestamp(self):
        """Test loading a createdAt with a trailing Z."""
        client = Client.from_dict(
            {"id": "client-1", "name": "Academia X", "createdAt": "2025-12-01T10:00:00.000Z"}
        )
        assert client.created_at.year == 2025
        assert client.created_at.hour == 10
        assert client.created_at.utcoffset().total_seconds() == 0

    def test_to_dict(self):
        """Test client serialization."""
        client = Client(id="c1", name="Acme", created_at=datetime(2025, 12, 1, 10, 0))
        assert client.to_dict() == {"id": "c1", "name": "Acme", "createdAt": "2025-12-01T10:00:00"}


class TestConfig:
    """Tests for Config dataclass."""

    def test_default_values(self):
        """Test default config values."""
        assert Config().hourly_rate == Decimal("10")

    def test_from_empty_dict_uses_default(self):
        """Test that a missing rate falls back to the default."""
        assert Config.from_dict({}).hourly_rate == Decimal("10")

    def test_round_trip(self):
        """Test config serialization."""
        config = Config(hourly_rate=Decimal("12.5"))
        assert config.to_dict() == {"hourlyRate": 12.5}
        assert Config.from_dict(config.to_dict()) == config


class TestClientDailyBreakdown:
    """Tests for ClientDailyBreakdown totals."""

    def test_totals(self):
        group = ClientDailyBreakdown(
            client_id="c",
            client_name="Acme",
            days=[
                DailyAmount(date(2025, 12, 1), Decimal("2"), Decimal("20")),
                DailyAmount(date(2025, 12, 2), Decimal("1.5"), Decimal("15")),
            ],
        )
        assert group.total_hours == Decimal("3.5")
        assert group.total_amount == Decimal("35")

    def test_empty_totals(self):
        group = ClientDailyBreakdown(client_id="c", client_name="Acme")
        assert group.total_hours == 0
        assert group.total_amount == 0


def test_hours_validation_error_is_value_error():
    """Test that callers can catch validation failures as ValueError."""
    assert issubclass(HoursValidationError, ValueError)
