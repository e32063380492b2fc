from __future__ import annotations

import json
import os
import random
import sqlite3
import string
import time
from calendar import monthrange
from dataclasses import replace
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any

from logging_config import debug_enabled, setup_logger
from models import Client, Config, WorkEntry

# Fixed keys, one JSON document each
CLIENTS_KEY = "worktime_clients"
ENTRIES_KEY = "worktime_entries"
CONFIG_KEY = "worktime_config"
STORAGE_KEYS = (CLIENTS_KEY, ENTRIES_KEY, CONFIG_KEY)

log = setup_logger("Storage", debug=debug_enabled())


def _get_db_path() -> Path:
    """Get database path from environment variable or default location."""
    if env_path := os.environ.get("WORKHOURS_DB"):
        return Path(env_path)
    return Path(__file__).parent / "data" / "workhours.db"


DB_PATH = _get_db_path()


def get_connection() -> sqlite3.Connection:
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def init_db():
    """Create the key-value table if it doesn't exist."""
    conn = get_connection()
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );
    """)
    conn.commit()
    conn.close()


def _read(key: str) -> Any | None:
    """Load the JSON document stored under key, or None if absent or unreadable."""
    try:
        conn = get_connection()
        try:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
    except sqlite3.Error as exc:
        log.warning("Could not read %s: %s", key, exc)
        return None

    if row is None:
        return None

    try:
        return json.loads(row["value"])
    except json.JSONDecodeError as exc:
        log.warning("Stored value for %s is not valid JSON: %s", key, exc)
        return None


def _write(key: str, value: Any) -> None:
    conn = get_connection()
    conn.execute(
        "INSERT OR REPLACE INTO kv_store (key, value) VALUES (?, ?)",
        (key, json.dumps(value)),
    )
    conn.commit()
    conn.close()
    log.debug("Wrote %s", key)


def _read_list(key: str) -> list[dict]:
    """Load a list document, or an empty list if it is absent or not a list of records."""
    data = _read(key)
    if data is None:
        return []
    if not isinstance(data, list):
        log.warning("Stored value for %s is not a list, ignoring it", key)
        return []
    records = [item for item in data if isinstance(item, dict)]
    if len(records) != len(data):
        log.warning("Skipped %d malformed records in %s", len(data) - len(records), key)
    return records


def generate_id() -> str:
    """Unique record id: epoch milliseconds plus nine random base36 characters."""
    suffix = "".join(random.choices(string.digits + string.ascii_lowercase, k=9))
    return f"{int(time.time() * 1000)}-{suffix}"


# --- Client Functions ---


def get_all_clients() -> list[Client]:
    """Get all clients in insertion order."""
    return [Client.from_dict(item) for item in _read_list(CLIENTS_KEY)]


def _write_clients(clients: list[Client]) -> None:
    _write(CLIENTS_KEY, [c.to_dict() for c in clients])


def save_client(client: Client) -> None:
    """Append a new client."""
    clients = get_all_clients()
    clients.append(client)
    _write_clients(clients)
    log.info("Added client %s (%s)", client.id, client.name)


def update_client(client_id: str, **updates) -> bool:
    """Merge updates into an existing client. Returns False if not found."""
    clients = get_all_clients()
    for i, client in enumerate(clients):
        if client.id == client_id:
            clients[i] = replace(client, **updates)
            _write_clients(clients)
            log.info("Updated client %s: %s", client_id, ", ".join(sorted(updates)))
            return True
    return False


def get_client(client_id: str) -> Client | None:
    """Get a single client by ID."""
    for client in get_all_clients():
        if client.id == client_id:
            return client
    return None


def count_client_entries(client_id: str) -> int:
    """Number of work entries logged against a client."""
    return len(get_entries_by_client(client_id))


def can_delete_client(client_id: str) -> bool:
    """Check if a client can be deleted (has no work entries)."""
    return count_client_entries(client_id) == 0


def delete_client(client_id: str) -> bool:
    """Delete a client. Returns False if the client still has work entries."""
    if not can_delete_client(client_id):
        log.info("Refused to delete client %s: has work entries", client_id)
        return False
    clients = [c for c in get_all_clients() if c.id != client_id]
    _write_clients(clients)
    log.info("Deleted client %s", client_id)
    return True


# --- Work Entry Functions ---


def get_all_entries() -> list[WorkEntry]:
    """Get all work entries in insertion order."""
    return [WorkEntry.from_dict(item) for item in _read_list(ENTRIES_KEY)]


def _write_entries(entries: list[WorkEntry]) -> None:
    _write(ENTRIES_KEY, [e.to_dict() for e in entries])


def save_entry(entry: WorkEntry) -> None:
    """Append a new work entry."""
    entries = get_all_entries()
    entries.append(entry)
    _write_entries(entries)
    log.info("Logged %sh on %s for client %s", entry.hours, entry.date, entry.client_id)


def update_entry(entry_id: str, **updates) -> bool:
    """Merge updates into an existing entry. Returns False if not found."""
    entries = get_all_entries()
    for i, entry in enumerate(entries):
        if entry.id == entry_id:
            entries[i] = replace(entry, **updates)
            _write_entries(entries)
            log.info("Updated entry %s: %s", entry_id, ", ".join(sorted(updates)))
            return True
    return False


def delete_entry(entry_id: str) -> None:
    """Delete a work entry. Unknown ids are ignored."""
    entries = [e for e in get_all_entries() if e.id != entry_id]
    _write_entries(entries)
    log.info("Deleted entry %s", entry_id)


def get_entry(entry_id: str) -> WorkEntry | None:
    """Get a single entry by ID."""
    for entry in get_all_entries():
        if entry.id == entry_id:
            return entry
    return None


def get_entries_by_date(d: date) -> list[WorkEntry]:
    """Get all entries logged on a specific date."""
    return [e for e in get_all_entries() if e.date == d]


def get_entries_by_client(client_id: str) -> list[WorkEntry]:
    """Get all entries logged against a client."""
    return [e for e in get_all_entries() if e.client_id == client_id]


def get_entries_range(start: date, end: date) -> list[WorkEntry]:
    """Get entries between two dates (inclusive), ordered by date."""
    entries = [e for e in get_all_entries() if start <= e.date <= end]
    return sorted(entries, key=lambda e: e.date)


def get_month_entries(year: int, month: int) -> list[WorkEntry]:
    """Get all entries for a calendar month."""
    start = date(year, month, 1)
    end = date(year, month, monthrange(year, month)[1])
    return get_entries_range(start, end)


# --- Config Functions ---


def get_config() -> Config:
    """Load config, falling back to defaults when none is stored."""
    data = _read(CONFIG_KEY)
    if not isinstance(data, dict):
        return Config()
    return Config.from_dict(data)


def save_config(config: Config):
    """Save config."""
    _write(CONFIG_KEY, config.to_dict())
    log.info("Saved config: hourly rate %s", config.hourly_rate)


def update_hourly_rate(rate: Decimal) -> None:
    """Change only the hourly rate."""
    config = get_config()
    config.hourly_rate = rate
    save_config(config)


# --- Bulk Functions ---


def dump_all() -> dict[str, Any]:
    """All stored documents keyed by storage key."""
    return {
        CLIENTS_KEY: [c.to_dict() for c in get_all_clients()],
        ENTRIES_KEY: [e.to_dict() for e in get_all_entries()],
        CONFIG_KEY: get_config().to_dict(),
    }


def load_all(data: dict[str, Any]) -> None:
    """Replace the stored documents with those present in data.

    Records are parsed before anything is written so a malformed dump leaves
    storage unchanged.
    """
    clients = [Client.from_dict(item) for item in data.get(CLIENTS_KEY, [])]
    entries = [WorkEntry.from_dict(item) for item in data.get(ENTRIES_KEY, [])]
    config = Config.from_dict(data.get(CONFIG_KEY) or {})

    _write_clients(clients)
    _write_entries(entries)
    save_config(config)
    log.info("Loaded %d clients and %d entries", len(clients), len(entries))
