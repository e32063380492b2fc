#!/usr/bin/env python3
"""Import work hours data from a JSON dump, or load sample data."""

from __future__ import annotations

import argparse
import json
from datetime import date, timedelta
from pathlib import Path

import storage
from utils import get_week_start


def sample_data(today: date | None = None) -> dict:
    """Example clients and entries spread over this week, this month and last month."""
    today = today or date.today()
    monday = get_week_start(today)
    last_month = today.replace(day=1) - timedelta(days=1)

    def day(d: date) -> str:
        return d.isoformat()

    clients = [
        {"id": "client-1", "name": "Academia X", "createdAt": "2025-12-01T10:00:00"},
        {"id": "client-2", "name": "Client A", "createdAt": "2025-12-01T10:30:00"},
        {"id": "client-3", "name": "Freelance Project", "createdAt": "2025-12-01T11:00:00"},
    ]

    entries = [
        # This week
        {"id": "entry-1", "date": day(monday), "hours": 3.5, "clientId": "client-1", "note": "Maths lessons"},
        {"id": "entry-2", "date": day(monday), "hours": 2, "clientId": "client-2", "note": "Web development"},
        {"id": "entry-3", "date": day(monday + timedelta(days=1)), "hours": 4, "clientId": "client-1", "note": "Physics lessons"},
        # Earlier in the month
        {"id": "entry-4", "date": day(today.replace(day=2)), "hours": 4, "clientId": "client-1", "note": "Group lessons"},
        {"id": "entry-5", "date": day(today.replace(day=3)), "hours": 6, "clientId": "client-3", "note": "Backend development"},
        {"id": "entry-6", "date": day(today.replace(day=4)), "hours": 2.5, "clientId": "client-2", "note": "Consulting"},
        # Last month
        {"id": "entry-7", "date": day(last_month.replace(day=25)), "hours": 8, "clientId": "client-3", "note": "Final sprint"},
        {"id": "entry-8", "date": day(last_month.replace(day=26)), "hours": 3, "clientId": "client-1", "note": "Final exams"},
        {"id": "entry-9", "date": day(last_month.replace(day=27)), "hours": 4.5, "clientId": "client-2", "note": "Code review"},
    ]

    return {
        storage.CLIENTS_KEY: clients,
        storage.ENTRIES_KEY: entries,
        storage.CONFIG_KEY: {"hourlyRate": 10},
    }


def import_from_json(json_path: Path):
    """Replace stored data with the contents of a JSON dump.

    The dump is an object holding any of the three storage keys, as saved by
    the browser version of the tracker or by export_to_json.
    """
    with open(json_path, encoding="utf-8") as f:
        data = json.load(f)

    # Browser localStorage dumps hold each key as a JSON string
    for key in storage.STORAGE_KEYS:
        if isinstance(data.get(key), str):
            data[key] = json.loads(data[key])

    storage.init_db()
    storage.load_all(data)

    print(f"Imported {len(data.get(storage.CLIENTS_KEY, []))} clients")
    print(f"Imported {len(data.get(storage.ENTRIES_KEY, []))} entries")
    print(f"Hourly rate: {storage.get_config().hourly_rate}")


def export_to_json(json_path: Path):
    """Write all stored data to a JSON dump."""
    storage.init_db()
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(storage.dump_all(), f, indent=2, ensure_ascii=False)
    print(f"Exported data to {json_path}")


def load_sample_data():
    storage.init_db()
    storage.load_all(sample_data())
    print("Loaded sample clients and entries")


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description=__doc__)
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("json_path", nargs="?", type=Path, help="JSON dump to import")
    group.add_argument("--sample", action="store_true", help="load example data")
    group.add_argument("--export", type=Path, metavar="PATH", help="write stored data to PATH")
    args = parser.parse_args(argv)

    if args.sample:
        load_sample_data()
    elif args.export:
        export_to_json(args.export)
    else:
        import_from_json(args.json_path)


if __name__ == "__main__":
    main()
