"""Import pre-registered attendees from a CSV or JSON file.

Usage: python scripts/import_attendees.py path/to/attendees.csv
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src" / "event_checkin"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from config import get_settings_module

from event_checkin.container import build_container
from event_checkin.core.enums import ImportFormat
from event_checkin.core.exceptions import DomainError


def main(argv: list[str]) -> None:
    if len(argv) != 1:
        raise SystemExit("Usage: import_attendees.py FILE")

    source = Path(argv[0])
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings=settings)

    try:
        result = container.registry.import_payload(source.read_bytes(), ImportFormat.from_filename(source.name))
    except FileNotFoundError:
        raise SystemExit(f"File not found: {source}")
    except DomainError as e:
        raise SystemExit(f"Import failed: {e}")

    print(f"OK: Imported {result.added} of {result.total_parsed} attendees")
    if not result.persisted:
        raise SystemExit("Warning: import applied but could not be saved")


if __name__ == "__main__":
    main(sys.argv[1:])
