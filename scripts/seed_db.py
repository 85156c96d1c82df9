"""Wipe the stored registry and restore the default config + sample attendees."""

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


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings=settings)

    if not container.registry.clear_all():
        raise SystemExit("Seed data restored in memory but could not be saved, check the storage settings.")
    print(f"OK: Seeded {len(container.registry.get_attendees())} sample attendees")


if __name__ == "__main__":
    main()
