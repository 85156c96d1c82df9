"""Write a full backup (config + every attendee) as a JSON file under backups/."""

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

    out_dir = REPO_ROOT / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)

    export = container.export_service.full_backup()
    out_file = out_dir / export.filename
    out_file.write_bytes(export.content)
    print(f"OK: Backup created: {out_file}")


if __name__ == "__main__":
    main()
