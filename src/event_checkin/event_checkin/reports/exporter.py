from __future__ import annotations

import csv
import io
import json
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Sequence

from ..attendees.model import AttendanceRecord
from ..common.datetime_utils import now_utc, to_iso
from ..core.enums import Category
from ..core.exceptions import NotFoundError
from ..registry.service import Registry

CHECKIN_COLUMNS: tuple[tuple[str, str], ...] = (
    ("id", "Ticket ID"),
    ("name", "Name"),
    ("phone", "Phone"),
    ("email", "Email"),
    ("ticketType", "Ticket Type"),
    ("quantity", "Quantity"),
    ("amountPaid", "Amount Paid"),
    ("checkedIn", "Checked In"),
    ("checkInTime", "Check-In Time"),
)

WALKIN_COLUMNS: tuple[tuple[str, str], ...] = (
    ("id", "ID"),
    ("name", "Name"),
    ("quantity", "Tickets"),
    ("amountPaid", "Amount"),
    ("transactionId", "Transaction ID"),
    ("checkInTime", "Time"),
)


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content: bytes
    mimetype: str


def _slug(event_name: str) -> str:
    return re.sub(r"\s+", "_", event_name.strip()) or "event"


def _csv_value(key: str, value: Any) -> Any:
    if key == "checkedIn":
        return "Yes" if value else "No"
    if value is None:
        return ""
    return value


def write_csv(records: Iterable[AttendanceRecord], columns: Sequence[tuple[str, str]]) -> bytes:
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow([label for _, label in columns])
    for record in records:
        row = record.to_dict()
        writer.writerow([_csv_value(key, row.get(key)) for key, _ in columns])
    return out.getvalue().encode("utf-8-sig")


class ExportService:
    """Builds download payloads from the registry's current state.

    Only content is decided here; delivering the bytes (download, clipboard,
    HTTP attachment) is up to the caller.
    """

    def __init__(self, registry: Registry, *, clock: Callable[[], datetime] = now_utc):
        self._registry = registry
        self._clock = clock

    def _filename(self, kind: str, ext: str) -> str:
        stamp = self._clock().date().isoformat()
        return f"{_slug(self._registry.get_config().event_name)}_{kind}_{stamp}.{ext}"

    def full_backup(self) -> ExportFile:
        content = json.dumps(self._registry.export_data(), indent=2, ensure_ascii=False).encode("utf-8")
        return ExportFile(self._filename("backup", "json"), content, "application/json")

    def checkins_csv(self) -> ExportFile:
        records = [r for r in self._registry.get_attendees() if r.category == Category.PRE_REGISTERED]
        return ExportFile(self._filename("checkins", "csv"), write_csv(records, CHECKIN_COLUMNS), "text/csv")

    def walkins_csv(self) -> ExportFile:
        records = [r for r in self._registry.get_attendees() if r.category == Category.WALK_IN]
        return ExportFile(self._filename("walkins", "csv"), write_csv(records, WALKIN_COLUMNS), "text/csv")

    def summary(self) -> dict[str, Any]:
        config = self._registry.get_config()
        return {
            "event": {
                "name": config.event_name,
                "date": config.event_date,
                "ticketPrice": config.ticket_price,
            },
            "statistics": self._registry.stats().to_dict(),
            "exportedAt": to_iso(self._clock()),
        }

    def summary_json(self) -> ExportFile:
        content = json.dumps(self.summary(), indent=2, ensure_ascii=False).encode("utf-8")
        return ExportFile(self._filename("summary", "json"), content, "application/json")

    def build(self, kind: str) -> ExportFile:
        builders = {
            "backup": self.full_backup,
            "checkins": self.checkins_csv,
            "walkins": self.walkins_csv,
            "summary": self.summary_json,
        }
        builder = builders.get(kind)
        if builder is None:
            raise NotFoundError(f"Unknown export: {kind}")
        return builder()
