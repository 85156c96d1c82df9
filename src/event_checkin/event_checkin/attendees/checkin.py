from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from ..core.enums import Category
from ..core.exceptions import AlreadyInStateError
from .model import AttendanceRecord


class CheckInEngine:
    """State machine for a single record.

    PreRegistered: NotCheckedIn -> CheckedIn, and back again only via undo.
    WalkIn: created CheckedIn and stays there until removed.

    Transitions are pure: they return a new record and never touch storage.
    Only ``checked_in`` and ``check_in_time`` ever change.
    """

    def check_in(self, record: AttendanceRecord, *, now: datetime) -> AttendanceRecord:
        if record.checked_in:
            raise AlreadyInStateError(f"{record.name} is already checked in")
        return replace(record, checked_in=True, check_in_time=now)

    def undo_check_in(self, record: AttendanceRecord) -> AttendanceRecord:
        if record.category != Category.PRE_REGISTERED:
            raise AlreadyInStateError("Walk-in check-ins cannot be undone")
        return replace(record, checked_in=False, check_in_time=None)

    def reset(self, record: AttendanceRecord) -> AttendanceRecord:
        """Return ``record`` as not checked in; walk-ins come back unchanged."""
        if record.category != Category.PRE_REGISTERED or not record.checked_in:
            return record
        return replace(record, checked_in=False, check_in_time=None)
