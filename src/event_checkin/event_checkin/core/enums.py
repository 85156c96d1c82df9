from __future__ import annotations

from enum import Enum
from pathlib import PurePath

from .exceptions import ValidationError


class Category(str, Enum):
    """How an attendee got in: ticket bought in advance or paid at the door."""

    PRE_REGISTERED = "PRE-REG"
    WALK_IN = "WALK-IN"


class ImportFormat(str, Enum):
    """Declared format of an import payload.

    Only the file extension or MIME type decides the format, content is never sniffed.
    """

    CSV = "csv"
    JSON = "json"

    @classmethod
    def from_filename(cls, filename: str) -> "ImportFormat":
        suffix = PurePath(filename or "").suffix.lower().lstrip(".")
        for fmt in cls:
            if fmt.value == suffix:
                return fmt
        raise ValidationError("Please upload a JSON or CSV file")

    @classmethod
    def from_mimetype(cls, mimetype: str) -> "ImportFormat":
        value = (mimetype or "").split(";", 1)[0].strip().lower()
        if value in {"text/csv", "application/csv"}:
            return cls.CSV
        if value in {"application/json", "text/json"}:
            return cls.JSON
        raise ValidationError(f"Unsupported import type: {mimetype!r}")


class AttendeeFilter(str, Enum):
    ALL = "all"
    CHECKED = "checked"
    UNCHECKED = "unchecked"
    WALKINS = "walkins"


class ScanStatus(str, Enum):
    """Outcome of a scanner/manual-entry lookup followed by check-in."""

    CHECKED_IN = "CHECKED_IN"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    NOT_FOUND = "NOT_FOUND"
