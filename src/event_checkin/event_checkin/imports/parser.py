"""Turn raw import payloads into ``ImportCandidate`` rows.

Two formats are accepted, chosen by the caller (extension/MIME), never sniffed:

* CSV: the first non-empty line is the header. Header cells are trimmed,
  lower-cased and have whitespace runs replaced by ``_``. Fields are split on
  commas with quote handling (``"`` toggles quoting, ``""`` inside quotes is a
  literal quote). Missing trailing fields read as empty strings.
* JSON: either a bare list of records, or an object whose ``attendees`` field is
  a list (a full backup). From a backup only untagged or ``PRE-REG`` entries are
  taken; walk-ins are never re-imported.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterator, Optional, Sequence

from ..core.enums import Category, ImportFormat
from ..core.exceptions import ParseError
from ..attendees.model import ImportCandidate

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("id", "ticket_id", "booking_id"),
    "name": ("name", "full_name", "customer_name"),
    "phone": ("phone", "mobile", "contact"),
    "email": ("email",),
    "ticket_type": ("ticket_type", "type"),
    "quantity": ("quantity", "tickets"),
    "amount_paid": ("amount", "amount_paid", "total"),
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_WHITESPACE = re.compile(r"\s+")


def normalize_header(cell: str) -> str:
    return _WHITESPACE.sub("_", cell.strip().lower())


def normalize_key(key: str) -> str:
    """``ticketType`` / ``Ticket Type`` / ``ticket_type`` -> ``ticket_type``."""
    return normalize_header(_CAMEL_BOUNDARY.sub("_", str(key)))


def split_csv_line(line: str) -> list[str]:
    values: list[str] = []
    buf: list[str] = []
    in_quotes = False
    i = 0

    while i < len(line):
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                buf.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            values.append("".join(buf).strip())
            buf.clear()
        else:
            buf.append(ch)
        i += 1

    values.append("".join(buf).strip())
    return values


def _first_present(row: dict[str, Any], aliases: Sequence[str]) -> Any:
    for key in aliases:
        value = row.get(key)
        if value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        return value
    return None


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def candidate_from_row(row: dict[str, Any], *, row_index: int, source: ImportFormat) -> ImportCandidate:
    """Resolve field aliases, first match wins, into a candidate."""

    picked = {target: _first_present(row, aliases) for target, aliases in FIELD_ALIASES.items()}
    known = {alias for aliases in FIELD_ALIASES.values() for alias in aliases}
    return ImportCandidate(
        row_index=row_index,
        source=source,
        id=_as_text(picked["id"]),
        name=_as_text(picked["name"]),
        phone=_as_text(picked["phone"]),
        email=_as_text(picked["email"]),
        ticket_type=_as_text(picked["ticket_type"]),
        quantity=picked["quantity"],
        amount_paid=picked["amount_paid"],
        extra={k: v for k, v in row.items() if k not in known},
    )


def _non_empty_lines(text: str) -> Iterator[str]:
    for line in text.split("\n"):
        if line.strip():
            yield line.rstrip("\r")


def parse_csv(text: str) -> list[ImportCandidate]:
    lines = _non_empty_lines(text)
    header_line = next(lines, None)
    if header_line is None:
        return []

    headers = [normalize_header(h) for h in split_csv_line(header_line)]
    candidates: list[ImportCandidate] = []
    for index, line in enumerate(lines, start=1):
        values = split_csv_line(line)
        row = {h: (values[pos] if pos < len(values) else "") for pos, h in enumerate(headers) if h}
        candidates.append(candidate_from_row(row, row_index=index, source=ImportFormat.CSV))
    return candidates


def _select_json_entries(data: Any) -> list[Any]:
    if isinstance(data, dict) and isinstance(data.get("attendees"), list):
        return [
            a
            for a in data["attendees"]
            if not isinstance(a, dict) or a.get("type") in (None, "", Category.PRE_REGISTERED.value)
        ]
    if isinstance(data, list):
        return data
    return []


def _normalize_json_entry(entry: dict[str, Any]) -> dict[str, Any]:
    row = {normalize_key(k): v for k, v in entry.items()}
    # In backups ``type`` carries the category tag, not a ticket type.
    if row.get("type") in {c.value for c in Category}:
        row.pop("type")
    return row


def parse_json(text: str) -> list[ImportCandidate]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON: {exc.msg}") from exc
    except RecursionError:
        raise ParseError("Invalid JSON: nested too deeply") from None

    candidates: list[ImportCandidate] = []
    for index, entry in enumerate(_select_json_entries(data), start=1):
        if not isinstance(entry, dict):
            continue
        candidates.append(
            candidate_from_row(_normalize_json_entry(entry), row_index=index, source=ImportFormat.JSON)
        )
    return candidates


def decode_payload(data: bytes | str) -> str:
    if isinstance(data, str):
        return data
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ParseError("Import file is not valid UTF-8 text") from exc


def parse_payload(data: bytes | str, fmt: ImportFormat) -> list[ImportCandidate]:
    text = decode_payload(data)
    if fmt == ImportFormat.CSV:
        return parse_csv(text)
    return parse_json(text)

