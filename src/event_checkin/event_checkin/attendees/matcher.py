from __future__ import annotations

from typing import Iterable, Optional

from .model import AttendanceRecord


def normalize_ticket_id(raw: str) -> str:
    return (raw or "").strip().casefold()


class TicketMatcher:
    """Resolve a scanned or typed string to a record.

    Precedence, first match wins, scanning records in insertion order:

    1. normalized input equals the record id (case-insensitive);
    2. the record id is a suffix of the input (scanner added a prefix such as a URL);
    3. the input is a suffix of the record id (staff typed only the tail).

    Rules 2 and 3 are deliberately loose: ids sharing a tail (``REG-001`` and
    ``VIP-001``) can resolve to whichever comes first.
    """

    def resolve(self, raw_input: str, records: Iterable[AttendanceRecord]) -> Optional[AttendanceRecord]:
        needle = normalize_ticket_id(raw_input)
        if not needle:
            return None

        candidates = [(r, r.id.casefold()) for r in records]
        for record, ticket in candidates:
            if ticket == needle:
                return record
        for record, ticket in candidates:
            if needle.endswith(ticket):
                return record
        for record, ticket in candidates:
            if ticket.endswith(needle):
                return record
        return None
