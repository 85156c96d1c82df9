from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Iterable, Optional

from ..attendees.model import AttendanceRecord, ImportCandidate
from ..common.datetime_utils import epoch_millis
from ..common.validators import optional_text
from ..core.constants import IMPORT_ID_PREFIX
from ..core.enums import Category

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value: Any) -> Optional[int]:
    """Lenient integer parsing: ``"3 tickets"`` -> 3, ``"abc"`` -> None."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def _unique_id(base: str, taken: set[str]) -> str:
    # generated ids from two imports in the same millisecond
    suffix = 2
    while f"{base}-{suffix}" in taken:
        suffix += 1
    return f"{base}-{suffix}"


@dataclass(frozen=True)
class ReconcileOutcome:
    total_parsed: int
    added: list[AttendanceRecord] = field(default_factory=list)
    skipped_ids: list[str] = field(default_factory=list)


class ImportReconciler:
    """Validate/default import candidates and merge them without duplicating ids.

    Existing records are never overwritten: a candidate whose id is already
    present (exact, case-sensitive match) is skipped.
    """

    def build_record(self, candidate: ImportCandidate, *, ticket_price: int, stamp: datetime) -> AttendanceRecord:
        quantity = parse_int(candidate.quantity)
        if quantity is None or quantity < 1:
            quantity = 1

        amount = parse_int(candidate.amount_paid)
        if amount is None or amount < 0:
            amount = ticket_price

        return AttendanceRecord(
            id=optional_text(candidate.id) or f"{IMPORT_ID_PREFIX}-{epoch_millis(stamp)}-{candidate.row_index}",
            name=optional_text(candidate.name) or "Unknown",
            phone=optional_text(candidate.phone),
            email=optional_text(candidate.email),
            ticket_type=optional_text(candidate.ticket_type) or "Regular",
            quantity=quantity,
            amount_paid=amount,
            category=Category.PRE_REGISTERED,
        )

    def reconcile(
        self,
        candidates: Iterable[ImportCandidate],
        *,
        existing_ids: Iterable[str],
        ticket_price: int,
        stamp: datetime,
    ) -> ReconcileOutcome:
        seen = set(existing_ids)
        added: list[AttendanceRecord] = []
        skipped: list[str] = []
        total = 0

        for candidate in candidates:
            total += 1
            record = self.build_record(candidate, ticket_price=ticket_price, stamp=stamp)
            if record.id in seen and not optional_text(candidate.id):
                record = replace(record, id=_unique_id(record.id, seen))
            if record.id in seen:
                logger.debug("Import row %s skipped, id %s already present", candidate.row_index, record.id)
                skipped.append(record.id)
                continue
            seen.add(record.id)
            added.append(record)

        return ReconcileOutcome(total_parsed=total, added=added, skipped_ids=skipped)
