from __future__ import annotations

import copy
import json
import logging
import threading
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, Iterable, Optional, Sequence

from ..attendees.checkin import CheckInEngine
from ..attendees.matcher import TicketMatcher
from ..attendees.model import AttendanceRecord, EventConfig, ImportCandidate
from ..attendees.seed import DEFAULT_CONFIG, SAMPLE_ATTENDEES
from ..common.datetime_utils import epoch_millis, now_utc
from ..common.validators import (
    optional_text,
    require_int_range,
    require_iso_date,
    require_non_empty,
)
from ..core.constants import (
    DEFAULT_STORE_KEY,
    MAX_WALKIN_QUANTITY,
    MIN_WALKIN_QUANTITY,
    WALKIN_ID_MAX_ATTEMPTS,
    WALKIN_ID_PREFIX,
)
from ..core.enums import AttendeeFilter, Category, ImportFormat, ScanStatus
from ..core.exceptions import NotFoundError, ParseError, PersistenceError, ValidationError
from ..imports.parser import parse_payload
from ..imports.reconciler import ImportReconciler
from ..stats.aggregator import AttendanceStats, StatsAggregator
from ..storage.slot import StorageSlot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationResult:
    """A state change that was applied in memory; ``persisted`` says whether it reached storage."""

    record: AttendanceRecord
    persisted: bool


@dataclass(frozen=True)
class ConfigUpdate:
    config: EventConfig
    persisted: bool


@dataclass(frozen=True)
class BulkResult:
    affected: int
    persisted: bool


@dataclass(frozen=True)
class ImportResult:
    total_parsed: int
    added: int
    persisted: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {"totalParsed": self.total_parsed, "added": self.added, "persisted": self.persisted}


@dataclass(frozen=True)
class ScanResult:
    status: ScanStatus
    record: Optional[AttendanceRecord] = None
    persisted: bool = True


class Registry:
    """Owns the attendee records and the event configuration.

    State transitions are computed by the collaborators (matcher, check-in
    engine, reconciler, aggregator) and applied here; every successful mutation
    is followed by an explicit ``save()``. Validation and state conflicts raise
    ``DomainError`` subclasses before anything is changed. A failed save is
    logged and reported through the ``persisted`` flag of the result, but the
    in-memory change is kept.

    All public operations run under one re-entrant lock so that concurrent
    requests cannot interleave a lookup with a transition.
    """

    def __init__(
        self,
        slot: StorageSlot,
        *,
        store_key: str = DEFAULT_STORE_KEY,
        matcher: TicketMatcher | None = None,
        engine: CheckInEngine | None = None,
        reconciler: ImportReconciler | None = None,
        aggregator: StatsAggregator | None = None,
        clock: Callable[[], datetime] = now_utc,
        default_config: EventConfig = DEFAULT_CONFIG,
        seed: Sequence[AttendanceRecord] = SAMPLE_ATTENDEES,
    ):
        self._slot = slot
        self._store_key = store_key
        self._matcher = matcher or TicketMatcher()
        self._engine = engine or CheckInEngine()
        self._reconciler = reconciler or ImportReconciler()
        self._aggregator = aggregator or StatsAggregator()
        self._clock = clock
        self._default_config = default_config
        self._seed = tuple(seed)
        self._lock = threading.RLock()

        self._config = default_config
        self._records: list[AttendanceRecord] = []

    # --- Persistence ---

    def load(self) -> tuple[EventConfig, list[AttendanceRecord]]:
        """Restore state from the slot, falling back to defaults + seed records.

        Never raises: a missing, unreadable or corrupt payload is treated as absent.
        """

        with self._lock:
            try:
                raw = self._slot.read(self._store_key)
            except PersistenceError:
                logger.warning("Storage slot %r unreadable, starting from seed data", self._store_key, exc_info=True)
                raw = None

            restored = self._decode(raw) if raw is not None else None
            if restored is None:
                self._reset_to_seed()
                self.save()
            else:
                self._config, self._records = restored
                logger.info("Loaded %d attendees from %r", len(self._records), self._store_key)
            return self._config, list(self._records)

    def _decode(self, raw: bytes) -> Optional[tuple[EventConfig, list[AttendanceRecord]]]:
        try:
            data = json.loads(raw.decode("utf-8"))
            config = EventConfig.from_dict(data.get("config") or {}, defaults=self._default_config)
            records = [AttendanceRecord.from_dict(a) for a in data.get("attendees") or []]
        except (AttributeError, KeyError, TypeError, ValueError, RecursionError):
            logger.warning("Stored payload under %r is corrupt, starting from seed data", self._store_key, exc_info=True)
            return None

        ids = [r.id for r in records]
        if len(ids) != len(set(ids)):
            logger.warning("Stored payload under %r has duplicate ids, starting from seed data", self._store_key)
            return None
        return config, records

    def _reset_to_seed(self) -> None:
        self._config = self._default_config
        self._records = list(self._seed)

    def snapshot(self) -> dict[str, Any]:
        """The full persisted structure: ``{config, attendees}``."""
        with self._lock:
            return {
                "config": self._config.to_dict(),
                "attendees": [r.to_dict() for r in self._records],
            }

    def save(self) -> bool:
        with self._lock:
            payload = json.dumps(self.snapshot(), ensure_ascii=False).encode("utf-8")
            try:
                self._slot.write(self._store_key, payload)
            except PersistenceError:
                logger.error("Saving %d attendees to %r failed", len(self._records), self._store_key, exc_info=True)
                return False
            return True

    # --- Config ---

    _CONFIG_FIELDS = ("event_name", "event_date", "ticket_price", "growthx_price", "payment_link")

    def get_config(self) -> EventConfig:
        return self._config

    def update_config(self, **partial: Any) -> ConfigUpdate:
        unknown = sorted(set(partial) - set(self._CONFIG_FIELDS))
        if unknown:
            raise ValidationError(f"Unknown config field(s): {', '.join(unknown)}")

        clean: dict[str, Any] = {}
        if "event_name" in partial:
            clean["event_name"] = require_non_empty(partial["event_name"], "Event name")
        if "event_date" in partial:
            clean["event_date"] = require_iso_date(partial["event_date"], "Event date")
        if "ticket_price" in partial:
            clean["ticket_price"] = require_int_range(partial["ticket_price"], "Ticket price", min_value=0)
        if "growthx_price" in partial:
            clean["growthx_price"] = require_int_range(partial["growthx_price"], "Alternate price", min_value=0)
        if "payment_link" in partial:
            link = partial["payment_link"]
            if link is not None and not isinstance(link, str):
                raise ValidationError("Payment link must be text")
            clean["payment_link"] = (link or "").strip()

        with self._lock:
            self._config = replace(self._config, **clean)
            logger.info("Config updated: %s", ", ".join(sorted(clean)) or "no changes")
            return ConfigUpdate(config=self._config, persisted=self.save())

    # --- Reads ---

    def get_attendees(self) -> list[AttendanceRecord]:
        with self._lock:
            return list(self._records)

    def get_attendee(self, attendee_id: str) -> Optional[AttendanceRecord]:
        with self._lock:
            index = self._index_of(attendee_id)
            return self._records[index] if index is not None else None

    def find_attendee(self, raw_id: str) -> Optional[AttendanceRecord]:
        with self._lock:
            return self._matcher.resolve(raw_id, self._records)

    def list_attendees(
        self,
        *,
        search: str | None = None,
        status: AttendeeFilter = AttendeeFilter.ALL,
    ) -> list[AttendanceRecord]:
        """Filtered view for the attendee list: checked-in first, then by name."""

        needle = (search or "").strip().lower()
        status = AttendeeFilter(status)
        with self._lock:
            rows = [r for r in self._records if _matches_search(r, needle) and _matches_filter(r, status)]
        rows.sort(key=lambda r: (not r.checked_in, r.name.casefold()))
        return rows

    def list_walk_ins(self) -> list[AttendanceRecord]:
        with self._lock:
            walk_ins = [r for r in self._records if r.category == Category.WALK_IN]
        walk_ins.sort(key=lambda r: r.check_in_time, reverse=True)
        return walk_ins

    def stats(self) -> AttendanceStats:
        with self._lock:
            return self._aggregator.compute(self._records)

    # --- Check-in ---

    def check_in(self, attendee_id: str) -> OperationResult:
        with self._lock:
            index = self._require_index(attendee_id)
            updated = self._engine.check_in(self._records[index], now=self._clock())
            self._records[index] = updated
            logger.info("Checked in %s (%s)", updated.id, updated.name)
            return OperationResult(record=updated, persisted=self.save())

    def undo_check_in(self, attendee_id: str) -> OperationResult:
        with self._lock:
            index = self._require_index(attendee_id)
            updated = self._engine.undo_check_in(self._records[index])
            self._records[index] = updated
            logger.info("Check-in undone for %s (%s)", updated.id, updated.name)
            return OperationResult(record=updated, persisted=self.save())

    def scan(self, raw_input: str) -> ScanResult:
        """Resolve a scanned/typed ticket and check it in if it is not already."""

        if not isinstance(raw_input, str) or not raw_input.strip():
            raise ValidationError("Ticket ID is required")

        with self._lock:
            record = self._matcher.resolve(raw_input, self._records)
            if record is None:
                logger.info("Scan %r did not match any ticket", raw_input.strip())
                return ScanResult(status=ScanStatus.NOT_FOUND)
            if record.checked_in:
                return ScanResult(status=ScanStatus.ALREADY_CHECKED_IN, record=record)
            result = self.check_in(record.id)
            return ScanResult(status=ScanStatus.CHECKED_IN, record=result.record, persisted=result.persisted)

    def reset_check_ins(self) -> BulkResult:
        with self._lock:
            changed = 0
            for index, record in enumerate(self._records):
                reset = self._engine.reset(record)
                if reset is not record:
                    self._records[index] = reset
                    changed += 1
            logger.info("Reset %d check-ins", changed)
            return BulkResult(affected=changed, persisted=self.save())

    # --- Walk-ins ---

    def add_walk_in(self, *, name: str, quantity: int = 1, transaction_id: str | None = None) -> OperationResult:
        name = require_non_empty(name, "Customer name")
        quantity = require_int_range(
            quantity, "Quantity", min_value=MIN_WALKIN_QUANTITY, max_value=MAX_WALKIN_QUANTITY
        )

        with self._lock:
            now = self._clock()
            record = AttendanceRecord(
                id=self._next_walk_in_id(now),
                name=name,
                ticket_type="Walk-In",
                quantity=quantity,
                amount_paid=quantity * self._config.ticket_price,
                category=Category.WALK_IN,
                checked_in=True,
                check_in_time=now,
                transaction_id=optional_text(transaction_id),
            )
            self._records.append(record)
            logger.info("Walk-in %s logged: %s x%d", record.id, record.name, record.quantity)
            return OperationResult(record=record, persisted=self.save())

    def _next_walk_in_id(self, now: datetime) -> str:
        taken = {r.id for r in self._records}
        millis = epoch_millis(now)
        for offset in range(WALKIN_ID_MAX_ATTEMPTS):
            candidate = f"{WALKIN_ID_PREFIX}-{millis + offset}"
            if candidate not in taken:
                return candidate
        while True:
            candidate = f"{WALKIN_ID_PREFIX}-{uuid.uuid4().hex[:12].upper()}"
            if candidate not in taken:
                return candidate

    def remove_walk_in(self, attendee_id: str) -> OperationResult:
        with self._lock:
            index = self._index_of(attendee_id)
            if index is None or self._records[index].category != Category.WALK_IN:
                raise NotFoundError(f"No walk-in with id {attendee_id}")
            removed = self._records.pop(index)
            logger.info("Walk-in %s removed", removed.id)
            return OperationResult(record=removed, persisted=self.save())

    # --- Bulk ---

    def import_attendees(self, candidates: Iterable[ImportCandidate]) -> ImportResult:
        candidates = list(candidates)
        if not candidates:
            raise ParseError("No valid records found", total_parsed=0)

        with self._lock:
            outcome = self._reconciler.reconcile(
                candidates,
                existing_ids=(r.id for r in self._records),
                ticket_price=self._config.ticket_price,
                stamp=self._clock(),
            )
            self._records.extend(outcome.added)
            persisted = self.save() if outcome.added else True
            logger.info(
                "Imported %d of %d attendees (%d duplicates skipped)",
                len(outcome.added),
                outcome.total_parsed,
                len(outcome.skipped_ids),
            )
            return ImportResult(total_parsed=outcome.total_parsed, added=len(outcome.added), persisted=persisted)

    def import_payload(self, data: bytes | str, fmt: ImportFormat) -> ImportResult:
        return self.import_attendees(parse_payload(data, ImportFormat(fmt)))

    def clear_all(self) -> bool:
        """Wipe persisted state and start again from defaults + seed records."""

        with self._lock:
            try:
                self._slot.delete(self._store_key)
            except PersistenceError:
                logger.error("Deleting %r failed, overwriting instead", self._store_key, exc_info=True)
            self._reset_to_seed()
            logger.info("All data cleared, %d sample attendees restored", len(self._records))
            return self.save()

    def export_data(self) -> dict[str, Any]:
        return copy.deepcopy(self.snapshot())

    # --- Helpers ---

    def _index_of(self, attendee_id: str) -> Optional[int]:
        for index, record in enumerate(self._records):
            if record.id == attendee_id:
                return index
        return None

    def _require_index(self, attendee_id: str) -> int:
        index = self._index_of(attendee_id)
        if index is None:
            raise NotFoundError(f"Ticket {attendee_id} not found")
        return index


def _matches_search(record: AttendanceRecord, needle: str) -> bool:
    if not needle:
        return True
    return (
        needle in record.name.lower()
        or needle in record.id.lower()
        or (record.phone is not None and needle in record.phone)
        or (record.email is not None and needle in record.email.lower())
    )


def _matches_filter(record: AttendanceRecord, status: AttendeeFilter) -> bool:
    if status == AttendeeFilter.CHECKED:
        return record.checked_in and record.category == Category.PRE_REGISTERED
    if status == AttendeeFilter.UNCHECKED:
        return not record.checked_in and record.category == Category.PRE_REGISTERED
    if status == AttendeeFilter.WALKINS:
        return record.category == Category.WALK_IN
    return True
