from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from event_checkin.core.exceptions import PersistenceError
from event_checkin.registry.service import Registry


class InMemorySlot:
    def __init__(self, initial: Optional[dict[str, bytes]] = None):
        self.data: dict[str, bytes] = dict(initial or {})
        self.writes = 0

    def read(self, key: str) -> Optional[bytes]:
        return self.data.get(key)

    def write(self, key: str, data: bytes) -> None:
        self.writes += 1
        self.data[key] = data

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class BrokenSlot(InMemorySlot):
    """Reads work, writes fail (disk full, DB down, ...)."""

    def __init__(self, initial: Optional[dict[str, bytes]] = None):
        super().__init__(initial)
        self.fail_writes = True

    def write(self, key: str, data: bytes) -> None:
        if self.fail_writes:
            raise PersistenceError("slot is read-only")
        super().write(key, data)


class FixedClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 1, 17, 18, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now) -> FixedClock:
    return FixedClock(fixed_now)


@pytest.fixture
def slot() -> InMemorySlot:
    return InMemorySlot()


@pytest.fixture
def broken_slot() -> BrokenSlot:
    return BrokenSlot()


@pytest.fixture
def registry(slot, clock) -> Registry:
    """Registry loaded from an empty slot: default config (price 255) + REG-001..REG-005."""
    reg = Registry(slot, store_key="test", clock=clock)
    reg.load()
    return reg


@pytest.fixture
def assert_invariants():
    """Check-in flag and timestamp agree, ids are unique."""

    def check(registry: Registry) -> None:
        records = registry.get_attendees()
        for r in records:
            assert r.checked_in == (r.check_in_time is not None), r.id
        assert len({r.id for r in records}) == len(records)

    return check
