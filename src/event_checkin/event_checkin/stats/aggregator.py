from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..attendees.model import AttendanceRecord
from ..core.enums import Category


@dataclass(frozen=True)
class AttendanceStats:
    pre_registered: int
    pre_reg_checked_in: int
    check_in_percentage: int
    walk_ins: int
    total_checked_in: int
    total_revenue: int
    walk_in_revenue: int

    @property
    def pre_reg_revenue(self) -> int:
        return self.total_revenue - self.walk_in_revenue

    @property
    def total_attendees(self) -> int:
        return self.pre_reg_checked_in + self.walk_ins

    def to_dict(self) -> dict[str, int]:
        return {
            "preRegistered": self.pre_registered,
            "preRegCheckedIn": self.pre_reg_checked_in,
            "checkInPercentage": self.check_in_percentage,
            "walkIns": self.walk_ins,
            "totalCheckedIn": self.total_checked_in,
            "totalAttendees": self.total_attendees,
            "preRegRevenue": self.pre_reg_revenue,
            "walkInRevenue": self.walk_in_revenue,
            "totalRevenue": self.total_revenue,
        }


def percentage(part: int, whole: int) -> int:
    """Half-up rounded percentage, 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return (part * 200 + whole) // (whole * 2)


class StatsAggregator:
    """Counts and revenue totals, recomputed from the live record set on every call."""

    def compute(self, records: Iterable[AttendanceRecord]) -> AttendanceStats:
        pre_registered = pre_checked = walk_ins = checked = 0
        revenue = walk_in_revenue = 0

        for r in records:
            revenue += r.amount_paid
            if r.checked_in:
                checked += 1
            if r.category == Category.PRE_REGISTERED:
                pre_registered += 1
                if r.checked_in:
                    pre_checked += 1
            elif r.category == Category.WALK_IN:
                walk_ins += 1
                walk_in_revenue += r.amount_paid

        return AttendanceStats(
            pre_registered=pre_registered,
            pre_reg_checked_in=pre_checked,
            check_in_percentage=percentage(pre_checked, pre_registered),
            walk_ins=walk_ins,
            total_checked_in=checked,
            total_revenue=revenue,
            walk_in_revenue=walk_in_revenue,
        )
