from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Union

from ..common.datetime_utils import parse_iso_datetime, to_iso
from ..core.enums import Category, ImportFormat


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one ticket holder or walk-in purchase.

    Instances are immutable; transitions produce a new record via
    ``dataclasses.replace`` so the registry can swap it in atomically.
    """

    id: str
    name: str
    ticket_type: str
    quantity: int
    amount_paid: int
    category: Category
    phone: Optional[str] = None
    email: Optional[str] = None
    checked_in: bool = False
    check_in_time: Optional[datetime] = None
    transaction_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("attendee id must not be empty")
        if self.quantity < 1:
            raise ValueError(f"quantity must be positive, got {self.quantity}")
        if self.amount_paid < 0:
            raise ValueError(f"amount_paid must not be negative, got {self.amount_paid}")
        if self.checked_in != (self.check_in_time is not None):
            raise ValueError(f"{self.id}: checked_in and check_in_time disagree")
        if self.category == Category.WALK_IN and not self.checked_in:
            raise ValueError(f"{self.id}: walk-ins are always checked in")

    @property
    def is_walk_in(self) -> bool:
        return self.category == Category.WALK_IN

    def to_dict(self) -> dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "ticketType": self.ticket_type,
            "quantity": self.quantity,
            "amountPaid": self.amount_paid,
            "type": self.category.value,
            "checkedIn": self.checked_in,
            "checkInTime": to_iso(self.check_in_time),
        }
        if self.category == Category.WALK_IN:
            data["transactionId"] = self.transaction_id
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AttendanceRecord":
        """Rebuild a record from its persisted form.

        Raises ``KeyError``/``ValueError``/``TypeError`` on malformed input.
        """

        if not isinstance(data, dict):
            raise TypeError(f"attendee entry must be an object, got {type(data).__name__}")
        quantity = data["quantity"]
        amount = data["amountPaid"]
        if not isinstance(quantity, int) or not isinstance(amount, int):
            raise TypeError("quantity and amountPaid must be integers")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            phone=data.get("phone"),
            email=data.get("email"),
            ticket_type=str(data.get("ticketType") or "Regular"),
            quantity=quantity,
            amount_paid=amount,
            category=Category(data["type"]),
            checked_in=bool(data.get("checkedIn", False)),
            check_in_time=parse_iso_datetime(data.get("checkInTime")),
            transaction_id=data.get("transactionId"),
        )


@dataclass(frozen=True)
class EventConfig:
    event_name: str
    event_date: str
    ticket_price: int
    growthx_price: int
    payment_link: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "eventName": self.event_name,
            "eventDate": self.event_date,
            "ticketPrice": self.ticket_price,
            "growthxPrice": self.growthx_price,
            "paymentLink": self.payment_link,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, defaults: "EventConfig") -> "EventConfig":
        """Merge a persisted config over ``defaults``; unknown keys are ignored."""

        if not isinstance(data, dict):
            raise TypeError("config must be an object")
        merged = defaults.to_dict()
        if "upiLink" in data and "paymentLink" not in data:
            merged["paymentLink"] = data["upiLink"]
        merged.update({k: v for k, v in data.items() if k in merged})
        if not isinstance(merged["ticketPrice"], int) or not isinstance(merged["growthxPrice"], int):
            raise TypeError("prices must be integers")
        if merged["ticketPrice"] < 0 or merged["growthxPrice"] < 0:
            raise ValueError("prices must not be negative")
        return cls(
            event_name=str(merged["eventName"]),
            event_date=str(merged["eventDate"]),
            ticket_price=merged["ticketPrice"],
            growthx_price=merged["growthxPrice"],
            payment_link=str(merged["paymentLink"] or ""),
        )


RawNumber = Union[str, int, float, None]


@dataclass(frozen=True)
class ImportCandidate:
    """Loosely-typed row taken from an import payload.

    Every field is optional; the reconciler validates and defaults it into a
    strict ``AttendanceRecord`` before anything reaches the registry.
    """

    row_index: int
    source: ImportFormat
    id: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    ticket_type: Optional[str] = None
    quantity: RawNumber = None
    amount_paid: RawNumber = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)
