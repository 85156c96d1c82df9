"""Built-in defaults used on first run and after a full clear."""

from __future__ import annotations

from .model import AttendanceRecord, EventConfig
from ..core.enums import Category

DEFAULT_CONFIG = EventConfig(
    event_name="The Sound Nexus",
    event_date="2026-01-17",
    ticket_price=255,
    growthx_price=219,
    payment_link="",
)


def _pre_registered(id_: str, name: str, phone: str, email: str, ticket_type: str, quantity: int) -> AttendanceRecord:
    return AttendanceRecord(
        id=id_,
        name=name,
        phone=phone,
        email=email,
        ticket_type=ticket_type,
        quantity=quantity,
        amount_paid=quantity * DEFAULT_CONFIG.ticket_price,
        category=Category.PRE_REGISTERED,
    )


SAMPLE_ATTENDEES: tuple[AttendanceRecord, ...] = (
    _pre_registered("REG-001", "Priya Sharma", "9876543210", "priya@example.com", "Regular", 1),
    _pre_registered("REG-002", "Rahul Kumar", "9876543211", "rahul@example.com", "Regular", 2),
    _pre_registered("REG-003", "Ananya Patel", "9876543212", "ananya@example.com", "VIP", 1),
    _pre_registered("REG-004", "Vikram Singh", "9876543213", "vikram@example.com", "Regular", 3),
    _pre_registered("REG-005", "Neha Gupta", "9876543214", "neha@example.com", "Regular", 1),
)
