from __future__ import annotations

import json

import pytest

from event_checkin.core.enums import Category, ImportFormat
from event_checkin.core.exceptions import ParseError

CSV = b"id,name,quantity,amount\nA1,Jane,2,400\nA2,\"Doe, John\",1,\n"


def test_single_row_import_matches_expected_record(registry):
    result = registry.import_payload(b"id,name,quantity,amount\nA1,Jane,2,400\n", ImportFormat.CSV)

    assert (result.total_parsed, result.added) == (1, 1)
    rec = registry.get_attendee("A1")
    assert rec.name == "Jane"
    assert rec.quantity == 2
    assert rec.amount_paid == 400
    assert rec.ticket_type == "Regular"
    assert rec.category == Category.PRE_REGISTERED
    assert rec.checked_in is False


def test_reimporting_same_csv_adds_nothing(registry, slot):
    first = registry.import_payload(CSV, ImportFormat.CSV)
    writes = slot.writes
    second = registry.import_payload(CSV, ImportFormat.CSV)

    assert (first.total_parsed, first.added) == (2, 2)
    assert (second.total_parsed, second.added) == (2, 0)
    assert slot.writes == writes
    assert registry.get_attendee("A2").amount_paid == 255


def test_reimport_never_overwrites_existing_fields(registry):
    registry.check_in("REG-001")
    registry.import_payload(b"id,name,amount\nREG-001,Someone Else,1\n", ImportFormat.CSV)

    rec = registry.get_attendee("REG-001")
    assert rec.name == "Priya Sharma"
    assert rec.checked_in is True


def test_empty_payload_reports_parse_error(registry):
    with pytest.raises(ParseError) as exc:
        registry.import_payload(b"id,name\n", ImportFormat.CSV)
    assert exc.value.total_parsed == 0
    assert len(registry.get_attendees()) == 5


def test_backup_round_trip_only_brings_pre_registered(registry, slot, clock):
    registry.add_walk_in(name="Door", quantity=1)
    backup = json.dumps(registry.export_data()).encode("utf-8")

    registry.clear_all()
    registry.import_payload(
        json.dumps({"attendees": [{"id": "EXTRA-1", "name": "New", "type": "PRE-REG"}]}).encode(), ImportFormat.JSON
    )
    result = registry.import_payload(backup, ImportFormat.JSON)

    assert result.total_parsed == 5
    assert result.added == 0
    assert all(r.category == Category.PRE_REGISTERED for r in registry.get_attendees())


def test_deeply_nested_json_import_is_a_parse_error(registry, slot):
    writes = slot.writes
    with pytest.raises(ParseError):
        registry.import_payload(b"[" * 200000, ImportFormat.JSON)
    assert len(registry.get_attendees()) == 5
    assert slot.writes == writes
