from datetime import datetime, timezone

from event_checkin.attendees.model import ImportCandidate
from event_checkin.core.enums import Category, ImportFormat
from event_checkin.imports.reconciler import ImportReconciler, parse_int

STAMP = datetime(2026, 1, 17, 12, 0, tzinfo=timezone.utc)


def _cand(row_index=1, **kwargs) -> ImportCandidate:
    return ImportCandidate(row_index=row_index, source=ImportFormat.CSV, **kwargs)


def test_parse_int_is_lenient():
    assert parse_int("3") == 3
    assert parse_int(" 2 tickets") == 2
    assert parse_int(4.9) == 4
    assert parse_int("abc") is None
    assert parse_int(None) is None
    assert parse_int(True) is None


def test_defaults_applied_to_sparse_candidate():
    rec = ImportReconciler().build_record(_cand(row_index=3), ticket_price=255, stamp=STAMP)

    assert rec.id == f"IMP-{int(STAMP.timestamp() * 1000)}-3"
    assert rec.name == "Unknown"
    assert rec.ticket_type == "Regular"
    assert rec.quantity == 1
    assert rec.amount_paid == 255
    assert rec.phone is None and rec.email is None
    assert rec.category == Category.PRE_REGISTERED
    assert rec.checked_in is False


def test_bad_numbers_fall_back():
    rec = ImportReconciler().build_record(
        _cand(id="A", quantity="0", amount_paid="n/a"), ticket_price=300, stamp=STAMP
    )
    assert rec.quantity == 1
    assert rec.amount_paid == 300


def test_explicit_zero_amount_is_kept():
    rec = ImportReconciler().build_record(_cand(id="A", amount_paid="0"), ticket_price=300, stamp=STAMP)
    assert rec.amount_paid == 0


def test_existing_ids_are_skipped_case_sensitively():
    outcome = ImportReconciler().reconcile(
        [_cand(id="REG-001"), _cand(id="reg-001", row_index=2), _cand(id="NEW", row_index=3)],
        existing_ids=["REG-001"],
        ticket_price=255,
        stamp=STAMP,
    )
    assert outcome.total_parsed == 3
    assert [r.id for r in outcome.added] == ["reg-001", "NEW"]
    assert outcome.skipped_ids == ["REG-001"]


def test_duplicate_ids_inside_one_payload_are_added_once():
    outcome = ImportReconciler().reconcile(
        [_cand(id="X", name="first"), _cand(id="X", name="second", row_index=2)],
        existing_ids=[],
        ticket_price=255,
        stamp=STAMP,
    )
    assert [r.name for r in outcome.added] == ["first"]


def test_generated_ids_from_same_millisecond_do_not_collide():
    reconciler = ImportReconciler()
    first = reconciler.reconcile([_cand(row_index=1, name="A")], existing_ids=[], ticket_price=255, stamp=STAMP)
    second = reconciler.reconcile(
        [_cand(row_index=1, name="B")],
        existing_ids=[r.id for r in first.added],
        ticket_price=255,
        stamp=STAMP,
    )

    base = f"IMP-{int(STAMP.timestamp() * 1000)}-1"
    assert [r.id for r in first.added] == [base]
    assert [r.id for r in second.added] == [f"{base}-2"]
    assert second.skipped_ids == []
