from __future__ import annotations

import json

from event_checkin.attendees.seed import SAMPLE_ATTENDEES
from event_checkin.core.exceptions import PersistenceError
from event_checkin.registry.service import Registry


class UnreadableSlot:
    def read(self, key):
        raise PersistenceError("disk gone")

    def write(self, key, data):
        self.last = data

    def delete(self, key):
        pass


def test_first_load_seeds_and_persists(slot, clock):
    config, records = Registry(slot, store_key="k", clock=clock).load()

    assert config.ticket_price == 255
    assert [r.id for r in records] == [r.id for r in SAMPLE_ATTENDEES]
    stored = json.loads(slot.data["k"])
    assert set(stored) == {"config", "attendees"}
    assert stored["attendees"][0]["type"] == "PRE-REG"


def test_state_survives_reload(slot, clock):
    reg = Registry(slot, store_key="k", clock=clock)
    reg.load()
    reg.check_in("REG-002")
    walk_in = reg.add_walk_in(name="Door", quantity=2, transaction_id="TX9").record
    reg.update_config(event_name="Late Show")

    fresh = Registry(slot, store_key="k", clock=clock)
    config, records = fresh.load()

    assert config.event_name == "Late Show"
    assert fresh.get_attendee("REG-002") == reg.get_attendee("REG-002")
    assert fresh.get_attendee(walk_in.id) == walk_in


def test_corrupt_payload_degrades_to_seed(slot, clock):
    slot.data["k"] = b"{ this is not json"
    config, records = Registry(slot, store_key="k", clock=clock).load()

    assert len(records) == len(SAMPLE_ATTENDEES)
    assert json.loads(slot.data["k"])["attendees"]


def test_bad_record_shape_degrades_to_seed(slot, clock):
    slot.data["k"] = json.dumps({"config": {}, "attendees": [{"id": "X", "checkedIn": True}]}).encode()
    _, records = Registry(slot, store_key="k", clock=clock).load()
    assert [r.id for r in records] == [r.id for r in SAMPLE_ATTENDEES]


def test_unreadable_slot_does_not_raise(clock):
    slot = UnreadableSlot()
    _, records = Registry(slot, store_key="k", clock=clock).load()
    assert len(records) == len(SAMPLE_ATTENDEES)


def test_failed_save_keeps_in_memory_change(broken_slot, clock):
    reg = Registry(broken_slot, store_key="k", clock=clock)
    reg.load()

    result = reg.check_in("REG-001")

    assert result.persisted is False
    assert reg.get_attendee("REG-001").checked_in is True
    assert reg.save() is False

    broken_slot.fail_writes = False
    assert reg.save() is True
    assert json.loads(broken_slot.data["k"])["attendees"][0]["checkedIn"] is True


def test_clear_all_restores_defaults(registry, slot):
    registry.update_config(event_name="Other", ticket_price=100)
    registry.add_walk_in(name="Door", quantity=1)

    assert registry.clear_all() is True
    assert registry.get_config().event_name == "The Sound Nexus"
    assert registry.get_config().ticket_price == 255
    assert [r.id for r in registry.get_attendees()] == [r.id for r in SAMPLE_ATTENDEES]
    assert json.loads(slot.data["test"])["config"]["ticketPrice"] == 255


def test_deeply_nested_payload_degrades_to_seed(slot, clock):
    slot.data["k"] = b"[" * 200000
    _, records = Registry(slot, store_key="k", clock=clock).load()
    assert [r.id for r in records] == [r.id for r in SAMPLE_ATTENDEES]


def test_negative_stored_price_degrades_to_defaults(slot, clock):
    slot.data["k"] = json.dumps({"config": {"ticketPrice": -5}, "attendees": []}).encode()
    config, records = Registry(slot, store_key="k", clock=clock).load()

    assert config.ticket_price == 255
    assert len(records) == len(SAMPLE_ATTENDEES)
