import pytest

from event_checkin.core.exceptions import PersistenceError
from event_checkin.registry.service import Registry
from event_checkin.storage.file_slot import FileStorageSlot


def test_missing_key_reads_none(tmp_path):
    assert FileStorageSlot(tmp_path).read("absent") is None


def test_write_read_delete(tmp_path):
    slot = FileStorageSlot(tmp_path / "nested")
    slot.write("snap", b"{}")
    assert slot.read("snap") == b"{}"
    assert [p.name for p in (tmp_path / "nested").iterdir()] == ["snap.json"]
    slot.delete("snap")
    slot.delete("snap")
    assert slot.read("snap") is None


def test_unsafe_key_is_rejected(tmp_path):
    with pytest.raises(PersistenceError):
        FileStorageSlot(tmp_path).write("../escape", b"x")


def test_registry_round_trip_on_disk(tmp_path, clock):
    reg = Registry(FileStorageSlot(tmp_path), store_key="event", clock=clock)
    reg.load()
    reg.check_in("REG-005")

    again = Registry(FileStorageSlot(tmp_path), store_key="event", clock=clock)
    again.load()
    assert again.get_attendee("REG-005").checked_in is True
