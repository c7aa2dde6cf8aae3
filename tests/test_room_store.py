import pytest

from registry import Registry
from room_store import ROOM_ID_ALPHABET, normalize_room_id


def test_create_room_returns_short_upper_case_id(registry, clock):
    room_id = registry.rooms.create_room()

    assert len(room_id) == 6
    assert set(room_id) <= set(ROOM_ID_ALPHABET)
    room = registry.rooms.get_room(room_id)
    assert room.created_at == clock.now
    assert room.participants == []
    assert room.connection_attempts == 0


def test_created_rooms_are_unique(registry):
    ids = [registry.rooms.create_room() for _ in range(200)]
    assert len(set(ids)) == 200
    assert len(registry.rooms) == 200


def test_create_room_retries_on_collision(clock):
    ids = iter(["AAAAAA", "AAAAAA", "BBBBBB"])
    registry = Registry(clock=clock, id_factory=lambda length: next(ids))

    assert registry.rooms.create_room() == "AAAAAA"
    assert registry.rooms.create_room() == "BBBBBB"


def test_create_room_gives_up_when_id_space_is_exhausted(clock):
    registry = Registry(clock=clock, id_factory=lambda length: "SAME01")
    registry.rooms.create_room()

    with pytest.raises(RuntimeError):
        registry.rooms.create_room()


def test_room_ids_are_looked_up_case_insensitively(registry):
    room_id = registry.rooms.create_room()

    assert registry.rooms.get_room(room_id.lower()) is not None
    assert registry.rooms.get_room(f"  {room_id.lower()} ") is not None
    assert normalize_room_id(" ab12cd ") == "AB12CD"


def test_get_unknown_room_returns_none(registry):
    assert registry.rooms.get_room("NOPE00") is None


def test_delete_room_is_idempotent(registry):
    room_id = registry.rooms.create_room()

    assert registry.rooms.delete_room(room_id) is True
    assert registry.rooms.delete_room(room_id) is False
    assert room_id not in registry.rooms


def test_list_rooms_returns_detached_snapshots(registry, membership):
    first = registry.rooms.create_room()
    second = registry.rooms.create_room()
    membership.join("conn-a", first, "Ann")

    rooms = registry.rooms.list_rooms()
    assert [r.room_id for r in rooms] == [first, second]

    rooms[0].participants.clear()
    assert len(registry.rooms.get_room(first).participants) == 1
    assert registry.rooms.get_room(first).participants[0].display_name == "Ann"
