import pytest

from conftest import payloads
from errors import NotInRoom, TargetNotFound
from negotiation import relabel


@pytest.fixture
def room(membership):
    room_id = membership.create_room()
    for conn_id, name in (("A", "Ann"), ("B", "Bob"), ("C", "Cat")):
        membership.join(conn_id, room_id, name)
    return room_id


@pytest.mark.parametrize(
    "kind,payload,expected",
    [
        ("offer", {"type": "offer", "sdp": "v=0"}, {"type": "offer", "offer": {"type": "offer", "sdp": "v=0"}, "caller": "A"}),
        ("answer", {"type": "answer", "sdp": "v=0"}, {"type": "answer", "answer": {"type": "answer", "sdp": "v=0"}, "answerer": "A"}),
        ("ice-candidate", {"candidate": "candidate:1 1 udp"}, {"type": "ice-candidate", "candidate": {"candidate": "candidate:1 1 udp"}, "sender": "A"}),
    ],
)
def test_forward_delivers_exactly_one_relabelled_message_to_target(router, room, kind, payload, expected):
    envelope = router.forward(kind, "A", "B", payload)

    assert payloads([envelope]) == [("B", expected)]


def test_payload_is_passed_through_untouched(router, room):
    payload = {"nested": {"list": [1, 2, {"x": None}]}, "text": "ünïcode"}

    envelope = router.forward("offer", "A", "C", payload)

    assert envelope.event.offer == payload


def test_forward_to_member_of_another_room_fails(router, membership, room):
    other = membership.create_room()
    membership.join("Z", other, "Zed")

    with pytest.raises(TargetNotFound) as exc:
        router.forward("offer", "A", "Z", {})
    assert exc.value.message == "Target user not found: Z"


def test_forward_to_unknown_connection_fails(router, room):
    with pytest.raises(TargetNotFound):
        router.forward("ice-candidate", "A", "nobody", {})


def test_forward_to_self_is_delivered_back(router, room):
    envelope = router.forward("answer", "A", "A", {"sdp": "v=0"})

    assert payloads([envelope]) == [("A", {"type": "answer", "answer": {"sdp": "v=0"}, "answerer": "A"})]


def test_forward_from_connection_outside_any_room_is_not_in_room(router, room):
    with pytest.raises(NotInRoom):
        router.forward("offer", "outsider", "B", {})


def test_forward_after_leaving_is_not_in_room(router, membership, room):
    membership.leave("A", room)

    with pytest.raises(NotInRoom):
        router.forward("offer", "A", "B", {})


def test_relabel_rejects_unknown_kind():
    with pytest.raises(ValueError):
        relabel("bye", "A", {})


def test_connected_status_counts_successful_connections(registry, router, room):
    assert router.record_connection_status("A", room, "connected", "B") is True
    assert router.record_connection_status("B", room.lower(), "connected", "A") is True
    assert router.record_connection_status("A", room, "failed", "C") is False

    assert registry.rooms.get_room(room).successful_connections == 2


def test_connection_status_from_non_member_is_ignored(registry, router, membership, room):
    other = membership.create_room()

    assert router.record_connection_status("A", other, "connected", "B") is False
    assert router.record_connection_status("outsider", room, "connected", "B") is False
    assert registry.rooms.get_room(room).successful_connections == 0
