import random

import pytest

from backend import RoomRegistry, validate_room_id
from constants import MAX_ROOM_ID_LENGTH
from errors import InvalidRoomId, RoomNotFound


def test_create_room_is_idempotent(registry):
    assert registry.create_room("abc") == "abc"
    assert registry.room_exists("abc")

    registry.join_room("abc", "A")
    assert registry.create_room("abc") == "abc"
    # re-creating must not wipe existing members
    assert registry.get_room("abc").members == ("A",)


@pytest.mark.parametrize("room_id", ["", "   ", None, 42, "x" * (MAX_ROOM_ID_LENGTH + 1)])
def test_create_room_rejects_invalid_ids(registry, room_id):
    with pytest.raises(InvalidRoomId):
        registry.create_room(room_id)
    assert registry.room_count() == 0


def test_validate_room_id_accepts_longest_allowed():
    room_id = "r" * MAX_ROOM_ID_LENGTH
    assert validate_room_id(room_id) == room_id


def test_join_unknown_room_raises_and_does_not_create(registry):
    with pytest.raises(RoomNotFound) as excinfo:
        registry.join_room("missing", "A")
    assert excinfo.value.room_id == "missing"
    assert not registry.room_exists("missing")


def test_join_returns_other_members_in_join_order(registry):
    registry.create_room("abc")

    first = registry.join_room("abc", "A")
    assert first.other_members == ()
    assert first.video_states == {}
    assert first.added

    registry.join_room("abc", "B")
    third = registry.join_room("abc", "C")
    assert third.other_members == ("A", "B")
    assert third.video_states == {"A": True, "B": True}


def test_rejoin_does_not_duplicate_membership(registry):
    registry.create_room("abc")
    registry.join_room("abc", "A")
    registry.join_room("abc", "B")

    again = registry.join_room("abc", "A")
    assert not again.added
    assert again.other_members == ("B",)
    assert registry.get_room("abc").members == ("A", "B")


def test_joined_member_starts_with_video_enabled(registry):
    registry.create_room("abc")
    registry.join_room("abc", "A")
    assert registry.get_room("abc").video_states == {"A": True}


def test_set_video_state_updates_snapshot_for_later_joiners(registry):
    registry.create_room("abc")
    registry.join_room("abc", "A")

    assert registry.set_video_state("abc", "A", False)
    result = registry.join_room("abc", "B")
    assert result.video_states == {"A": False}


def test_set_video_state_ignores_unknown_room_or_member(registry):
    assert not registry.set_video_state("nope", "A", False)
    assert not registry.room_exists("nope")

    registry.create_room("abc")
    registry.join_room("abc", "A")
    assert not registry.set_video_state("abc", "ghost", False)
    assert registry.get_room("abc").video_states == {"A": True}


def test_leave_reports_remaining_members(registry):
    registry.create_room("abc")
    registry.join_room("abc", "A")
    registry.join_room("abc", "B")

    departures = registry.leave("B")
    assert len(departures) == 1
    assert departures[0].room_id == "abc"
    assert departures[0].remaining_members == ("A",)
    assert not departures[0].room_closed
    assert registry.get_room("abc").video_states == {"A": True}


def test_last_leave_deletes_room(registry):
    registry.create_room("abc")
    registry.join_room("abc", "A")

    departures = registry.leave("A")
    assert departures[0].room_closed
    assert departures[0].remaining_members == ()
    assert not registry.room_exists("abc")
    assert registry.get_room("abc") is None


def test_leave_is_idempotent(registry):
    registry.create_room("abc")
    registry.join_room("abc", "A")
    registry.join_room("abc", "B")

    assert len(registry.leave("A")) == 1
    assert registry.leave("A") == []
    assert registry.get_room("abc").members == ("B",)


def test_leave_for_connection_that_never_joined(registry):
    registry.create_room("abc")
    assert registry.leave("stranger") == []
    assert registry.room_exists("abc")


def test_recreated_room_keeps_no_history(registry):
    registry.create_room("abc")
    registry.join_room("abc", "A")
    registry.set_video_state("abc", "A", False)
    registry.leave("A")

    registry.create_room("abc")
    room = registry.get_room("abc")
    assert room.members == ()
    assert room.video_states == {}

    result = registry.join_room("abc", "A")
    assert result.added
    assert registry.get_room("abc").video_states == {"A": True}


def test_room_of_tracks_membership(registry):
    registry.create_room("abc")
    assert registry.room_of("A") is None
    registry.join_room("abc", "A")
    assert registry.room_of("A") == "abc"
    registry.leave("A")
    assert registry.room_of("A") is None


def test_snapshot_is_a_copy(registry):
    registry.create_room("abc")
    registry.join_room("abc", "A")
    snapshot = registry.get_room("abc")
    snapshot.video_states["A"] = False
    assert registry.get_room("abc").video_states == {"A": True}


def test_membership_matches_joins_minus_leaves():
    rng = random.Random(1234)
    registry = RoomRegistry()
    registry.create_room("room")
    expected = set()
    ids = [f"peer-{n}" for n in range(8)]

    for _ in range(300):
        conn_id = rng.choice(ids)
        if rng.random() < 0.6:
            if not registry.room_exists("room"):
                registry.create_room("room")
            registry.join_room("room", conn_id)
            expected.add(conn_id)
        else:
            departures = registry.leave(conn_id)
            expected.discard(conn_id)
            if departures and not expected:
                assert not registry.room_exists("room")

        room = registry.get_room("room")
        if expected:
            assert set(room.members) == expected
            assert set(room.video_states) == set(room.members)
        elif room is not None:
            # created but not joined yet, or emptied by a leave that found nobody
            assert room.members == ()
