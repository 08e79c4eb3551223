import pytest

from player_console.services.normalizer import (
    EnvelopeKind,
    normalize,
    normalize_achievements,
    normalize_leaderboard,
    normalize_missions,
    normalize_players,
    records,
    unwrap,
)


def test_bare_array_is_returned_unchanged():
    payload = [{"id": "p1"}, {"id": "p2"}]
    assert normalize_players(payload) is payload


def test_data_envelope():
    items = [{"id": "p1"}]
    envelope = unwrap({"data": items}, "players")
    assert envelope.kind is EnvelopeKind.DATA
    assert envelope.items is items


def test_named_envelope():
    items = [{"id": "p1", "rank": 1}]
    assert normalize_leaderboard({"leaderboard": items}) is items


def test_completed_envelope():
    items = [{"id": "m1"}]
    envelope = unwrap({"missions": {"completed": items}}, "missions")
    assert envelope.kind is EnvelopeKind.COMPLETED
    assert envelope.items is items


def test_data_wins_over_named():
    assert normalize({"data": [1], "players": [2]}, "players") == [1]


def test_named_wins_over_completed_of_other_resource():
    payload = {"achievements": [{"id": "a1"}], "missions": {"completed": [{"id": "m1"}]}}
    assert normalize_achievements(payload) == [{"id": "a1"}]
    assert normalize_missions(payload) == [{"id": "m1"}]


@pytest.mark.parametrize("payload", [
    None,
    "not json",
    42,
    {},
    {"unrelated": [1, 2]},
    {"data": "not a list"},
    {"players": {"completed": "nope"}},
    {"players": {"pending": []}},
])
def test_unmatched_shapes_are_empty(payload):
    envelope = unwrap(payload, "players")
    assert envelope.kind is EnvelopeKind.EMPTY
    assert envelope.items == []


def test_records_drops_non_objects():
    assert records([{"id": 1}, "x", None, 3, {"id": 2}]) == [{"id": 1}, {"id": 2}]
