import pytest

from player_console.services.history_aggregator import PlayerHistoryAggregator


@pytest.fixture
def history_aggregator(client):
    return PlayerHistoryAggregator(client)


def _route_full_history(transport):
    transport.add("GET", "/players/p1/missions", {"missions": {"completed": [
        {"id": "m1", "name": "Walk", "actions": {
            "count": 3,
            "firstCompletedOn": "2025-01-01T10:00:00Z",
            "completedOn": "2025-01-03T10:00:00Z",
        }},
    ]}})
    transport.add("GET", "/players/p1/achievements", [
        {"id": "a1", "name": "Early bird", "status": "granted"},
        {"id": "a2", "name": "Marathon", "status": "in-progress"},
    ])
    transport.add("GET", "/players/p1/prizes/redeemed", {"data": [
        {"id": "z1", "name": "Mug", "redeemed_at": "2025-02-01T09:00:00Z"},
    ]})
    transport.add("GET", "/quizzes", [{"id": "q1", "name": "Basics"}, {"id": "q2"}, {"id": "q3"}])
    transport.add("GET", "/quizzes/q1/result", {"actions": {"count": 2, "completedOn": "2025-03-01T00:00:00Z"}})
    transport.add("GET", "/quizzes/q2/result", status=404)
    transport.add("GET", "/quizzes/q3/result", {"count": 0})


@pytest.mark.asyncio
async def test_full_history(history_aggregator, transport, credentials):
    _route_full_history(transport)

    history = await history_aggregator.load(credentials, "p1")

    assert history.errors == []
    [mission] = history.missions
    assert (mission.name, mission.count, mission.status) == ("Walk", 3, "completed")
    assert mission.first_at == "2025-01-01T10:00:00Z"
    assert mission.last_at == "2025-01-03T10:00:00Z"

    assert [a.id for a in history.achievements] == ["a1"]

    [prize] = history.prizes
    assert prize.count == 1
    assert prize.first_display == "2025-02-01 09:00"

    [quiz] = history.quizzes
    assert (quiz.id, quiz.name, quiz.count) == ("q1", "Basics", 2)
    assert quiz.last_at == "2025-03-01T00:00:00Z"


@pytest.mark.asyncio
async def test_quiz_results_wait_for_quiz_list(history_aggregator, transport, credentials):
    _route_full_history(transport)

    await history_aggregator.load(credentials, "p1")

    paths = transport.paths()
    list_index = paths.index("/quizzes")
    result_indexes = [i for i, p in enumerate(paths) if p.endswith("/result")]
    assert len(result_indexes) == 3
    assert all(i > list_index for i in result_indexes)


@pytest.mark.asyncio
async def test_completed_envelope_keeps_all_achievements(history_aggregator, transport, credentials):
    transport.add("GET", "/players/p1/achievements", {"achievements": {"completed": [
        {"id": "a1"}, {"id": "a2", "status": "whatever"},
    ]}})

    rows = await history_aggregator.fetch_achievements(credentials, "p1")

    assert [r.id for r in rows] == ["a1", "a2"]
    assert rows[0].status == "granted"


@pytest.mark.asyncio
async def test_one_failure_does_not_block_others(history_aggregator, transport, credentials):
    _route_full_history(transport)
    transport.add("GET", "/players/p1/missions", {"message": "missions down"}, status=500)

    history = await history_aggregator.load(credentials, "p1")

    assert history.missions == []
    assert history.errors == ["missions down"]
    assert len(history.achievements) == 1
    assert len(history.prizes) == 1
    assert len(history.quizzes) == 1


@pytest.mark.asyncio
async def test_quiz_list_failure_is_one_error(history_aggregator, transport, credentials):
    _route_full_history(transport)
    transport.add("GET", "/quizzes", status=401)

    history = await history_aggregator.load(credentials, "p1")

    assert history.quizzes == []
    assert history.errors == ["Invalid API key or unauthorized access"]
    assert not any(p.endswith("/result") for p in transport.paths())


@pytest.mark.asyncio
async def test_unknown_envelopes_are_empty_history(history_aggregator, transport, credentials):
    for path in ("/players/p1/missions", "/players/p1/achievements", "/players/p1/prizes/redeemed", "/quizzes"):
        transport.add("GET", path, {"unexpected": True})

    history = await history_aggregator.load(credentials, "p1")

    assert history.is_empty
    assert history.errors == []
