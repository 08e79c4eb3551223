import asyncio

import pytest

from conftest import respond
from player_console.notifications import ERROR, SUCCESS
from player_console.services.boards import AwardsBoard, Leaderboard, MissionBoard, PrizeBoard, QuizBoard


@pytest.fixture
def refreshes():
    return []


@pytest.fixture
def board_kwargs(notifier, refreshes):
    async def on_refresh():
        refreshes.append(True)
    return dict(notifier=notifier, on_refresh=on_refresh)


@pytest.mark.asyncio
async def test_claim_failure_surfaces_server_message_and_refetches(client, transport, notifier, refreshes,
                                                                   board_kwargs, credentials):
    prizes = PrizeBoard(client, **board_kwargs)
    transport.add("GET", "/prizes", [{"id": "z1", "name": "Mug", "credits": 5}])
    transport.add("POST", "/prizes/z1/claim", {"message": "Out of stock"}, status=400)

    await prizes.fetch(credentials, "p1")
    assert not await prizes.claim(credentials, "p1", "z1")

    assert notifier.notifications == [(ERROR, "Out of stock")]
    assert transport.count("GET", "/prizes") == 2
    assert refreshes == []
    assert [p.id for p in prizes.items] == ["z1"]


@pytest.mark.asyncio
async def test_claim_success_refreshes(client, transport, notifier, refreshes, board_kwargs, credentials):
    prizes = PrizeBoard(client, **board_kwargs)
    transport.add("GET", "/prizes", {"prizes": [{"id": "z1", "stock": {"available": 1}}]})
    transport.add("POST", "/prizes/z1/claim", {})

    assert await prizes.claim(credentials, "p1", "z1")

    assert notifier.notifications == [(SUCCESS, "Prize claimed successfully!")]
    assert refreshes == [True]
    assert transport.count("GET", "/prizes") == 1
    assert transport.calls[0].body == {"player": "p1", "account": "acme"}


@pytest.mark.asyncio
async def test_read_failure_notifies_once_and_empties(client, transport, notifier, board_kwargs, credentials):
    missions = MissionBoard(client, **board_kwargs)
    transport.add("GET", "/missions", [{"id": "m1"}])
    await missions.fetch(credentials, "p1")
    transport.add("GET", "/missions", {"message": "missions down"}, status=500)

    assert await missions.fetch(credentials, "p1") == []

    assert missions.items == []
    assert not missions.is_loading
    assert notifier.notifications == [(ERROR, "missions down")]


@pytest.mark.asyncio
async def test_complete_event(client, transport, notifier, refreshes, board_kwargs, credentials):
    missions = MissionBoard(client, **board_kwargs)
    transport.add("POST", "/events/e1/complete", {})

    assert await missions.complete_event(credentials, "p1", "e1")
    assert notifier.notifications == [(SUCCESS, "Success!")]
    assert refreshes == [True]


@pytest.mark.asyncio
async def test_complete_event_failure_changes_nothing(client, transport, notifier, refreshes, board_kwargs,
                                                      credentials):
    missions = MissionBoard(client, **board_kwargs)
    transport.add("POST", "/events/e1/complete", {"error": "Event inactive"}, status=422)

    assert not await missions.complete_event(credentials, "p1", "e1")
    assert notifier.notifications == [(ERROR, "Event inactive")]
    assert refreshes == []


@pytest.mark.asyncio
async def test_leaderboard_ranks_entries(client, transport, board_kwargs, credentials):
    leaderboard = Leaderboard(client, **board_kwargs)
    transport.add("GET", "/leaderboards/1-test-leaderboard", {"leaderboard": [
        {"player": "p2", "name": "Bob", "points": 30},
        {"name": "no id"},
        {"player": "p1", "name": "Ann", "score": 20},
    ]})

    entries = await leaderboard.fetch(credentials, "p1")

    assert [(e.rank, e.player_id, e.points, e.is_current) for e in entries] == [
        (1, "p2", 30, False),
        (2, "p1", 20, True),
    ]


@pytest.mark.asyncio
async def test_streaks_are_synthesized_for_missing_progress(client, transport, board_kwargs, credentials):
    awards = AwardsBoard(client, streak_ids=["s1", "s2"], **board_kwargs)
    transport.add("GET", "/achievements", [{"id": "a1", "name": "First"}])
    transport.add("GET", "/players/p1/streaks", [{"id": "s1", "count": 3, "status": "active"}])
    transport.add("GET", "/streaks/s1", {"id": "s1", "name": "Daily", "countLimit": 7})
    transport.add("GET", "/streaks/s2", {"id": "s2", "name": "Weekly", "countLimit": 4})

    achievements = await awards.fetch(credentials, "p1")

    assert [a.id for a in achievements] == ["a1"]
    daily, weekly = awards.streaks
    assert (daily.definition.name, daily.progress.count, daily.progress.status) == ("Daily", 3, "active")
    assert not daily.synthesized
    assert (weekly.definition.count_limit, weekly.progress.count, weekly.progress.status) == (4, 0, "inactive")
    assert weekly.synthesized


@pytest.mark.asyncio
async def test_player_only_streaks_are_included(client, transport, board_kwargs, credentials):
    awards = AwardsBoard(client, streak_ids=[], **board_kwargs)
    transport.add("GET", "/players/p1/streaks", {"streaks": [{"id": "s9", "countLimit": 2, "count": 1}]})

    streaks = await awards.fetch_streaks(credentials, "p1")

    assert [(s.definition.id, s.definition.count_limit, s.progress.count) for s in streaks] == [("s9", 2, 1)]
    assert transport.count("GET", "/streaks/s9") == 0


@pytest.mark.asyncio
async def test_quiz_board(client, transport, board_kwargs, credentials):
    quizzes = QuizBoard(client, **board_kwargs)
    transport.add("GET", "/quizzes", {"data": [{"id": "qz", "name": "Basics"}]})

    assert [q.name for q in await quizzes.fetch(credentials)] == ["Basics"]


@pytest.mark.asyncio
async def test_response_arriving_after_clear_is_dropped(client, transport, notifier, board_kwargs, credentials,
                                                        wait_until):
    prizes = PrizeBoard(client, **board_kwargs)
    release = asyncio.Event()

    async def slow(call):
        await release.wait()
        return respond({"message": "late failure"}, status=500)

    transport.add("GET", "/prizes", handler=slow)
    pending = asyncio.ensure_future(prizes.fetch(credentials, "p1"))
    await wait_until(lambda: prizes.is_loading)

    prizes.clear()
    release.set()
    await pending

    assert prizes.items == []
    assert not prizes.is_loading
    assert notifier.notifications == []
