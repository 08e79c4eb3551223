import asyncio

import pytest

from conftest import respond
from player_console.errors import Unauthorized
from player_console.services.profile_aggregator import PlayerProfileAggregator


@pytest.fixture
def profiles(client):
    return PlayerProfileAggregator(client, poll_interval=0.01)


@pytest.mark.asyncio
async def test_load_splices_team_name(profiles, transport, credentials):
    transport.add("GET", "/players/p1", {"name": "Ann", "team_id": "t1", "points": 12, "level": {"name": "Silver"}})
    transport.add("GET", "/teams/t1", {"id": "t1", "name": "Red"})

    profile = await profiles.load(credentials, "p1")

    assert profile.team_name == "Red"
    assert profile.points == 12
    assert profile.level.name == "Silver"
    assert profiles.profile is profile


@pytest.mark.asyncio
async def test_team_failure_is_swallowed(profiles, transport, credentials):
    transport.add("GET", "/players/p1", {"name": "Ann", "team_id": "t1"})
    transport.add("GET", "/teams/t1", status=500)

    profile = await profiles.load(credentials, "p1")

    assert profile.name == "Ann"
    assert profile.team_name == ''


@pytest.mark.asyncio
async def test_sparse_record_gets_defaults(profiles, transport, credentials):
    transport.add("GET", "/players/p1", {})

    profile = await profiles.load(credentials, "p1")

    assert profile.player_ref == "p1"
    assert profile.level.name == "Unknown Level"
    assert (profile.points, profile.credits, profile.name) == (0, 0, '')
    assert transport.paths() == ["/players/p1"]


@pytest.mark.asyncio
async def test_auth_failure_propagates(profiles, transport, credentials):
    transport.add("GET", "/players/p1", status=401)
    with pytest.raises(Unauthorized):
        await profiles.load(credentials, "p1")
    assert profiles.profile is None


@pytest.mark.asyncio
async def test_merge_live_drops_other_player(profiles, transport, credentials):
    transport.add("GET", "/players/p1", {"name": "Ann", "points": 1})
    await profiles.load(credentials, "p1")

    assert not profiles.merge_live("p2", {"points": 99})
    assert profiles.profile.points == 1


@pytest.mark.asyncio
async def test_polling_merges_live_fields(profiles, transport, credentials, wait_until):
    transport.add("GET", "/players/p1", {"name": "Ann", "points": 1})
    await profiles.load(credentials, "p1")
    transport.add("GET", "/players/p1", {"name": "Renamed", "points": 50, "credits": 4})

    seen = []
    profiles.start_polling(credentials, listener=seen.append)
    await wait_until(lambda: profiles.profile.points == 50)

    assert profiles.profile.name == "Ann"
    assert profiles.profile.credits == 4
    assert seen and seen[-1].points == 50
    profiles.clear()
    assert not profiles.is_polling


@pytest.mark.asyncio
async def test_poll_failure_keeps_profile(profiles, transport, credentials):
    transport.add("GET", "/players/p1", {"name": "Ann", "points": 1})
    await profiles.load(credentials, "p1")
    transport.add("GET", "/players/p1", status=500)

    assert not await profiles.poll_once(credentials, "p1")
    assert profiles.profile.points == 1


@pytest.mark.asyncio
async def test_slow_tick_does_not_overlap(profiles, transport, credentials, wait_until):
    transport.add("GET", "/players/p1", {"name": "Ann"})
    await profiles.load(credentials, "p1")
    transport.calls.clear()

    release = asyncio.Event()

    async def slow(call):
        await release.wait()
        return respond({"points": 5})

    transport.add("GET", "/players/p1", handler=slow)
    profiles.start_polling(credentials)
    await wait_until(lambda: len(transport.calls) == 1)
    await asyncio.sleep(0.1)

    assert len(transport.calls) == 1
    release.set()
    await wait_until(lambda: profiles.profile.points == 5)
    profiles.stop_polling()


@pytest.mark.asyncio
async def test_loading_another_player_stops_polling(profiles, transport, credentials):
    transport.add("GET", "/players/p1", {"name": "Ann"})
    transport.add("GET", "/players/p2", {"name": "Bob"})
    await profiles.load(credentials, "p1")
    task = profiles.start_polling(credentials)

    await profiles.load(credentials, "p2")
    await asyncio.sleep(0.01)

    assert task.done()
    assert not profiles.is_polling
    assert profiles.profile.name == "Bob"


@pytest.mark.asyncio
async def test_stale_poll_response_is_dropped(profiles, transport, credentials, wait_until):
    transport.add("GET", "/players/p1", {"name": "Ann", "points": 1})
    await profiles.load(credentials, "p1")

    release = asyncio.Event()

    async def slow(call):
        await release.wait()
        return respond({"points": 99})

    transport.add("GET", "/players/p1", handler=slow)
    tick = asyncio.ensure_future(profiles.poll_once(credentials, "p1"))
    await wait_until(lambda: transport.count("GET", "/players/p1") == 2)

    transport.add("GET", "/players/p2", {"name": "Bob", "points": 7})
    await profiles.load(credentials, "p2")
    release.set()

    assert not await tick
    assert profiles.profile.player_ref == "p2"
    assert profiles.profile.points == 7
