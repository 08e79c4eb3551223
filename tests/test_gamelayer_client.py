import pytest

from player_console.clients import TransportResponse
from player_console.errors import MissingCredentials, NotFound, TransportFailure, Unauthorized
from player_console.models import Credentials, NewPlayer


@pytest.mark.asyncio
async def test_headers_and_account_scoping(client, transport, credentials):
    transport.add("GET", "/players", [])
    await client.list_players(credentials)

    call = transport.calls[0]
    assert call.headers == {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "api-key": "k1",
    }
    assert call.query == {"account": "acme"}


@pytest.mark.asyncio
async def test_player_scoped_query(client, transport, credentials):
    transport.add("GET", "/missions", [])
    await client.list_missions(credentials, "p1")
    assert transport.calls[0].query == {"account": "acme", "player": "p1"}


@pytest.mark.asyncio
@pytest.mark.parametrize("credentials", [Credentials(), Credentials(account="acme"), Credentials(api_key="k1")])
async def test_missing_credentials_never_reach_network(client, transport, credentials):
    with pytest.raises(MissingCredentials) as exc:
        await client.list_players(credentials)
    assert exc.value.message == "API key or account is missing"
    assert transport.calls == []


@pytest.mark.asyncio
async def test_401_is_unauthorized(client, transport, credentials):
    transport.add("GET", "/players", status=401)
    with pytest.raises(Unauthorized) as exc:
        await client.list_players(credentials)
    assert exc.value.message == "Invalid API key or unauthorized access"


@pytest.mark.asyncio
async def test_401_prefers_server_message(client, transport, credentials):
    transport.add("GET", "/players", {"message": "Key revoked"}, status=401)
    with pytest.raises(Unauthorized) as exc:
        await client.list_players(credentials)
    assert exc.value.message == "Key revoked"


@pytest.mark.asyncio
async def test_404_is_not_found(client, transport, credentials):
    transport.add("GET", "/players/ghost", {"error": "Player not found"}, status=404)
    with pytest.raises(NotFound):
        await client.get_player(credentials, "ghost")


@pytest.mark.asyncio
async def test_other_status_prefers_message_then_error(client, transport, credentials):
    transport.add("GET", "/teams", {"error": "boom"}, status=500)
    with pytest.raises(TransportFailure) as exc:
        await client.list_teams(credentials)
    assert exc.value.message == "boom"
    assert exc.value.status == 500

    transport.add("GET", "/teams", {"message": "first", "error": "second"}, status=502)
    with pytest.raises(TransportFailure) as exc:
        await client.list_teams(credentials)
    assert exc.value.message == "first"


@pytest.mark.asyncio
async def test_other_status_without_body_uses_generic_text(client, transport, credentials):
    transport.add("GET", "/players", status=503)
    with pytest.raises(TransportFailure) as exc:
        await client.list_players(credentials)
    assert exc.value.message == "Failed to fetch players: 503"


@pytest.mark.asyncio
async def test_non_json_body_is_returned_as_text(client, transport, credentials):
    transport.routes[("POST", "/events/e1/complete")] = TransportResponse(status=200, text="OK")
    assert await client.complete_event(credentials, "e1", "p1") == "OK"
    assert transport.calls[0].body == {"player": "p1", "account": "acme"}


@pytest.mark.asyncio
async def test_create_player_body(client, transport, credentials):
    transport.add("POST", "/players", {"player_id": "ann"})
    await client.create_player(credentials, NewPlayer(id="ann", name="Ann", avatar="https://a/1.svg"))
    assert transport.calls[0].body == {
        "account": "acme",
        "player": "ann",
        "name": "Ann",
        "imgUrl": "https://a/1.svg",
    }


@pytest.mark.asyncio
async def test_quiz_endpoints(client, transport, credentials):
    transport.add("POST", "/quizzes/qz/complete", {})
    transport.add("GET", "/quizzes/qz/result", {})
    answers = [{"questionId": "q1", "answerIds": ["a"]}]

    await client.complete_quiz(credentials, "qz", "p1", answers)
    await client.quiz_result(credentials, "qz", "p1")

    submit, result = transport.calls
    assert submit.body == {"player": "p1", "account": "acme", "answers": answers}
    assert result.query == {"account": "acme", "player": "p1"}


@pytest.mark.asyncio
async def test_leaderboard_uses_configured_id(client, transport, credentials):
    transport.add("GET", "/leaderboards/1-test-leaderboard", [])
    await client.get_leaderboard(credentials)
    assert transport.paths() == ["/leaderboards/1-test-leaderboard"]


@pytest.mark.asyncio
async def test_path_segments_are_escaped(client, transport, credentials):
    transport.add("GET", "/players/a b", {})
    await client.get_player(credentials, "a b")
    assert transport.paths() == ["/players/a b"]
