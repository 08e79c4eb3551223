"""
GameLayer API Client - Low-level wrapper for the GameLayer REST API.

This client handles:
- Header derivation from the stored credentials
- Account scoping of every request (``account`` query parameter)
- Mapping of status codes to the console error taxonomy
- One method per consumed endpoint

It never interprets response envelopes; that is the normalizer's job.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlencode

from config.console_config import ConsoleConfig
from player_console.clients.transport import RequestsTransport, Transport, TransportResponse
from player_console.errors import (
    ConsoleError,
    MissingCredentials,
    NotFound,
    TransportFailure,
    Unauthorized,
)
from player_console.logging import ConsoleLogger, get_logger
from player_console.models import Credentials, NewPlayer, text_value


class GameLayerClient:
    """
    Client for the GameLayer API.

    Usage:
        client = GameLayerClient()
        players = await client.list_players(Credentials(account="acme", api_key="..."))
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        config: Optional[ConsoleConfig] = None,
        logger: Optional[ConsoleLogger] = None,
    ):
        """
        Initialize the GameLayer client.

        Args:
            transport: Transport to send requests with (defaults to requests)
            config: Console configuration (base URL, leaderboard id, retries)
            logger: Logger for request tracing
        """
        self.config = config or ConsoleConfig.from_file()
        self.base_url = self.config.base_url.rstrip('/')
        self.transport = transport or RequestsTransport(
            timeout=self.config.request_timeout_seconds,
            max_retries=self.config.max_retries,
        )
        self.logger = logger or get_logger()

    # =========================================================================
    # Request plumbing
    # =========================================================================

    @staticmethod
    def build_headers(credentials: Credentials) -> Dict[str, str]:
        """Headers sent with every request."""
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "api-key": credentials.api_key,
        }

    def build_url(self, credentials: Credentials, path: str, params: Optional[Dict[str, str]] = None) -> str:
        """Absolute URL for `path` with the account and any extra query parameters."""
        query = {"account": credentials.account}
        query.update({k: v for k, v in (params or {}).items() if v is not None})
        return f"{self.base_url}{path}?{urlencode(query)}"

    @staticmethod
    def error_message(response: TransportResponse) -> Optional[str]:
        """Server-provided `message`, else `error`, else None."""
        payload = response.json
        if isinstance(payload, dict):
            for key in ("message", "error"):
                message = text_value(payload.get(key))
                if message:
                    return message
        return None

    def _error_for(self, response: TransportResponse, failure_message: str) -> ConsoleError:
        message = self.error_message(response)
        if response.status == 401:
            return Unauthorized(message)
        if response.status == 404:
            return NotFound(message)
        return TransportFailure(message or f"{failure_message}: {response.status}", status=response.status)

    async def request(
        self,
        credentials: Credentials,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        body: Optional[Dict[str, Any]] = None,
        failure_message: str = "Request failed",
    ) -> Any:
        """
        Send one request and return the parsed JSON body (or text when not JSON).

        Raises:
            MissingCredentials: If the account or API key is empty (no network call)
            Unauthorized: On 401
            NotFound: On 404
            TransportFailure: On any other non-2xx status or network error
        """
        if not credentials.is_complete:
            raise MissingCredentials()

        url = self.build_url(credentials, path, params)
        response = await self.transport.request(method, url, self.build_headers(credentials), body)
        self.logger.request(method, path, response.status)

        if not response.ok:
            raise self._error_for(response, failure_message)
        return response.json if response.json is not None else response.text

    @staticmethod
    def _segment(value: str) -> str:
        return quote(str(value), safe='')

    def _player_body(self, credentials: Credentials, player_ref: str, **extra) -> Dict[str, Any]:
        body = {"player": player_ref, "account": credentials.account}
        body.update(extra)
        return body

    # =========================================================================
    # Players & teams
    # =========================================================================

    async def list_players(self, credentials: Credentials) -> Any:
        return await self.request(credentials, "GET", "/players", failure_message="Failed to fetch players")

    async def get_player(self, credentials: Credentials, player_ref: str) -> Any:
        return await self.request(
            credentials, "GET", f"/players/{self._segment(player_ref)}",
            failure_message="Failed to fetch player details",
        )

    async def create_player(self, credentials: Credentials, new_player: NewPlayer) -> Any:
        body = {
            "account": credentials.account,
            "player": new_player.id,
            "name": new_player.name,
            "imgUrl": new_player.avatar,
        }
        return await self.request(credentials, "POST", "/players", body=body, failure_message="Failed to add player")

    async def list_teams(self, credentials: Credentials) -> Any:
        return await self.request(credentials, "GET", "/teams", failure_message="Failed to fetch teams")

    async def get_team(self, credentials: Credentials, team_id: str) -> Any:
        return await self.request(
            credentials, "GET", f"/teams/{self._segment(team_id)}",
            failure_message="Failed to fetch team",
        )

    # =========================================================================
    # Events & missions
    # =========================================================================

    async def list_events(self, credentials: Credentials) -> Any:
        return await self.request(credentials, "GET", "/events", failure_message="Failed to fetch events")

    async def complete_event(self, credentials: Credentials, event_id: str, player_ref: str) -> Any:
        return await self.request(
            credentials, "POST", f"/events/{self._segment(event_id)}/complete",
            body=self._player_body(credentials, player_ref),
            failure_message="Failed to complete event",
        )

    async def list_missions(self, credentials: Credentials, player_ref: str) -> Any:
        return await self.request(
            credentials, "GET", "/missions", params={"player": player_ref},
            failure_message="Failed to fetch player missions",
        )

    async def player_missions(self, credentials: Credentials, player_ref: str) -> Any:
        return await self.request(
            credentials, "GET", f"/players/{self._segment(player_ref)}/missions",
            failure_message="Failed to fetch missions",
        )

    # =========================================================================
    # Achievements, prizes & streaks
    # =========================================================================

    async def list_achievements(self, credentials: Credentials) -> Any:
        return await self.request(credentials, "GET", "/achievements", failure_message="Failed to fetch achievements")

    async def player_achievements(self, credentials: Credentials, player_ref: str) -> Any:
        return await self.request(
            credentials, "GET", f"/players/{self._segment(player_ref)}/achievements",
            failure_message="Failed to fetch achievements",
        )

    async def list_prizes(self, credentials: Credentials, player_ref: str) -> Any:
        return await self.request(
            credentials, "GET", "/prizes", params={"player": player_ref},
            failure_message="Failed to fetch prizes",
        )

    async def claim_prize(self, credentials: Credentials, prize_id: str, player_ref: str) -> Any:
        return await self.request(
            credentials, "POST", f"/prizes/{self._segment(prize_id)}/claim",
            body=self._player_body(credentials, player_ref),
            failure_message="Failed to claim prize",
        )

    async def player_prizes(self, credentials: Credentials, player_ref: str) -> Any:
        return await self.request(
            credentials, "GET", f"/players/{self._segment(player_ref)}/prizes/redeemed",
            failure_message="Failed to fetch prizes",
        )

    async def get_streak(self, credentials: Credentials, streak_id: str) -> Any:
        return await self.request(
            credentials, "GET", f"/streaks/{self._segment(streak_id)}",
            failure_message="Failed to fetch streak",
        )

    async def player_streaks(self, credentials: Credentials, player_ref: str) -> Any:
        return await self.request(
            credentials, "GET", f"/players/{self._segment(player_ref)}/streaks",
            failure_message="Failed to fetch streaks",
        )

    async def get_leaderboard(self, credentials: Credentials, leaderboard_id: Optional[str] = None) -> Any:
        leaderboard_id = leaderboard_id or self.config.leaderboard_id
        return await self.request(
            credentials, "GET", f"/leaderboards/{self._segment(leaderboard_id)}",
            failure_message="Failed to fetch leaderboard",
        )

    # =========================================================================
    # Quizzes
    # =========================================================================

    async def list_quizzes(self, credentials: Credentials) -> Any:
        return await self.request(credentials, "GET", "/quizzes", failure_message="Failed to fetch quizzes")

    async def get_quiz(self, credentials: Credentials, quiz_id: str) -> Any:
        return await self.request(
            credentials, "GET", f"/quizzes/{self._segment(quiz_id)}",
            failure_message="Failed to fetch quiz",
        )

    async def start_quiz(self, credentials: Credentials, quiz_id: str, player_ref: str) -> Any:
        return await self.request(
            credentials, "POST", f"/quizzes/{self._segment(quiz_id)}/start",
            body=self._player_body(credentials, player_ref),
            failure_message="Failed to start quiz",
        )

    async def complete_quiz(
        self,
        credentials: Credentials,
        quiz_id: str,
        player_ref: str,
        answers: List[Dict[str, Any]],
    ) -> Any:
        return await self.request(
            credentials, "POST", f"/quizzes/{self._segment(quiz_id)}/complete",
            body=self._player_body(credentials, player_ref, answers=answers),
            failure_message="Failed to submit quiz",
        )

    async def quiz_result(self, credentials: Credentials, quiz_id: str, player_ref: str) -> Any:
        return await self.request(
            credentials, "GET", f"/quizzes/{self._segment(quiz_id)}/result",
            params={"player": player_ref},
            failure_message="Failed to fetch quiz result",
        )
