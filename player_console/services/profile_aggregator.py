"""
Player Profile Aggregator

Builds the profile of the selected player and keeps its live fields fresh.

Load sequence:
1. Fetch the player record
2. If it references a team, fetch the team and splice in its name
   (a team failure is logged and the name stays empty)

Polling re-fetches the bare player record on a fixed interval and merges
only level, points and credits into the current profile. A single task runs
per active profile; ticks run back to back, so a slow tick delays the next
one instead of queueing.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from player_console.clients.gamelayer_client import GameLayerClient
from player_console.errors import ConsoleError
from player_console.logging import ConsoleLogger, get_logger
from player_console.models import Credentials, PlayerProfile, text_value

ProfileListener = Callable[[PlayerProfile], Optional[Awaitable[None]]]


class PlayerProfileAggregator:
    """
    Service owning the active PlayerProfile.

    Usage:
        profiles = PlayerProfileAggregator(client)
        profile = await profiles.load(credentials, "p1")
        profiles.start_polling(credentials)
        ...
        profiles.clear()
    """

    def __init__(
        self,
        client: GameLayerClient,
        poll_interval: Optional[float] = None,
        logger: Optional[ConsoleLogger] = None,
    ):
        self.client = client
        self.poll_interval = poll_interval if poll_interval is not None else client.config.poll_interval_seconds
        self.logger = logger or get_logger()
        self.profile: Optional[PlayerProfile] = None
        self._poll_task: Optional[asyncio.Task] = None
        self._poll_ref: Optional[str] = None
        self._listener: Optional[ProfileListener] = None

    @property
    def player_ref(self) -> Optional[str]:
        return self.profile.player_ref if self.profile else None

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def fetch(self, credentials: Credentials, player_ref: str) -> PlayerProfile:
        """
        Build a profile without touching the active one.

        Raises:
            ConsoleError: On transport or auth failures of the player fetch
        """
        raw = await self.client.get_player(credentials, player_ref)
        raw = raw if isinstance(raw, dict) else {}

        team_name = ''
        team_id = text_value(raw.get('team_id'))
        if team_id:
            try:
                team = await self.client.get_team(credentials, team_id)
                if isinstance(team, dict):
                    team_name = text_value(team.get('name'))
            except ConsoleError as e:
                self.logger.warning(f"Team {team_id} unavailable for {player_ref}: {e.message}")

        return PlayerProfile.from_api(raw, player_ref, team_name=team_name)

    async def load(self, credentials: Credentials, player_ref: str) -> PlayerProfile:
        """Fetch and activate the profile of `player_ref`. Stops polling for any other player."""
        if self._poll_ref is not None and self._poll_ref != player_ref:
            self.stop_polling()
        profile = await self.fetch(credentials, player_ref)
        self.profile = profile
        self.logger.profile_loaded(profile)
        return profile

    def apply(self, profile: PlayerProfile) -> None:
        """Activate an already-fetched profile."""
        if self._poll_ref is not None and self._poll_ref != profile.player_ref:
            self.stop_polling()
        self.profile = profile

    def merge_live(self, player_ref: str, raw) -> bool:
        """
        Merge live fields from a bare player record.

        Returns:
            False if `player_ref` is no longer the active profile (record dropped)
        """
        if self.profile is None or self.profile.player_ref != player_ref:
            self.logger.stale_response("poll", player_ref, self.player_ref)
            return False
        self.profile = self.profile.merge_live(raw)
        return True

    async def poll_once(self, credentials: Credentials, player_ref: str) -> bool:
        """One polling tick. Failures are logged and leave the profile unchanged."""
        try:
            raw = await self.client.get_player(credentials, player_ref)
        except ConsoleError as e:
            self.logger.warning(f"Profile poll for {player_ref} failed: {e.message}")
            return False
        if not self.merge_live(player_ref, raw):
            return False
        if self._listener is not None:
            result = self._listener(self.profile)
            if asyncio.iscoroutine(result):
                await result
        return True

    async def _poll_loop(self, credentials: Credentials, player_ref: str) -> None:
        while self.player_ref == player_ref:
            await asyncio.sleep(self.poll_interval)
            if self.player_ref != player_ref:
                break
            await self.poll_once(credentials, player_ref)

    def start_polling(self, credentials: Credentials, listener: Optional[ProfileListener] = None) -> Optional[asyncio.Task]:
        """
        Start the polling task for the active profile. Must be called from a running loop.

        Any previous task is cancelled first.
        """
        self.stop_polling()
        if self.profile is None:
            return None
        self._poll_ref = self.profile.player_ref
        self._listener = listener
        self._poll_task = asyncio.get_running_loop().create_task(
            self._poll_loop(credentials, self._poll_ref)
        )
        self.logger.debug(f"⏱️  Polling {self._poll_ref} every {self.poll_interval}s")
        return self._poll_task

    def stop_polling(self) -> None:
        if self._poll_task is not None and not self._poll_task.done():
            self._poll_task.cancel()
        self._poll_task = None
        self._poll_ref = None
        self._listener = None

    def clear(self) -> None:
        """Discard the active profile and stop polling."""
        self.stop_polling()
        self.profile = None
