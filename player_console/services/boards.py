"""
Boards - read-mostly views behind the dashboard tabs.

Each board fetches when its tab is activated and is otherwise passive.
Read failures notify once and leave the board empty; mutating actions
(event completion, prize claim) notify their outcome and call the shared
``on_refresh`` callback on success so profile and history resynchronize.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, TypeVar

from player_console.clients.gamelayer_client import GameLayerClient
from player_console.errors import ConsoleError
from player_console.logging import ConsoleLogger, get_logger
from player_console.models import (
    Achievement,
    Credentials,
    Event,
    LeaderboardEntry,
    Mission,
    Prize,
    Quiz,
    Streak,
    StreakDefinition,
    StreakProgress,
)
from player_console.notifications import ERROR, SUCCESS, LoggingNotifier, Notifier
from player_console.services.normalizer import (
    normalize_achievements,
    normalize_events,
    normalize_leaderboard,
    normalize_missions,
    normalize_prizes,
    normalize_quizzes,
    normalize_streaks,
    records,
)

T = TypeVar("T")
RefreshCallback = Callable[[], Awaitable[None]]


class Board(Generic[T]):
    """Shared loading/notification behaviour of all boards."""

    name = "board"

    def __init__(
        self,
        client: GameLayerClient,
        notifier: Optional[Notifier] = None,
        on_refresh: Optional[RefreshCallback] = None,
        logger: Optional[ConsoleLogger] = None,
    ):
        self.client = client
        self.logger = logger or get_logger()
        self.notifier = notifier or LoggingNotifier(self.logger)
        self.on_refresh = on_refresh
        self.items: List[T] = []
        self.is_loading = False
        # Bumped by clear(); responses dispatched under an older epoch are dropped
        self._epoch = 0

    def _is_stale(self, epoch: int) -> bool:
        if epoch != self._epoch:
            self.logger.debug(f"🗑️  Dropped stale {self.name} response")
            return True
        return False

    async def _load(self, fetch: Awaitable[List[T]]) -> List[T]:
        epoch = self._epoch
        self.is_loading = True
        try:
            items = await fetch
        except ConsoleError as e:
            if self._is_stale(epoch):
                return self.items
            self.notifier.notify(ERROR, e.message)
            items = []
        finally:
            if epoch == self._epoch:
                self.is_loading = False

        if self._is_stale(epoch):
            return self.items
        self.items = items
        self.logger.debug(f"📋 {self.name}: {len(self.items)} items")
        return self.items

    async def _refresh(self) -> None:
        if self.on_refresh is not None:
            await self.on_refresh()

    def clear(self) -> None:
        """Empty the board and drop any response still in flight."""
        self._epoch += 1
        self.items = []
        self.is_loading = False


def _build(factory: Callable[[Dict[str, Any]], Optional[T]], items: List[Any]) -> List[T]:
    built = [factory(raw) for raw in records(items)]
    return [item for item in built if item is not None]


class MissionBoard(Board[Mission]):
    """Missions of the selected player plus the event list used to complete them."""

    name = "missions"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.events: List[Event] = []

    async def fetch(self, credentials: Credentials, player_ref: str) -> List[Mission]:
        return await self._load(self._fetch(credentials, player_ref))

    async def _fetch(self, credentials: Credentials, player_ref: str) -> List[Mission]:
        payload = await self.client.list_missions(credentials, player_ref)
        return _build(Mission.from_api, normalize_missions(payload))

    async def fetch_events(self, credentials: Credentials, notify: bool = True) -> Optional[str]:
        """
        Load the account's events.

        Returns:
            The failure message (events emptied), or None on success
        """
        try:
            payload = await self.client.list_events(credentials)
        except ConsoleError as e:
            self.events = []
            if notify:
                self.notifier.notify(ERROR, e.message)
            return e.message
        self.events = _build(Event.from_api, normalize_events(payload))
        return None

    async def complete_event(self, credentials: Credentials, player_ref: str, event_id: str) -> bool:
        """
        Complete an event for the player.

        Returns:
            True on success; failures are notified and change nothing
        """
        try:
            await self.client.complete_event(credentials, event_id, player_ref)
        except ConsoleError as e:
            self.notifier.notify(ERROR, e.message)
            return False
        self.notifier.notify(SUCCESS, "Success!")
        await self._refresh()
        return True


class PrizeBoard(Board[Prize]):
    """Prizes available to the selected player."""

    name = "prizes"

    async def fetch(self, credentials: Credentials, player_ref: str) -> List[Prize]:
        return await self._load(self._fetch(credentials, player_ref))

    async def _fetch(self, credentials: Credentials, player_ref: str) -> List[Prize]:
        payload = await self.client.list_prizes(credentials, player_ref)
        return _build(Prize.from_api, normalize_prizes(payload))

    async def claim(self, credentials: Credentials, player_ref: str, prize_id: str) -> bool:
        """
        Claim a prize for the player.

        The prize list is refetched whether or not the claim succeeded.

        Returns:
            True on success
        """
        try:
            await self.client.claim_prize(credentials, prize_id, player_ref)
        except ConsoleError as e:
            self.notifier.notify(ERROR, e.message)
            await self.fetch(credentials, player_ref)
            return False

        self.notifier.notify(SUCCESS, "Prize claimed successfully!")
        await asyncio.gather(self.fetch(credentials, player_ref), self._refresh())
        return True


class Leaderboard(Board[LeaderboardEntry]):
    """Fixed leaderboard of the account."""

    name = "leaderboard"

    async def fetch(self, credentials: Credentials, player_ref: Optional[str] = None) -> List[LeaderboardEntry]:
        return await self._load(self._fetch(credentials, player_ref))

    async def _fetch(self, credentials: Credentials, player_ref: Optional[str]) -> List[LeaderboardEntry]:
        payload = await self.client.get_leaderboard(credentials)
        entries = []
        for raw in records(normalize_leaderboard(payload)):
            entry = LeaderboardEntry.from_api(raw, rank=len(entries) + 1, current_ref=player_ref)
            if entry is not None:
                entries.append(entry)
        return entries


class AwardsBoard(Board[Achievement]):
    """
    Achievement catalog and streak progress.

    Streak definitions are fetched for each configured streak id and for
    every streak the player has a record of. A definition without a player
    record gets a synthesized zero-progress record.
    """

    name = "awards"

    def __init__(self, *args, streak_ids: Optional[List[str]] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.streak_ids = list(streak_ids) if streak_ids is not None else list(self.client.config.streak_ids)
        self.streaks: List[Streak] = []

    async def fetch(self, credentials: Credentials, player_ref: str) -> List[Achievement]:
        achievements, _ = await asyncio.gather(
            self._load(self._fetch(credentials)),
            self.fetch_streaks(credentials, player_ref),
        )
        return achievements

    async def _fetch(self, credentials: Credentials) -> List[Achievement]:
        payload = await self.client.list_achievements(credentials)
        return _build(Achievement.from_api, normalize_achievements(payload))

    async def fetch_streaks(self, credentials: Credentials, player_ref: str) -> List[Streak]:
        epoch = self._epoch
        try:
            progress_records = records(normalize_streaks(await self.client.player_streaks(credentials, player_ref)))
            progress_by_id = {str(raw["id"]): raw for raw in progress_records if raw.get("id")}

            streak_ids = list(dict.fromkeys([*self.streak_ids, *progress_by_id]))
            definitions = await asyncio.gather(
                *(self._definition(credentials, streak_id, progress_by_id.get(streak_id)) for streak_id in streak_ids)
            )
        except ConsoleError as e:
            if self._is_stale(epoch):
                return self.streaks
            self.notifier.notify(ERROR, e.message)
            self.streaks = []
            return self.streaks

        if self._is_stale(epoch):
            return self.streaks
        streaks = []
        for definition in definitions:
            if definition is None:
                continue
            raw_progress = progress_by_id.get(definition.id)
            if raw_progress is None:
                streaks.append(Streak(definition=definition, synthesized=True))
            else:
                streaks.append(Streak(definition=definition, progress=StreakProgress.from_api(raw_progress)))
        self.streaks = streaks
        return streaks

    async def _definition(
        self,
        credentials: Credentials,
        streak_id: str,
        progress: Optional[Dict[str, Any]],
    ) -> Optional[StreakDefinition]:
        if progress is not None and (progress.get("countLimit") is not None or progress.get("count_limit") is not None):
            # Player records that already carry the limit double as the definition
            return StreakDefinition.from_api(progress)
        payload = await self.client.get_streak(credentials, streak_id)
        return StreakDefinition.from_api(payload) if isinstance(payload, dict) else None

    def clear(self) -> None:
        super().clear()
        self.streaks = []


class QuizBoard(Board[Quiz]):
    """Quizzes of the account that can be started for the selected player."""

    name = "quizzes"

    async def fetch(self, credentials: Credentials) -> List[Quiz]:
        return await self._load(self._fetch(credentials))

    async def _fetch(self, credentials: Credentials) -> List[Quiz]:
        payload = await self.client.list_quizzes(credentials)
        return _build(Quiz.from_api, normalize_quizzes(payload))
