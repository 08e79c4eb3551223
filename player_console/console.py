"""
Player Console - orchestration of the dashboard state.

Ties the services together behind the operations the dashboard exposes:
1. Store credentials and load the account's player directory
2. Select a player and submit the selection (profile + missions)
3. Activate tabs, each lazily fetching its own board
4. Mutating actions (event completion, prize claim, quiz submission)
   followed by a profile/history refresh

The selected player ref is the key of every stale-response guard: each
player-scoped fetch remembers the ref it was dispatched for and its result
is dropped if the selection has changed by the time it resolves.

Usage:
    console = PlayerConsole(notifier=StreamlitNotifier())
    console.edit_credentials(account="acme", api_key="k1")
    console.store_credentials()
    await console.load_directory()
    console.select_player("p1")
    await console.submit_selection()
"""

import asyncio
from typing import List, Optional

from config.console_config import ConsoleConfig
from player_console.clients.gamelayer_client import GameLayerClient
from player_console.errors import (
    ConsoleError,
    IncompleteAnswers,
    InvalidQuizState,
    MissingCredentials,
    StorageError,
)
from player_console.logging import ConsoleLogger, get_logger
from player_console.models import Credentials, NewPlayer, Player, PlayerProfile, QuizOutcome
from player_console.notifications import ERROR, SUCCESS, WARNING, LoggingNotifier, Notifier
from player_console.services.boards import (
    AwardsBoard,
    Board,
    Leaderboard,
    MissionBoard,
    PrizeBoard,
    QuizBoard,
)
from player_console.services.credential_store import CredentialStore
from player_console.services.history_aggregator import PlayerHistory, PlayerHistoryAggregator
from player_console.services.player_directory import Directory, PlayerDirectory, unique_messages
from player_console.services.profile_aggregator import PlayerProfileAggregator
from player_console.services.quiz_session import QuizSession, QuizSessionEngine, QuizState
from player_console.utils.slug import player_id_from_name

TABS = ("missions", "prizes", "leaderboard", "awards", "player", "quizzes")

SELECT_PLAYER_FIRST = "Select a player first"


class PlayerConsole:
    """
    Main orchestrator for the player console.

    Owns one instance of every service and the current player selection.
    """

    def __init__(
        self,
        store: Optional[CredentialStore] = None,
        client: Optional[GameLayerClient] = None,
        notifier: Optional[Notifier] = None,
        config: Optional[ConsoleConfig] = None,
        logger: Optional[ConsoleLogger] = None,
    ):
        """
        Initialize the console.

        Args:
            store: Credential store (defaults to the shared settings database)
            client: GameLayer client (defaults to a requests-backed one)
            notifier: Sink for user-visible notifications
            config: Console configuration
            logger: Console logger
        """
        self.logger = logger or get_logger()
        if config is None:
            config = client.config if client is not None else ConsoleConfig.from_file()
        self.config = config
        self.client = client or GameLayerClient(config=self.config, logger=self.logger)
        self.store = store or CredentialStore(logger=self.logger)
        self.notifier = notifier or LoggingNotifier(self.logger)

        self.directory = PlayerDirectory(self.client, self.store, self.notifier, self.logger)
        self.profiles = PlayerProfileAggregator(
            self.client, poll_interval=self.config.poll_interval_seconds, logger=self.logger
        )
        self.history_aggregator = PlayerHistoryAggregator(self.client, self.logger)

        board_kwargs = dict(notifier=self.notifier, on_refresh=self.refresh, logger=self.logger)
        self.missions = MissionBoard(self.client, **board_kwargs)
        self.prizes = PrizeBoard(self.client, **board_kwargs)
        self.leaderboard = Leaderboard(self.client, **board_kwargs)
        self.awards = AwardsBoard(self.client, streak_ids=self.config.streak_ids, **board_kwargs)
        self.quizzes = QuizBoard(self.client, **board_kwargs)
        self.quiz = QuizSessionEngine(
            self.client, notifier=self.notifier, on_complete=self.refresh, logger=self.logger
        )

        self.selected_player = self.store.selected_player
        self.history: Optional[PlayerHistory] = None

    # =========================================================================
    # Read models
    # =========================================================================

    @property
    def credentials(self) -> Credentials:
        return self.store.get()

    @property
    def players(self) -> List[Player]:
        return self.directory.players

    @property
    def profile(self) -> Optional[PlayerProfile]:
        return self.profiles.profile

    @property
    def boards(self) -> List[Board]:
        return [self.missions, self.prizes, self.leaderboard, self.awards, self.quizzes]

    def _is_current(self, player_ref: str) -> bool:
        return bool(player_ref) and player_ref == self.selected_player

    # =========================================================================
    # Credentials & directory
    # =========================================================================

    def edit_credentials(self, account: Optional[str] = None, api_key: Optional[str] = None) -> Credentials:
        return self.store.edit(account=account, api_key=api_key)

    def store_credentials(self) -> bool:
        """
        Persist the edited credentials.

        Returns:
            bool: True if the credentials were written and verified
        """
        try:
            self.store.set()
        except (MissingCredentials, StorageError) as e:
            self.notifier.notify(ERROR, e.message)
            return False
        self.notifier.notify(SUCCESS, "Credentials stored")
        return True

    async def load_directory(self) -> Directory:
        """
        Load players and teams, plus the event list used by the missions tab.

        A failure shared by several fetches (a bad API key) is notified once.
        """
        credentials = self.credentials
        if not credentials.is_complete:
            return await self.directory.load(credentials)

        directory, events_error = await asyncio.gather(
            self.directory.load(credentials, notify=False),
            self.missions.fetch_events(credentials, notify=False),
        )
        for message in unique_messages(directory.errors + [events_error]):
            self.notifier.notify(ERROR, message)
        return directory

    async def add_player(self, name: str, avatar: str = '', player_id: Optional[str] = None) -> Optional[Player]:
        """
        Create a player from a display name.

        The id is derived from the name unless given explicitly.

        Returns:
            The created player, or None (already notified)
        """
        name = name.strip()
        player_id = player_id or player_id_from_name(name)
        if not name or not player_id:
            self.notifier.notify(WARNING, "Player name is required")
            return None

        new_player = NewPlayer(id=player_id, name=name, avatar=avatar)
        try:
            player = await self.directory.create_player(self.credentials, new_player)
        except ConsoleError as e:
            self.notifier.notify(ERROR, e.message)
            return None
        self.notifier.notify(SUCCESS, f"Player {player.name} added")
        return player

    # =========================================================================
    # Player selection
    # =========================================================================

    def select_player(self, player_ref: Optional[str]) -> None:
        """
        Change the selected player without fetching anything.

        Everything shown for the previous player is discarded and any of its
        responses still in flight will be dropped.
        """
        player_ref = player_ref or ''
        if player_ref == self.selected_player:
            return

        self.selected_player = player_ref
        self.store.remember_player(player_ref)

        self.profiles.clear()
        self.history = None
        for board in self.boards:
            board.clear()
        self.quiz.reset()
        self.logger.info(f"👤 Selected player: {player_ref or '-'}")

    async def submit_selection(self) -> Optional[PlayerProfile]:
        """
        Load the selected player's profile and missions, then start polling.

        Returns:
            The loaded profile, or None if it failed or went stale
        """
        player_ref = self.selected_player
        if not player_ref:
            self.notifier.notify(WARNING, SELECT_PLAYER_FIRST)
            return None

        credentials = self.credentials
        profile, _ = await asyncio.gather(
            self._load_profile(credentials, player_ref),
            self.missions.fetch(credentials, player_ref),
        )
        if profile is not None:
            self.profiles.start_polling(credentials)
        return profile

    async def _load_profile(self, credentials: Credentials, player_ref: str) -> Optional[PlayerProfile]:
        try:
            profile = await self.profiles.fetch(credentials, player_ref)
        except ConsoleError as e:
            if self._is_current(player_ref):
                self.profiles.clear()
                self.notifier.notify(ERROR, e.message)
            return None

        if not self._is_current(player_ref):
            self.logger.stale_response("profile", player_ref, self.selected_player)
            return None
        self.profiles.apply(profile)
        self.logger.profile_loaded(profile)
        return profile

    async def load_history(self) -> Optional[PlayerHistory]:
        """Load the selected player's history. Each failed resource notifies once."""
        player_ref = self.selected_player
        if not player_ref:
            return None

        history = await self.history_aggregator.load(self.credentials, player_ref)
        if not self._is_current(player_ref):
            self.logger.stale_response("history", player_ref, self.selected_player)
            return None

        self.history = history
        for message in history.errors:
            self.notifier.notify(ERROR, message)
        return history

    # =========================================================================
    # Tabs
    # =========================================================================

    async def activate_tab(self, tab: str) -> None:
        """Fetch the data behind a tab. Player-scoped tabs do nothing without a selection."""
        if tab not in TABS:
            raise ValueError(f"Unknown tab '{tab}'")

        credentials = self.credentials
        player_ref = self.selected_player

        if tab == "leaderboard":
            await self.leaderboard.fetch(credentials, player_ref or None)
        elif tab == "quizzes":
            await self.quizzes.fetch(credentials)
        elif not player_ref:
            return
        elif tab == "missions":
            await self.missions.fetch(credentials, player_ref)
        elif tab == "prizes":
            await self.prizes.fetch(credentials, player_ref)
        elif tab == "awards":
            await self.awards.fetch(credentials, player_ref)
        elif tab == "player":
            await self.load_history()

    async def refresh(self) -> None:
        """Resynchronize profile, missions and history after a mutating action."""
        player_ref = self.selected_player
        if not player_ref:
            return

        credentials = self.credentials
        await asyncio.gather(
            self._load_profile(credentials, player_ref),
            self.missions.fetch(credentials, player_ref),
            self.load_history(),
        )

    # =========================================================================
    # Actions
    # =========================================================================

    def _require_player(self) -> Optional[str]:
        if not self.selected_player:
            self.notifier.notify(WARNING, SELECT_PLAYER_FIRST)
            return None
        return self.selected_player

    async def complete_event(self, event_id: str) -> bool:
        player_ref = self._require_player()
        if player_ref is None:
            return False
        return await self.missions.complete_event(self.credentials, player_ref, event_id)

    async def claim_prize(self, prize_id: str) -> bool:
        player_ref = self._require_player()
        if player_ref is None:
            return False
        return await self.prizes.claim(self.credentials, player_ref, prize_id)

    # ─── Quiz ────────────────

    async def start_quiz(self, quiz_id: str) -> Optional[QuizSession]:
        player_ref = self._require_player()
        if player_ref is None:
            return None
        try:
            return await self.quiz.start(self.credentials, quiz_id, player_ref)
        except InvalidQuizState as e:
            self.notifier.notify(WARNING, e.message)
            return None

    def answer_question(self, question_id: str, choice_id: str) -> None:
        self.quiz.answer(question_id, choice_id)

    def next_question(self) -> bool:
        return self.quiz.next()

    def previous_question(self) -> bool:
        return self.quiz.previous()

    def cancel_quiz(self) -> None:
        if self.quiz.state is QuizState.IN_PROGRESS:
            self.quiz.cancel()

    async def submit_quiz(self) -> Optional[QuizOutcome]:
        """
        Submit the in-progress quiz for the player it was started for.

        Unanswered questions are reported as a warning without any network call.
        """
        try:
            return await self.quiz.submit(self.credentials)
        except IncompleteAnswers as e:
            self.notifier.notify(WARNING, e.message)
            return None

    def shutdown(self) -> None:
        """Stop background polling."""
        self.profiles.stop_polling()
