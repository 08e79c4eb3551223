"""
Player Directory Service

Loads the players and teams of the active account and creates new players.

Players and teams are independent failure domains: a failed team fetch only
empties the team map, a failed player fetch only empties the player list.
The player list is never partially shown. Identical failure messages from
one load are reported once.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from player_console.clients.gamelayer_client import GameLayerClient
from player_console.errors import (
    AlreadyExists,
    ConsoleError,
    CredentialsNotStored,
    NotFound,
    ProbeFailed,
)
from player_console.logging import ConsoleLogger, get_logger
from player_console.models import Credentials, NewPlayer, Player, Team
from player_console.notifications import ERROR, Notifier, LoggingNotifier
from player_console.services.credential_store import CredentialStore
from player_console.services.normalizer import normalize_players, normalize_teams, records


@dataclass
class Directory:
    """
    Players and team names of one account.

    Attributes:
        players: Players in upstream order
        teams: Team id -> team name
        errors: Distinct failure messages of the last load
    """
    players: List[Player] = field(default_factory=list)
    teams: Dict[str, str] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    def team_name(self, team_id: str) -> str:
        return self.teams.get(team_id, '')

    def find(self, player_ref: str) -> Optional[Player]:
        return next((p for p in self.players if p.player_ref == player_ref), None)


def unique_messages(messages: Iterable[Optional[str]]) -> List[str]:
    """Drop empties and repeats, keeping first-seen order."""
    return list(dict.fromkeys(m for m in messages if m))


class PlayerDirectory:
    """
    Service for the account's player list.

    Usage:
        directory = PlayerDirectory(client, store)
        snapshot = await directory.load(store.get())
        player = await directory.create_player(store.get(), NewPlayer(id="ann", name="Ann"))
    """

    def __init__(
        self,
        client: GameLayerClient,
        store: CredentialStore,
        notifier: Optional[Notifier] = None,
        logger: Optional[ConsoleLogger] = None,
    ):
        self.client = client
        self.store = store
        self.logger = logger or get_logger()
        self.notifier = notifier or LoggingNotifier(self.logger)
        self.directory = Directory()

    @property
    def players(self) -> List[Player]:
        return self.directory.players

    @property
    def teams(self) -> Dict[str, str]:
        return self.directory.teams

    async def load(self, credentials: Credentials, notify: bool = True) -> Directory:
        """
        Fetch players and teams for the account.

        Returns an empty directory without any network call when the
        credentials are incomplete. Failures are kept on ``Directory.errors``;
        with ``notify`` each distinct message is surfaced once, so a bad key
        failing both fetches reports a single error.
        """
        if not credentials.is_complete:
            self.directory = Directory()
            return self.directory

        (players, players_error), (teams, teams_error) = await asyncio.gather(
            self._load_players(credentials),
            self._load_teams(credentials),
        )
        errors = unique_messages([players_error, teams_error])
        self.directory = Directory(players=players, teams=teams, errors=errors)
        self.logger.directory_loaded(self.directory)
        if notify:
            for message in errors:
                self.notifier.notify(ERROR, message)
        return self.directory

    async def _load_players(self, credentials: Credentials) -> Tuple[List[Player], Optional[str]]:
        try:
            payload = await self.client.list_players(credentials)
        except ConsoleError as e:
            return [], e.message
        players = [Player.from_api(raw) for raw in records(normalize_players(payload))]
        return [p for p in players if p is not None], None

    async def _load_teams(self, credentials: Credentials) -> Tuple[Dict[str, str], Optional[str]]:
        try:
            payload = await self.client.list_teams(credentials)
        except ConsoleError as e:
            return {}, e.message
        teams = {}
        for raw in records(normalize_teams(payload)):
            team = Team.from_api(raw)
            if team is not None:
                teams[team.id] = team.name
        return teams, None

    async def create_player(self, credentials: Credentials, new_player: NewPlayer) -> Player:
        """
        Create a player after checking that the id is free.

        Args:
            credentials: Credentials to use; must also be stored
            new_player: Requested id, name and avatar

        Returns:
            The created player, already appended to the directory

        Raises:
            CredentialsNotStored: If the credential store has no confirmed credentials
            AlreadyExists: If the id is taken
            ProbeFailed: If the existence check failed for another reason
            ConsoleError: If the create call itself failed
        """
        if not self.store.is_stored:
            raise CredentialsNotStored()

        try:
            await self.client.get_player(credentials, new_player.id)
        except NotFound:
            pass
        except ConsoleError as e:
            raise ProbeFailed(f"Could not check player '{new_player.id}': {e.message}") from e
        else:
            raise AlreadyExists(f"Player '{new_player.id}' already exists")

        payload = await self.client.create_player(credentials, new_player)
        player = Player.from_created(payload, new_player)
        self.directory.players.append(player)
        self.logger.success(f"Created player {player.name} ({player.player_ref})")

        # Pick up server-side canonical fields
        await self.load(credentials)
        return player
