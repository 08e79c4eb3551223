"""
Player History Aggregator

Merges four independent resource histories of one player into display rows:

- missions      GET /players/{ref}/missions
- achievements  GET /players/{ref}/achievements
- prizes        GET /players/{ref}/prizes/redeemed
- quizzes       GET /quizzes, then GET /quizzes/{id}/result for each quiz

The four run concurrently. A failing resource contributes an error message
and an empty list; the other three still complete.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, List, Optional

from player_console.clients.gamelayer_client import GameLayerClient
from player_console.errors import ConsoleError, NotFound
from player_console.logging import ConsoleLogger, get_logger
from player_console.models import Credentials, HistoryRow, number_value
from player_console.services.normalizer import (
    EnvelopeKind,
    normalize_missions,
    normalize_prizes,
    normalize_quizzes,
    records,
    unwrap,
)


@dataclass
class PlayerHistory:
    """
    Completed interactions of one player.

    Attributes:
        player_ref: Player the history was fetched for
        missions: Completed missions
        achievements: Granted achievements
        prizes: Redeemed prizes
        quizzes: Quizzes with at least one completion
        errors: One message per resource that failed to load
    """
    player_ref: str
    missions: List[HistoryRow] = field(default_factory=list)
    achievements: List[HistoryRow] = field(default_factory=list)
    prizes: List[HistoryRow] = field(default_factory=list)
    quizzes: List[HistoryRow] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.missions or self.achievements or self.prizes or self.quizzes)


def _rows(items: List[Any], default_status: str, fallback_date_field: str) -> List[HistoryRow]:
    rows = [HistoryRow.from_record(raw, default_status, fallback_date_field) for raw in records(items)]
    return [row for row in rows if row is not None]


class PlayerHistoryAggregator:
    """
    Service that assembles a PlayerHistory.

    Usage:
        history = await PlayerHistoryAggregator(client).load(credentials, "p1")
        for row in history.missions:
            print(row.name, row.count, row.last_display)
    """

    def __init__(self, client: GameLayerClient, logger: Optional[ConsoleLogger] = None):
        self.client = client
        self.logger = logger or get_logger()

    async def load(self, credentials: Credentials, player_ref: str) -> PlayerHistory:
        history = PlayerHistory(player_ref=player_ref)

        missions, achievements, prizes, quizzes = await asyncio.gather(
            self._guarded(history, self.fetch_missions(credentials, player_ref)),
            self._guarded(history, self.fetch_achievements(credentials, player_ref)),
            self._guarded(history, self.fetch_prizes(credentials, player_ref)),
            self._guarded(history, self.fetch_quizzes(credentials, player_ref)),
        )
        history.missions = missions
        history.achievements = achievements
        history.prizes = prizes
        history.quizzes = quizzes

        self.logger.history_summary(player_ref, history)
        return history

    async def _guarded(self, history: PlayerHistory, fetch: Awaitable[List[HistoryRow]]) -> List[HistoryRow]:
        try:
            return await fetch
        except ConsoleError as e:
            history.errors.append(e.message)
            return []

    # =========================================================================
    # Resources
    # =========================================================================

    async def fetch_missions(self, credentials: Credentials, player_ref: str) -> List[HistoryRow]:
        payload = await self.client.player_missions(credentials, player_ref)
        return _rows(normalize_missions(payload), "completed", "completed_at")

    async def fetch_achievements(self, credentials: Credentials, player_ref: str) -> List[HistoryRow]:
        payload = await self.client.player_achievements(credentials, player_ref)
        envelope = unwrap(payload, "achievements")
        items = records(envelope.items)
        if envelope.kind is not EnvelopeKind.COMPLETED:
            # Flat lists mix granted and in-progress achievements
            items = [raw for raw in items if raw.get("status") == "granted"]
        return _rows(items, "granted", "granted_at")

    async def fetch_prizes(self, credentials: Credentials, player_ref: str) -> List[HistoryRow]:
        payload = await self.client.player_prizes(credentials, player_ref)
        return _rows(normalize_prizes(payload), "redeemed", "redeemed_at")

    async def fetch_quizzes(self, credentials: Credentials, player_ref: str) -> List[HistoryRow]:
        """
        Two-phase quiz history.

        The result fetches depend on the quiz list, so they are only issued
        once the list has resolved. A 404 result means the player never took
        the quiz.
        """
        quizzes = [
            raw for raw in records(normalize_quizzes(await self.client.list_quizzes(credentials)))
            if raw.get("id")
        ]
        results = await asyncio.gather(
            *(self._quiz_result(credentials, str(raw["id"]), player_ref) for raw in quizzes)
        )

        rows = []
        for raw, result in zip(quizzes, results):
            if not isinstance(result, dict):
                continue
            # Results either nest the action record or are the action record
            actions = result.get("actions") if isinstance(result.get("actions"), dict) else result
            if not number_value(actions.get("count")):
                continue
            row = HistoryRow.from_record(raw, "completed", actions=actions)
            if row is not None:
                rows.append(row)
        return rows

    async def _quiz_result(self, credentials: Credentials, quiz_id: str, player_ref: str) -> Optional[Any]:
        try:
            return await self.client.quiz_result(credentials, quiz_id, player_ref)
        except NotFound:
            return None
