"""
Services package - Business logic layer.

Services coordinate between the GameLayer client and the read models:
- CredentialStore: persisted account/API key, gates every network call
- PlayerDirectory: players and teams of the account, player creation
- PlayerProfileAggregator: selected player's profile and live polling
- PlayerHistoryAggregator: completed missions, achievements, prizes, quizzes
- QuizSessionEngine: quiz start/answer/submit state machine
- Boards: per-tab views (missions, prizes, leaderboard, awards, quizzes)
"""

from .boards import AwardsBoard, Board, Leaderboard, MissionBoard, PrizeBoard, QuizBoard
from .credential_store import CredentialStore
from .history_aggregator import PlayerHistory, PlayerHistoryAggregator
from .player_directory import Directory, PlayerDirectory
from .profile_aggregator import PlayerProfileAggregator
from .quiz_session import QuizSession, QuizSessionEngine, QuizState, interpret_feedback

__all__ = [
    'AwardsBoard',
    'Board',
    'CredentialStore',
    'Directory',
    'Leaderboard',
    'MissionBoard',
    'PlayerDirectory',
    'PlayerHistory',
    'PlayerHistoryAggregator',
    'PlayerProfileAggregator',
    'PrizeBoard',
    'QuizBoard',
    'QuizSession',
    'QuizSessionEngine',
    'QuizState',
    'interpret_feedback',
]
