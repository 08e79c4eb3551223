"""
Clients package - External API integrations.

Handles communication with:
- GameLayer: players, teams, missions, achievements, prizes, streaks,
  leaderboards and quizzes
"""

from .gamelayer_client import GameLayerClient
from .transport import RequestsTransport, Transport, TransportResponse

__all__ = ['GameLayerClient', 'RequestsTransport', 'Transport', 'TransportResponse']
