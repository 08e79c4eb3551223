"""
Streamlit Dashboard Application.

A thin UI over player_console.console.PlayerConsole for:
- Storing account credentials
- Selecting and adding players
- Browsing missions, prizes, leaderboard, awards and history
- Taking quizzes on behalf of a player
"""

__version__ = "0.1.0"
