"""
Database services package.

Business logic for reading and writing persisted console state.
"""

from database.services.settings_service import SettingsService, ACCOUNT_KEY, API_KEY_KEY, SELECTED_PLAYER_KEY

__all__ = ['SettingsService', 'ACCOUNT_KEY', 'API_KEY_KEY', 'SELECTED_PLAYER_KEY']
