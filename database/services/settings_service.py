"""
Settings Service for locally persisted console state.

Provides a clean interface between the credential store and the
Setting model. Every write commits before returning.
"""

from typing import Optional

from database.database import DatabaseManager, get_db_manager
from database.models.setting import Setting

ACCOUNT_KEY = "account"
API_KEY_KEY = "api_key"
SELECTED_PLAYER_KEY = "selected_player"


class SettingsService:
    """
    Service for reading and writing settings.

    Usage:
        service = SettingsService()
        service.set("account", "acme")
        service.get("account")  # "acme"
    """

    def __init__(self, db: Optional[DatabaseManager] = None):
        self.db = db or get_db_manager()
        self.db.create_tables()

    def get(self, key: str) -> Optional[str]:
        """
        Read a setting in a fresh session.

        Returns:
            The stored value, or None if the key was never written
        """
        with self.db.session_scope() as session:
            setting = session.get(Setting, key)
            return setting.value if setting is not None else None

    def set(self, key: str, value: str) -> None:
        """Write a setting, creating the row if needed. Commits on return."""
        with self.db.session_scope() as session:
            setting = session.get(Setting, key)
            if setting is None:
                session.add(Setting(key=key, value=value))
            else:
                setting.value = value

    def get_many(self, *keys: str) -> dict:
        """Read several settings at once. Missing keys map to None."""
        with self.db.session_scope() as session:
            rows = session.query(Setting).filter(Setting.key.in_(keys)).all()
            found = {row.key: row.value for row in rows}
        return {key: found.get(key) for key in keys}
