"""
Credential Store

Single source of truth for the account and API key. Values are persisted
through the settings service so they survive restarts, and every write is
verified by reading it back.

Editing the account or key after a successful store clears ``is_stored``
until the next explicit ``set()``; mutating operations check that flag.
"""

from typing import Optional

from database.services.settings_service import (
    ACCOUNT_KEY,
    API_KEY_KEY,
    SELECTED_PLAYER_KEY,
    SettingsService,
)
from player_console.errors import MissingCredentials, StorageError
from player_console.logging import ConsoleLogger, get_logger
from player_console.models import Credentials


class CredentialStore:
    """
    Process-wide credential state.

    Usage:
        store = CredentialStore()
        store.edit(account="acme", api_key="k1")
        store.set()             # persists and verifies
        store.get()             # Credentials(account="acme", api_key="k1")
    """

    def __init__(self, settings: Optional[SettingsService] = None, logger: Optional[ConsoleLogger] = None):
        """
        Initialize the store from persisted state.

        Args:
            settings: Settings service to persist through (defaults to the shared database)
            logger: Console logger
        """
        self.settings = settings or SettingsService()
        self.logger = logger or get_logger()

        persisted = self.settings.get_many(ACCOUNT_KEY, API_KEY_KEY)
        self._credentials = Credentials(
            account=persisted[ACCOUNT_KEY] or '',
            api_key=persisted[API_KEY_KEY] or '',
        )
        self.is_stored = self._credentials.is_complete

    def get(self) -> Credentials:
        """Current credentials, stored or not."""
        return self._credentials

    def edit(self, account: Optional[str] = None, api_key: Optional[str] = None) -> Credentials:
        """
        Update the in-memory credentials without persisting them.

        Any actual change invalidates the stored flag.
        """
        updated = Credentials(
            account=self._credentials.account if account is None else account,
            api_key=self._credentials.api_key if api_key is None else api_key,
        )
        if updated != self._credentials:
            self.is_stored = False
        self._credentials = updated
        return updated

    def set(self, credentials: Optional[Credentials] = None) -> None:
        """
        Persist credentials and verify them by reading back.

        Args:
            credentials: Credentials to store (defaults to the in-memory ones)

        Raises:
            MissingCredentials: If the account or API key is empty
            StorageError: If the persisted values do not match after writing
        """
        credentials = credentials or self._credentials
        self._credentials = credentials
        self.is_stored = False

        if not credentials.is_complete:
            raise MissingCredentials()

        try:
            self.settings.set(ACCOUNT_KEY, credentials.account)
            self.settings.set(API_KEY_KEY, credentials.api_key)
            persisted = self.settings.get_many(ACCOUNT_KEY, API_KEY_KEY)
        except Exception as e:
            self.logger.error(f"Credential write failed: {e}")
            raise StorageError(f"Failed to store credentials: {e}") from e

        if persisted[ACCOUNT_KEY] != credentials.account or persisted[API_KEY_KEY] != credentials.api_key:
            self.logger.error("Credential read-back did not match the written values")
            raise StorageError()

        self.is_stored = True
        self.logger.success(f"Stored credentials for account {credentials.account} ({credentials.masked_key()})")

    # ─── Last selected player ────────────────

    @property
    def selected_player(self) -> str:
        """Last selected player ref, persisted independently of the credentials."""
        return self.settings.get(SELECTED_PLAYER_KEY) or ''

    def remember_player(self, player_ref: Optional[str]) -> None:
        self.settings.set(SELECTED_PLAYER_KEY, player_ref or '')
