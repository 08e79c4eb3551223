import pytest

from database.services.settings_service import ACCOUNT_KEY, API_KEY_KEY
from player_console.errors import MissingCredentials, StorageError
from player_console.models import Credentials
from player_console.services.credential_store import CredentialStore


def test_fresh_store_is_empty(store):
    assert store.get() == Credentials()
    assert not store.is_stored


def test_set_persists_across_instances(store, settings, credentials):
    store.set(credentials)
    assert store.is_stored

    reopened = CredentialStore(settings)
    assert reopened.get() == credentials
    assert reopened.is_stored


def test_edit_after_store_invalidates(stored):
    stored.edit(api_key="k2")
    assert not stored.is_stored
    assert stored.get().api_key == "k2"

    stored.set()
    assert stored.is_stored


def test_edit_with_same_values_keeps_stored_flag(stored, credentials):
    stored.edit(account=credentials.account, api_key=credentials.api_key)
    assert stored.is_stored


def test_set_rejects_incomplete_credentials(store, settings):
    with pytest.raises(MissingCredentials):
        store.set(Credentials(account="acme"))
    assert not store.is_stored
    assert settings.get(ACCOUNT_KEY) is None


class _LossySettings:
    """Settings that silently drop the API key."""

    def __init__(self, inner):
        self.inner = inner

    def get(self, key):
        return self.inner.get(key)

    def set(self, key, value):
        if key != API_KEY_KEY:
            self.inner.set(key, value)

    def get_many(self, *keys):
        return self.inner.get_many(*keys)


def test_read_back_mismatch_is_storage_error(settings, credentials):
    store = CredentialStore(_LossySettings(settings))
    with pytest.raises(StorageError):
        store.set(credentials)
    assert not store.is_stored


class _BrokenSettings(_LossySettings):
    def set(self, key, value):
        raise OSError("disk full")


def test_write_failure_is_storage_error(settings, credentials):
    store = CredentialStore(_BrokenSettings(settings))
    with pytest.raises(StorageError) as exc:
        store.set(credentials)
    assert "disk full" in exc.value.message
    assert not store.is_stored


def test_selected_player_is_remembered(store, settings):
    assert store.selected_player == ''
    store.remember_player("p1")
    assert CredentialStore(settings).selected_player == "p1"
    store.remember_player(None)
    assert store.selected_player == ''
