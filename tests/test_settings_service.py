from database import DatabaseManager, SettingsService


def test_set_overwrites_and_get_many(settings):
    assert settings.get("account") is None
    settings.set("account", "acme")
    settings.set("account", "globex")

    assert settings.get("account") == "globex"
    assert settings.get_many("account", "api_key") == {"account": "globex", "api_key": None}


def test_values_survive_a_new_manager(tmp_path):
    url = f"sqlite:///{tmp_path / 'console.db'}"
    SettingsService(DatabaseManager(url)).set("selected_player", "p1")

    db = DatabaseManager(url)
    assert db.health_check()
    assert SettingsService(db).get("selected_player") == "p1"
