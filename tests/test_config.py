import pytest

from elo_bot.config import Config, EloSettings


def test_elo_settings_snapshot(monkeypatch):
    monkeypatch.setattr(Config, "INITIAL_ELO", 1000.0)
    monkeypatch.setattr(Config, "K_FACTOR", 24.0)
    monkeypatch.setattr(Config, "ELO_SCALE", None)

    settings = Config.elo_settings()
    assert settings == EloSettings(initial_elo=1000.0, k_factor=24.0, scale=None)
    assert settings.logistic_scale == 1000.0


def test_guild_ids(monkeypatch):
    monkeypatch.setattr(Config, "DISCORD_GUILD_IDS", "1, 2,3")
    assert Config.get_guild_ids() == [1, 2, 3]

    monkeypatch.setattr(Config, "DISCORD_GUILD_IDS", "")
    monkeypatch.setattr(Config, "DISCORD_GUILD_ID", 9)
    assert Config.get_guild_ids() == [9]

    monkeypatch.setattr(Config, "DISCORD_GUILD_IDS", "1,x")
    with pytest.raises(ValueError):
        Config.get_guild_ids()


def test_validate_requires_token(monkeypatch):
    monkeypatch.setattr(Config, "DISCORD_TOKEN", None)
    with pytest.raises(ValueError, match="DISCORD_TOKEN"):
        Config.validate()

    monkeypatch.setattr(Config, "DISCORD_TOKEN", "token")
    monkeypatch.setattr(Config, "OWNER_DISCORD_ID", 1)
    monkeypatch.setattr(Config, "K_FACTOR", 0.0)
    with pytest.raises(ValueError, match="K_FACTOR"):
        Config.validate()
