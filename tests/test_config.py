"""Tests for config module."""

import importlib
from pathlib import Path

import dotenv
import pytest

import remind_bot.config as config_mod


@pytest.fixture(autouse=True)
def _restore_config(monkeypatch):
    """Reload config from the unpatched environment after each test."""
    monkeypatch.setattr(dotenv, "load_dotenv", lambda *a, **kw: None)
    yield
    monkeypatch.undo()
    importlib.reload(config_mod)


def test_invalid_missed_oneshot_exits(monkeypatch):
    monkeypatch.setenv("REMIND_BOT_MISSED_ONESHOT", "sometimes")

    with pytest.raises(SystemExit):
        importlib.reload(config_mod)


def test_invalid_misfire_grace_exits(monkeypatch):
    monkeypatch.setenv("REMIND_BOT_MISFIRE_GRACE", "soon")

    with pytest.raises(SystemExit):
        importlib.reload(config_mod)


def test_valid_config_loads(monkeypatch, tmp_path):
    monkeypatch.setenv("REMIND_BOT_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("REMIND_BOT_MISSED_ONESHOT", "SKIP")
    monkeypatch.setenv("REMIND_BOT_GUILD_ID", "1234")

    importlib.reload(config_mod)

    assert config_mod.DATA_DIR == tmp_path
    assert config_mod.MISSED_ONESHOT == "skip"
    assert config_mod.GUILD_ID == 1234
    assert str(config_mod.TZ) == "UTC"


def test_defaults(monkeypatch):
    monkeypatch.delenv("REMIND_BOT_DATA_DIR", raising=False)
    monkeypatch.delenv("REMIND_BOT_MISSED_ONESHOT", raising=False)
    monkeypatch.delenv("REMIND_BOT_GUILD_ID", raising=False)

    importlib.reload(config_mod)

    assert config_mod.DATA_DIR == Path.home() / ".remind-bot"
    assert config_mod.MISSED_ONESHOT == "fire"
    assert config_mod.MISFIRE_GRACE == 60
    assert config_mod.GUILD_ID is None
