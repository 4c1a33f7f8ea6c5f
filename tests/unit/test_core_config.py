"""Unit tests for the configuration file."""

import json
import sys
from pathlib import Path

import pytest

from keybox.core import config as config_module
from keybox.core.config import Config, default_config_path, default_wallet_dir
from keybox.core.exceptions import ConfigError


def test_defaults():
    config = Config()
    assert config.wallet_default == "default"
    assert config.password_length == 16
    assert config.password_letter is True
    assert config.password_digit is True
    assert config.password_special is False
    assert config.clipboard_timeout == 90
    assert config.select_timeout == 30
    assert config.wallet_dir == str(default_wallet_dir())


def test_default_wallet_dir_per_platform(monkeypatch, tmp_path):
    monkeypatch.setattr(config_module.Path, "home", lambda: tmp_path)

    monkeypatch.setattr(sys, "platform", "linux")
    assert default_wallet_dir() == tmp_path / ".config" / "keybox"
    monkeypatch.setattr(sys, "platform", "darwin")
    assert default_wallet_dir() == tmp_path / "Library" / "Preferences" / "keybox"
    monkeypatch.setattr(sys, "platform", "win32")
    assert default_wallet_dir() == tmp_path / "AppData" / "Local" / "keybox"


def test_default_config_path_env(monkeypatch, tmp_path):
    monkeypatch.setenv("KEYBOX_CONFIG", str(tmp_path / "custom.json"))
    assert default_config_path() == tmp_path / "custom.json"

    monkeypatch.delenv("KEYBOX_CONFIG")
    assert default_config_path() == default_wallet_dir() / "config.json"


def test_wallet_path(tmp_path):
    config = Config(wallet_dir=str(tmp_path))
    assert config.wallet_path() == tmp_path / "default.gpm"
    assert config.wallet_path("work") == tmp_path / "work.gpm"


def test_load_missing_file_gives_defaults(tmp_path):
    assert Config.load(tmp_path / "absent.json") == Config()


def test_save_and_load(tmp_path):
    path = tmp_path / "conf" / "config.json"
    config = Config(wallet_dir=str(tmp_path), wallet_default="perso", password_length=32, password_special=True)
    config.save(path)

    assert Config.load(path) == config
    if not sys.platform.startswith("win"):
        assert path.stat().st_mode & 0o777 == 0o600


def test_load_partial_file_keeps_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"wallet_default": "work", "unknown_key": 1}))

    config = Config.load(path)
    assert config.wallet_default == "work"
    assert config.password_length == 16


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[]",
        json.dumps({"password_length": "16"}),
        json.dumps({"password_length": True}),
        json.dumps({"password_digit": 1}),
    ],
)
def test_load_invalid_file(tmp_path, content):
    path = tmp_path / "config.json"
    path.write_text(content)
    with pytest.raises(ConfigError):
        Config.load(path)


def test_save_unwritable(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(ConfigError, match="cannot write"):
        Config().save(blocker / "config.json")
